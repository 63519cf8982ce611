"""
Pytest fixtures. Each test gets its own static and upload directories and a
fresh session table; the app is rebuilt so config overrides take effect.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def static_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    (path / "hello.txt").write_text("hello static")
    (path / "index.html").write_text("<h1>index</h1>")
    return path


@pytest.fixture
def session_db():
    """Recreate the sessions table on the shared in-memory engine."""
    from database import Base, engine
    from models.session_db_model import SessionDB  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def app(monkeypatch, upload_dir, static_dir, session_db):
    import config

    monkeypatch.setattr(config, "UPLOAD_DIR", str(upload_dir))
    monkeypatch.setattr(config, "STATIC_DIR", str(static_dir))
    monkeypatch.setattr(config, "UPLOAD_MAX_BYTES", 1024)
    monkeypatch.setattr(config, "BODY_LIMIT_BYTES", 2048)
    monkeypatch.setattr(config, "SECRET", "test-secret")
    monkeypatch.setattr(config, "SESSION_RESAVE", False)
    monkeypatch.setattr(config, "SESSION_SAVE_UNINITIALIZED", False)

    from main import create_app

    return create_app()


@pytest.fixture
def client(app):
    """FastAPI TestClient with lifespan, so the session table is created on startup."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
