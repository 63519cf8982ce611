"""Tests for the ordered pipeline: static files, routes and the error stage."""

from fastapi import APIRouter


def test_index_always_fails_with_error_message(client):
    response = client.get("/")
    assert response.status_code == 500
    assert response.text == "Error"
    assert response.headers["content-type"].startswith("text/plain")


def test_index_fails_every_time(client):
    for _ in range(3):
        assert client.get("/").text == "Error"


def test_index_html_is_not_served_for_root(client, static_dir):
    assert (static_dir / "index.html").exists()
    response = client.get("/")
    assert response.status_code == 500


def test_static_file_served(client):
    response = client.get("/hello.txt")
    assert response.status_code == 200
    assert response.text == "hello static"


def test_static_file_head(client):
    response = client.head("/hello.txt")
    assert response.status_code == 200


def test_unknown_path_falls_through_to_routes(client):
    response = client.get("/missing.txt")
    assert response.status_code == 404


def test_static_is_only_for_get_and_head(client):
    response = client.post("/hello.txt")
    assert response.status_code in (404, 405)


def test_static_does_not_escape_directory(client):
    response = client.get("/../conftest.py")
    assert response.status_code == 404


def test_missing_static_directory_falls_through(monkeypatch, tmp_path, session_db):
    import config
    from fastapi.testclient import TestClient
    from main import create_app

    monkeypatch.setattr(config, "STATIC_DIR", str(tmp_path / "nope"))
    with TestClient(create_app()) as client:
        assert client.get("/hello.txt").status_code == 404
        assert client.get("/").text == "Error"


def test_error_handler_uses_exception_message(app):
    from fastapi.testclient import TestClient

    router = APIRouter()

    @router.get("/boom")
    async def boom():
        raise RuntimeError("something broke")

    app.include_router(router)
    with TestClient(app) as client:
        response = client.get("/boom")
    assert response.status_code == 500
    assert response.text == "something broke"


def test_http_exceptions_keep_their_status(client):
    # Unmatched routes never reach the error stage
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}
