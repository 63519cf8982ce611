from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from database import SessionLocal
from models.session_db_model import SessionDB


def _now() -> datetime:
    # Naive UTC, matching what SQLite hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def load_session(session_id: str) -> Optional[Dict[str, Any]]:
    """
    Return the stored data for a session, or None when it is unknown or expired.
    Expired rows are deleted on the way out.
    """
    db = SessionLocal()
    try:
        row = db.get(SessionDB, session_id)
        if row is None:
            return None
        if row.expires_at is not None and row.expires_at <= _now():
            db.delete(row)
            db.commit()
            return None
        return dict(row.data or {})
    finally:
        db.close()


def save_session(session_id: str, data: Dict[str, Any], max_age: int) -> None:
    db = SessionLocal()
    try:
        row = db.get(SessionDB, session_id)
        expires_at = _now() + timedelta(seconds=max_age)
        if row is None:
            db.add(SessionDB(session_id=session_id, data=dict(data), expires_at=expires_at))
        else:
            # Assign a fresh dict so the JSON column is flagged dirty
            row.data = dict(data)
            row.expires_at = expires_at
        db.commit()
    finally:
        db.close()


def destroy_session(session_id: str) -> bool:
    db = SessionLocal()
    try:
        deleted = db.query(SessionDB).filter(SessionDB.session_id == session_id).delete()
        db.commit()
        return deleted > 0
    finally:
        db.close()


def purge_expired_sessions() -> int:
    db = SessionLocal()
    try:
        deleted = db.query(SessionDB).filter(SessionDB.expires_at <= _now()).delete()
        db.commit()
        return deleted
    finally:
        db.close()
