"""
Server-side sessions keyed by a signed cookie.

The cookie only carries the session id; data lives in the session store
(services.session_service). Sessions are created lazily: a fresh session is
stored and sent to the client only once it holds data, unless
save_uninitialized is set.
"""

import json
import secrets
from typing import Any, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from logger import get_logger
from middlewares.cookie_parser import sign_cookie, unsign_cookie
from services.session_service import destroy_session, load_session, save_session

logger = get_logger(__name__)


def generate_session_id() -> str:
    return secrets.token_urlsafe(24)


def _fingerprint(data: Dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, default=str)


class Session(dict):
    """Per-client mapping with an id; modification is detected by content."""

    def __init__(self, session_id: str, data: Optional[Dict[str, Any]] = None, is_new: bool = True):
        super().__init__(data or {})
        self.id = session_id
        self.is_new = is_new
        self.destroyed = False
        self._original = _fingerprint(self)

    @property
    def modified(self) -> bool:
        return _fingerprint(self) != self._original

    def destroy(self) -> None:
        self.clear()
        self.destroyed = True


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        secret: str,
        cookie_name: str,
        max_age: int = 24 * 60 * 60,
        resave: bool = False,
        save_uninitialized: bool = False,
        http_only: bool = True,
        secure: bool = False,
    ):
        super().__init__(app)
        self.secret = secret
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.resave = resave
        self.save_uninitialized = save_uninitialized
        self.http_only = http_only
        self.secure = secure

    def _load(self, request: Request) -> Session:
        raw = request.cookies.get(self.cookie_name)
        session_id = unsign_cookie(raw, self.secret) if raw else None
        if session_id:
            data = load_session(session_id)
            if data is not None:
                return Session(session_id, data, is_new=False)
        return Session(generate_session_id())

    async def dispatch(self, request: Request, call_next) -> Response:
        session = self._load(request)
        request.state.session = session
        request.state.session_id = session.id

        response = await call_next(request)

        if session.destroyed:
            if not session.is_new:
                destroy_session(session.id)
                logger.debug("session_destroyed", session_id=session.id)
            response.delete_cookie(self.cookie_name, path="/", secure=self.secure, httponly=self.http_only)
            return response

        if session.is_new:
            if session.modified or self.save_uninitialized:
                save_session(session.id, session, self.max_age)
                self._send_cookie(response, session)
                logger.debug("session_created", session_id=session.id)
        elif session.modified or self.resave:
            save_session(session.id, session, self.max_age)
            # Store expiry moved forward; keep the cookie's Max-Age in step
            self._send_cookie(response, session)

        return response

    def _send_cookie(self, response: Response, session: Session) -> None:
        response.set_cookie(
            self.cookie_name,
            sign_cookie(session.id, self.secret),
            max_age=self.max_age,
            path="/",
            secure=self.secure,
            httponly=self.http_only,
        )
