"""
Cookie decoding and signing.

Signed cookies look like ``s:<value>.<signature>`` where the signature is an
HMAC-SHA256 over the value keyed by the shared secret. Cookies prefixed with
``j:`` carry JSON.
"""

import hashlib
import json
from typing import Any, Dict, Optional, Tuple, Union

from itsdangerous import BadSignature, Signer
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

SIGNED_PREFIX = "s:"
JSON_PREFIX = "j:"


def _signer(secret: str) -> Signer:
    return Signer(secret, salt="cookie", digest_method=hashlib.sha256)


def sign_cookie(value: str, secret: str) -> str:
    return SIGNED_PREFIX + _signer(secret).sign(value).decode("utf-8")


def unsign_cookie(value: str, secret: str) -> Optional[str]:
    """Return the original value of a signed cookie, or None if it was tampered with."""
    if not value.startswith(SIGNED_PREFIX):
        return None
    try:
        return _signer(secret).unsign(value[len(SIGNED_PREFIX):]).decode("utf-8")
    except BadSignature:
        return None


def _decode_json_cookie(value: str) -> Any:
    if not value.startswith(JSON_PREFIX):
        return value
    try:
        return json.loads(value[len(JSON_PREFIX):])
    except ValueError:
        return value


def parse_cookies(
    raw: Dict[str, str], secret: Optional[str]
) -> Tuple[Dict[str, Any], Dict[str, Union[Any, bool]]]:
    """
    Split request cookies into plain and signed mappings.
    A signed cookie whose signature does not verify maps to False.
    """
    cookies: Dict[str, Any] = {}
    signed: Dict[str, Union[Any, bool]] = {}

    for name, value in raw.items():
        if secret and value.startswith(SIGNED_PREFIX):
            original = unsign_cookie(value, secret)
            signed[name] = _decode_json_cookie(original) if original is not None else False
        else:
            cookies[name] = _decode_json_cookie(value)

    return cookies, signed


def set_signed_cookie(response: Response, key: str, value: str, secret: str, **kwargs) -> None:
    response.set_cookie(key, sign_cookie(value, secret), **kwargs)


class CookieParserMiddleware(BaseHTTPMiddleware):
    """Expose ``request.state.cookies`` and ``request.state.signed_cookies``."""

    def __init__(self, app, secret: Optional[str] = None):
        super().__init__(app)
        self.secret = secret

    async def dispatch(self, request: Request, call_next) -> Response:
        cookies, signed = parse_cookies(request.cookies, self.secret)
        request.state.cookies = cookies
        request.state.signed_cookies = signed
        request.state.secret = self.secret
        return await call_next(request)
