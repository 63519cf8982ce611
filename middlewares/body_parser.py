"""
Request body decoders: JSON, URL-encoded, raw buffer and plain text.

Each decoder claims one content type. A matching body is read, checked
against the size limit and decoded into ``request.state.body``; any other
request (multipart included) passes through untouched with an empty body.
"""

import json
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import parse_qsl

from python_multipart.multipart import parse_options_header
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from logger import get_logger

logger = get_logger(__name__)


class BodyParserError(Exception):
    """Raised when a claimed body cannot be decoded."""


class PayloadTooLargeError(BodyParserError):
    def __init__(self, limit: int):
        super().__init__("request entity too large")
        self.limit = limit


def parse_content_type(header: str) -> Tuple[str, Dict[str, str]]:
    media_type, options = parse_options_header(header)
    params = {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in options.items()}
    return media_type.decode("latin-1").lower(), params


def _to_text(body: bytes, charset: str) -> str:
    try:
        return body.decode(charset)
    except LookupError as e:
        raise BodyParserError(f'unsupported charset "{charset.upper()}"') from e
    except UnicodeDecodeError as e:
        raise BodyParserError(str(e)) from e


def decode_json(body: bytes, charset: str) -> Any:
    text = _to_text(body, charset).strip()
    if not text:
        return {}
    # Strict mode: only objects and arrays at the top level
    if text[0] not in "{[":
        raise BodyParserError(f"Unexpected token {text[0]!r} in JSON at position 0")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise BodyParserError(str(e)) from e


def decode_urlencoded(body: bytes, charset: str) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    for key, value in parse_qsl(_to_text(body, charset), keep_blank_values=True):
        if key in parsed:
            existing = parsed[key]
            parsed[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            parsed[key] = value
    return parsed


def decode_raw(body: bytes, charset: str) -> bytes:
    return body


def decode_text(body: bytes, charset: str) -> str:
    return _to_text(body, charset)


DECODERS: Dict[str, Callable[[bytes, str], Any]] = {
    "application/json": decode_json,
    "application/x-www-form-urlencoded": decode_urlencoded,
    "application/octet-stream": decode_raw,
    "text/plain": decode_text,
}


def find_decoder(media_type: str) -> Optional[Callable[[bytes, str], Any]]:
    return DECODERS.get(media_type)


class BodyParserMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limit: int = 100 * 1024):
        super().__init__(app)
        self.limit = limit

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.body = {}

        media_type, params = parse_content_type(request.headers.get("content-type", ""))
        decoder = find_decoder(media_type)
        if decoder is None:
            return await call_next(request)

        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.limit:
            raise PayloadTooLargeError(self.limit)

        body = await request.body()
        if len(body) > self.limit:
            raise PayloadTooLargeError(self.limit)

        request.state.body = decoder(body, params.get("charset", "utf-8"))
        logger.debug("body_parsed", media_type=media_type, length=len(body))
        return await call_next(request)
