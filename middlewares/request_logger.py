"""
Request logging stages.

RequestLoggerMiddleware writes one line per finished request in the compact
development format: method, path, status, response time, content length.
EveryRequestMiddleware is a plain pass-through that announces each request.
"""

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from logger import get_logger

logger = get_logger(__name__)


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"{request.method} {request.url.path} - {duration_ms:.3f} ms",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 3),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        content_length = response.headers.get("content-length", "-")
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.3f} ms - {content_length}",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 3),
        )
        return response


class EveryRequestMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger.info("run every request", path=request.url.path)
        return await call_next(request)
