from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.staticfiles import StaticFiles


class StaticFilesMiddleware(BaseHTTPMiddleware):
    """
    Serve files from a directory ahead of every route.

    Only GET and HEAD are answered here; anything that does not resolve to a
    file (directories included, so "/" never serves an index page) falls
    through to the rest of the pipeline.
    """

    def __init__(self, app, directory: str):
        super().__init__(app)
        self.files = StaticFiles(directory=directory, check_dir=False)

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method not in ("GET", "HEAD"):
            return await call_next(request)

        try:
            path = self.files.get_path(request.scope)
            return await self.files.get_response(path, request.scope)
        except HTTPException:
            return await call_next(request)
