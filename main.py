from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware import Middleware

import config
from database import Base, engine
from logger import get_logger
from middlewares.body_parser import BodyParserMiddleware
from middlewares.cookie_parser import CookieParserMiddleware
from middlewares.error_handler import ErrorHandlerMiddleware
from middlewares.request_logger import EveryRequestMiddleware, RequestLoggerMiddleware
from middlewares.session import SessionMiddleware
from middlewares.static_files import StaticFilesMiddleware
from models.session_db_model import SessionDB  # noqa: F401  registers the table
from routers import index_router, upload_router
from services.session_service import purge_expired_sessions

logger = get_logger(__name__)


def create_db():
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db()
    purged = purge_expired_sessions()
    logger.info("server_ready", port=config.PORT, purged_sessions=purged)
    yield


def build_middleware() -> list:
    """
    The request pipeline, outermost first.

    The error handler wraps everything after the request logger so that a
    failure anywhere below still reaches the log line as a 500.
    """
    return [
        Middleware(RequestLoggerMiddleware),
        Middleware(ErrorHandlerMiddleware),
        Middleware(StaticFilesMiddleware, directory=config.STATIC_DIR),
        Middleware(BodyParserMiddleware, limit=config.BODY_LIMIT_BYTES),
        Middleware(CookieParserMiddleware, secret=config.SECRET),
        Middleware(
            SessionMiddleware,
            secret=config.SECRET,
            cookie_name=config.SESSION_COOKIE_NAME,
            max_age=config.SESSION_MAX_AGE,
            resave=config.SESSION_RESAVE,
            save_uninitialized=config.SESSION_SAVE_UNINITIALIZED,
            http_only=True,
            secure=config.SESSION_SECURE,
        ),
        Middleware(EveryRequestMiddleware),
    ]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Middleware Pipeline Server",
        description="HTTP server assembled from stock middleware stages.",
        version="0.1.0",
        lifespan=lifespan,
        middleware=build_middleware(),
    )
    app.include_router(index_router.router)
    app.include_router(upload_router.router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
