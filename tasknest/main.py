import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from tasknest.config import DEFAULT_SECRET_KEY, Settings, load_settings
from tasknest.database import Base, make_engine, make_session_factory
from tasknest.logging_setup import setup_logging
from tasknest.models import friend, task, user  # noqa: F401  register tables on Base
from tasknest.routers import auth, dashboard, friends, health, tasks
from tasknest.utils import errors
from tasknest.utils.errors import ApiError
from tasknest.utils.response import send_error, send_success

logger = logging.getLogger(__name__)


def _validation_errors(exc: RequestValidationError) -> dict:
    """Group pydantic errors into {field: [messages]}."""
    out = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")]
        field = ".".join(loc) or "body"
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.setdefault(field, []).append(msg)
    return out


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s", request.method, request.url.path, exc.message)
        return send_error(exc.message, exc.status_code, exc.code, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return send_error(errors.MSG_VALIDATION_ERROR, 400, errors.VALIDATION_ERROR, _validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return send_error(errors.MSG_NOT_FOUND, 404, errors.NOT_FOUND)
        return send_error(str(exc.detail), exc.status_code)

    # Generic error handler to return JSON errors for unexpected exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        message = errors.MSG_INTERNAL_ERROR if settings.is_production else str(exc) or errors.MSG_INTERNAL_ERROR
        return send_error(message, 500, errors.INTERNAL_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and everything it owns.

    Engine, session factory and settings live on ``app.state`` for the
    lifetime of the app; nothing is kept at module level.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    if settings.is_production and settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning("Using default SECRET_KEY in production; set SECRET_KEY in the environment")

    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="tasknest")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    _register_error_handlers(app, settings)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(friends.router)
    app.include_router(tasks.router)
    app.include_router(dashboard.router)

    @app.get("/", include_in_schema=False)
    def root():
        return send_success({"name": "tasknest", "documentation": "/docs"}, "Welcome to the API")

    logger.info("app ready env=%s db=%s", settings.environment, engine.url.render_as_string(hide_password=True))
    return app


def main() -> None:
    import uvicorn

    uvicorn.run("tasknest.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
