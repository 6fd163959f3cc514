"""
Media Ratings Platform API — FastAPI application entry point.

Routers are registered here. Each resource lives in app/api/.
The storage session factory is passed in explicitly so tests can swap in an
in-memory database; ``app`` below is the production instance.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import auth, media, ratings, users
from app.core.config import settings
from app.core.errors import ServiceError, Unauthenticated
from app.core.logging import configure_logging
from app.db.session import build_session_factory
from app.deps.auth import authenticate_request

logger = logging.getLogger(__name__)


def _error(message: str, status_code: int, headers: dict | None = None) -> JSONResponse:
    """Standard error envelope."""
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


# Everything under /api except register/login requires a bearer token
PUBLIC_PATH_PREFIXES = ("/api/auth/",)


def _is_protected(path: str) -> bool:
    return path.startswith("/api/") and not path.startswith(PUBLIC_PATH_PREFIXES)


# ── Exception handlers ────────────────────────────────────────────────────────

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _error(exc.message, exc.status_code, headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown paths (404) and wrong verbs on known paths (405) land here
    return _error(str(exc.detail), exc.status_code, getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The body is parsed before route dependencies run; callers of protected
    # routes must still see 401 ahead of any 400 about their payload
    if _is_protected(request.url.path):
        try:
            await authenticate_request(request)
        except Unauthenticated as auth_exc:
            return await service_error_handler(request, auth_exc)

    errors = exc.errors()
    if not errors:
        return _error("Invalid request", status.HTTP_400_BAD_REQUEST)

    first = errors[0]
    if first.get("type") == "json_invalid":
        return _error("Invalid JSON format", status.HTTP_400_BAD_REQUEST)

    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return _error(f"{field}: {message}" if field else message, status.HTTP_400_BAD_REQUEST)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


# ── Factory ───────────────────────────────────────────────────────────────────

def create_app(session_factory: sessionmaker | None = None) -> FastAPI:
    """Build the API around *session_factory* (defaults to settings.DATABASE_URL)."""
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Media Ratings Platform API",
        description="Catalogue media, rate it, favourite it, and like other users' ratings.",
        version="1.0.0",
        docs_url="/docs" if settings.ENABLE_DOCS else None,
        redoc_url="/redoc" if settings.ENABLE_DOCS else None,
    )
    app.state.session_factory = session_factory or build_session_factory(
        settings.DATABASE_URL,
        echo=settings.is_dev,
    )

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ────────────────────────────────────────────────────────────────
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router,    prefix="/api/auth",    tags=["auth"])
    app.include_router(media.router,   prefix="/api/media",   tags=["media"])
    app.include_router(ratings.router, prefix="/api/ratings", tags=["ratings"])
    app.include_router(users.router,   prefix="/api",         tags=["users"])

    # ── Health check ──────────────────────────────────────────────────────────
    @app.get("/health", tags=["system"])
    def health_check() -> dict:
        """Liveness probe. Returns 200 when the server is up."""
        return {"status": "ok", "service": "Media Ratings Platform", "env": settings.APP_ENV}

    return app


app = create_app()


def run() -> None:
    """Serve ``app`` with uvicorn on settings.PORT."""
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
