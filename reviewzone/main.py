"""
ReviewZone login backend.

FastAPI application serving the login form's throttle status and sign-in,
with structured logging and error handling.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reviewzone import __version__
from reviewzone.api import auth_router, health_router
from reviewzone.auth import SqlAttemptStore, SupabaseAuthenticator
from reviewzone.config import get_settings
from reviewzone.core import get_logger, setup_logging
from reviewzone.core.middleware import RequestContextMiddleware, setup_exception_handlers
from reviewzone.db import dispose_engine, get_session_factory, init_db, reset_session_factory

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        json_output=not settings.debug,
        log_file=settings.log_file or None,
    )
    logger.info(
        "Starting ReviewZone backend",
        data={"environment": settings.environment, "debug": settings.debug},
    )

    # Stores and the authenticator may be injected before startup (tests).
    if not hasattr(app.state, "attempt_store"):
        init_db()
        app.state.attempt_store = SqlAttemptStore(get_session_factory())

    authenticator_created = False
    if not hasattr(app.state, "authenticator"):
        if settings.supabase_url:
            app.state.authenticator = SupabaseAuthenticator(
                settings.supabase_url,
                settings.supabase_anon_key,
                timeout_seconds=settings.auth_timeout_seconds,
            )
            authenticator_created = True
        else:
            app.state.authenticator = None
            logger.warning("SUPABASE_URL not set - sign-in is disabled")

    yield

    logger.info("Shutting down ReviewZone backend")
    if authenticator_created:
        await app.state.authenticator.aclose()
    dispose_engine()
    reset_session_factory()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="ReviewZone",
        description="Login throttling and sign-in for the ReviewZone dashboard",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    setup_exception_handlers(app)

    app.add_middleware(
        RequestContextMiddleware,
        cookie_name=settings.client_id_cookie_name,
        cookie_max_age=settings.client_id_ttl_seconds,
        cookie_secure=settings.cookie_secure if settings.is_production else False,
        cookie_samesite=settings.cookie_samesite,
    )

    app.include_router(health_router)
    app.include_router(auth_router)

    return app


app = create_app()
