"""FastAPI application factory."""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from audio2features import __version__
from audio2features.api.v1.router import api_router
from audio2features.config import settings
from audio2features.core.ai.providers import close_ai_provider
from audio2features.core.database import session as db_session_module
from audio2features.core.database.session import DATABASE_ERRORS, ensure_schema, get_session_factory
from audio2features.core.errors import APIError, api_error_handler
from audio2features.core.logging import LoggingMiddleware, get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifecycle management."""

    # === STARTUP ===
    setup_logging(settings)

    logger = get_logger(__name__)
    logger.info("application_starting", app_name=settings.app_name, environment=settings.app_env)

    engine = db_session_module.engine
    if engine is None:
        logger.warning("database_disabled", reason="empty_database_url")
    else:
        # Startup continues without a database; persistence is best-effort
        try:
            async with engine.begin() as conn:
                await ensure_schema(conn)
            logger.info("database_schema_ready")
        except DATABASE_ERRORS as e:
            logger.error("database_schema_failed", error=str(e))

    app.state._start_time = time.time()
    logger.info("application_started_successfully", app_name=settings.app_name)

    yield

    # === SHUTDOWN ===
    logger.info("application_shutting_down", app_name=settings.app_name)
    await close_ai_provider()
    if engine is not None:
        await engine.dispose()
    logger.info(
        "application_shutdown_complete",
        uptime_seconds=round(time.time() - app.state._start_time, 2),
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Transcribes uploaded audio feedback and extracts structured feature requests",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (adds correlation IDs and request context)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(APIError, api_error_handler)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check(
        session_factory: Annotated[
            async_sessionmaker[AsyncSession] | None, Depends(get_session_factory)
        ],
    ) -> dict:
        """Liveness plus a database ping. NO AUTH REQUIRED."""
        logger = get_logger(__name__)

        db_status = "disabled"
        db_latency = None
        if session_factory is not None:
            try:
                db_start = time.time()
                async with session_factory() as session:
                    await session.execute(text("SELECT 1"))
                db_latency = round((time.time() - db_start) * 1000, 2)
                db_status = "connected"
            except DATABASE_ERRORS as e:
                db_status = "error"
                logger.error("health_database_failed", error=str(e))

        if not hasattr(app.state, "_start_time"):
            app.state._start_time = time.time()

        return {
            "status": "degraded" if db_status == "error" else "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(time.time() - app.state._start_time, 2),
            "version": __version__,
            "environment": settings.app_env,
            "database": {
                "status": db_status,
                "latency_ms": db_latency,
            },
        }

    return app


app = create_app()
