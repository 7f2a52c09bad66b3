"""Async engine, session factory and schema bootstrap."""

from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateIndex, CreateTable

from audio2features.config import settings
from audio2features.core.database.base import Base

# asyncpg raises OSError (e.g. ConnectionRefusedError) for an unreachable server without wrapping
DATABASE_ERRORS = (SQLAlchemyError, OSError)


def build_engine(database_url: str) -> AsyncEngine | None:
    """Create an engine for the URL; an empty URL means no relational store."""
    if not database_url:
        return None
    return create_async_engine(database_url, echo=False, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.database_url)
async_session_factory = build_session_factory(engine) if engine is not None else None


def get_session_factory() -> async_sessionmaker[AsyncSession] | None:
    """FastAPI dependency: the session factory, or None when persistence is disabled."""
    return async_session_factory


async def ensure_schema(conn: AsyncConnection) -> None:
    """
    Create all tables and indexes if they are absent.

    Uses IF NOT EXISTS DDL rather than a check-then-create, so concurrent
    requests racing to create the same table do not fail.
    """
    # Register models on Base.metadata
    from audio2features.core.feature_requests import models  # noqa: F401

    for table in Base.metadata.sorted_tables:
        await conn.execute(CreateTable(table, if_not_exists=True))
        for index in table.indexes:
            await conn.execute(CreateIndex(index, if_not_exists=True))
