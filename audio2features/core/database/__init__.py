"""Database configuration and models."""

from audio2features.core.database.base import Base, TimestampMixin, UUIDMixin
from audio2features.core.database.session import (
    async_session_factory,
    engine,
    ensure_schema,
    get_session_factory,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "engine",
    "async_session_factory",
    "ensure_schema",
    "get_session_factory",
]
