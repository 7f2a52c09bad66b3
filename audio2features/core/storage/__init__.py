"""Object storage for uploaded audio bytes."""

from audio2features.config import Settings, settings
from audio2features.core.logging import get_logger
from audio2features.core.storage.base import (
    ObjectStore,
    StorageError,
    safe_filename,
    upload_key,
)
from audio2features.core.storage.local import LocalObjectStore

logger = get_logger(__name__)


def build_object_store(config: Settings) -> ObjectStore | None:
    """Create the configured store; None disables storage."""
    storage_type = config.storage_type.lower()

    if storage_type == "local":
        return LocalObjectStore(config.storage_local_path)

    if storage_type == "s3":
        if not config.aws_s3_bucket:
            logger.warning("object_store_unavailable", storage_type=storage_type, reason="missing_bucket")
            return None
        from audio2features.core.storage.s3 import S3ObjectStore

        return S3ObjectStore(
            bucket=config.aws_s3_bucket,
            region=config.aws_s3_region,
            access_key_id=config.aws_access_key_id,
            secret_access_key=config.aws_secret_access_key,
        )

    if storage_type != "none":
        logger.warning("object_store_unknown", storage_type=storage_type)
    return None


_store: ObjectStore | None = None
_store_built = False


def get_object_store() -> ObjectStore | None:
    """FastAPI dependency: the process-wide object store."""
    global _store, _store_built
    if not _store_built:
        _store = build_object_store(settings)
        _store_built = True
    return _store


__all__ = [
    "ObjectStore",
    "StorageError",
    "LocalObjectStore",
    "build_object_store",
    "get_object_store",
    "safe_filename",
    "upload_key",
]
