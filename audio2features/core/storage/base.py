"""Object store interface for raw upload bytes."""

import re
from abc import ABC, abstractmethod

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class StorageError(Exception):
    """Raised when an object cannot be written."""


def safe_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with an underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def upload_key(file_id: str, filename: str) -> str:
    return f"uploads/{file_id}-{safe_filename(filename)}"


class ObjectStore(ABC):
    """Best-effort blob storage."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store bytes under key. Raises StorageError on failure."""
        ...
