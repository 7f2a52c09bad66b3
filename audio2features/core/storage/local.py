"""Local filesystem object store."""

from pathlib import Path

from audio2features.core.storage.base import ObjectStore, StorageError


class LocalObjectStore(ObjectStore):
    """Writes objects below a root directory; the key is the relative path."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def name(self) -> str:
        return "local"

    def path_for(self, key: str) -> Path:
        full_path = (self._root / key).resolve()
        if not full_path.is_relative_to(self._root.resolve()):
            raise StorageError(f"Key escapes storage root: {key}")
        return full_path

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        full_path = self.path_for(key)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
