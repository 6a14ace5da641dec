"""
Blob storage for resume files.

Objects are written once, read back for downloads and removed with their
resume.
"""
import logging
import os
from pathlib import Path
from typing import Protocol, Union

from ..config.settings import get_settings

logger = logging.getLogger(__name__)


class BlobStorage(Protocol):
    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` and return the stored path."""
        ...

    def read(self, path: str) -> bytes:
        """Return the bytes stored at ``path``."""
        ...

    def remove(self, path: str) -> None:
        """Delete the object at ``path``."""
        ...


class LocalBlobStorage:
    """Stores blobs as files below a root directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Blob path escapes storage root: {path}")
        return target

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(f"Blob already exists: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug("Stored blob %s (%s, %d bytes)", path, content_type, len(data))
        return path

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def remove(self, path: str) -> None:
        os.remove(self._resolve(path))
        logger.debug("Removed blob %s", path)


def get_blob_storage() -> BlobStorage:
    """FastAPI dependency returning the configured storage backend."""
    return LocalBlobStorage(get_settings().upload_directory)
