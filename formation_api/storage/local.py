"""Local filesystem document store for development and testing."""

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from formation_api.core.exceptions import StorageError
from formation_api.storage.base import DocumentStorage, StoredObject

logger = logging.getLogger(__name__)


class LocalDocumentStorage(DocumentStorage):
    """Writes objects below ``base_path``; keys map one-to-one to relative paths."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()

    def _full_path(self, key: str) -> Path:
        path = (self.base_path / key.lstrip("/")).resolve()
        if not path.is_relative_to(self.base_path):
            raise StorageError(f"Key '{key}' escapes the storage root")
        return path

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> StoredObject:
        path = self._full_path(key)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(f"Failed to upload {key}: {e}") from e

        logger.debug("Stored %d bytes at %s", len(data), path)
        return StoredObject(path=key.lstrip("/"), size=len(data), content_type=content_type)
