"""Document storage package — blob store behind order document uploads."""

from formation_api.core.config import settings
from formation_api.storage.base import DocumentStorage, StoredObject
from formation_api.storage.local import LocalDocumentStorage

_storage: DocumentStorage | None = None


def get_document_storage() -> DocumentStorage:
    """FastAPI dependency returning the process-wide document store."""
    global _storage
    if _storage is None:
        _storage = LocalDocumentStorage(settings.storage_local_path)
    return _storage


def reset_document_storage() -> None:
    """Drop the cached store (for testing)."""
    global _storage
    _storage = None


__all__ = [
    "DocumentStorage",
    "LocalDocumentStorage",
    "StoredObject",
    "get_document_storage",
    "reset_document_storage",
]
