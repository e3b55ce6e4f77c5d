"""Abstract document store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StoredObject:
    """Result of a put: the store-relative path and stored size."""
    path: str
    size: int
    content_type: str | None = None


class DocumentStorage(ABC):
    """Store bytes under a key, get back a path the database can reference."""

    @abstractmethod
    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> StoredObject:
        """Write *data* under *key*, replacing any existing object.

        Raises:
            StorageError: If the backend cannot write the object
        """
        ...
