"""
File Storage Repository Interface

Abstract interface for object storage operations.
This abstraction keeps the domain layer infrastructure-agnostic: Google Cloud
Storage (Firebase), S3-compatible services and the local filesystem all
implement the same capability set.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional


@dataclass
class StoredObject:
    """
    A raw object as reported by a storage backend listing.

    Metadata values are always strings, as object stores keep them.
    """
    key: str
    size: int = 0
    content_type: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None


class IFileStorageRepository(ABC):
    """
    Unified interface for object storage operations.

    Contract Guarantees:
    - put() writes the whole payload in one call and raises StorageWriteError on failure
    - list() raises StorageReadError on failure and returns [] for an empty prefix
    - delete() and delete_many() are idempotent: missing keys are not errors
    - delete_many() is atomic from the caller's perspective; a failure raises
      StorageWriteError without reporting partial progress
    """

    @abstractmethod
    def put(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Dict[str, str],
    ) -> None:
        """
        Store bytes at a key with side-channel metadata.

        Args:
            key: Object key (e.g., 'uploads/1712345678901-abc-report.pdf')
            content: Full file content
            content_type: MIME type recorded with the object
            metadata: String metadata stored alongside the object

        Raises:
            StorageWriteError: If the backend rejects the write
        """
        pass  # pragma: no cover

    @abstractmethod
    def list(self, prefix: str, recursive: bool = False) -> List[StoredObject]:
        """
        List objects whose key starts with prefix.

        When prefix ends with '/' and recursive is False, only direct children
        are returned (nested "folders" are skipped).

        Raises:
            StorageReadError: If the backend listing fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_access_url(self, key: str, ttl: timedelta) -> str:
        """
        Return a time-limited URL granting read access to an object.

        Raises:
            StorageReadError: If the URL cannot be produced
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete one object.

        Returns:
            True if an object was removed, False if it did not exist

        Raises:
            StorageWriteError: If the backend delete call fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete_many(self, keys: Iterable[str]) -> int:
        """
        Delete a batch of objects in a single backend call.

        Returns:
            Number of keys submitted for deletion

        Raises:
            StorageWriteError: If the batch call fails
        """
        pass  # pragma: no cover

    def read(self, key: str) -> Optional[bytes]:
        """
        Read an object's content.

        Only backends that serve content themselves (the local filesystem)
        need this; cloud backends hand out signed URLs instead.
        """
        raise NotImplementedError(f"{type(self).__name__} does not serve content")
