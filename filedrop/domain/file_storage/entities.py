"""
File Storage Entities

Domain entity for uploaded files with expiration tracking.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .storage_repository import StoredObject
from .value_objects import FileId, StorageKey


FILE_TTL = timedelta(hours=24)

# Metadata field names written alongside each object
META_CONTENT_TYPE = "contentType"
META_SIZE = "size"
META_EXPIRES_AT = "expiresAt"
META_ORIGINAL_NAME = "originalName"
META_USER_ID = "userId"
META_USER_EMAIL = "userEmail"


def to_epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def from_epoch_millis(value) -> Optional[datetime]:
    """Parse an epoch-milliseconds metadata value; None when absent or unparseable."""
    if value is None or value == "":
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def object_size(obj: StoredObject) -> int:
    """Size reported by the backend, falling back to the size metadata."""
    if obj.size:
        return obj.size
    try:
        return int((obj.metadata or {}).get(META_SIZE) or 0)
    except ValueError:
        return 0


def object_expires_at(obj: StoredObject) -> Optional[datetime]:
    return from_epoch_millis((obj.metadata or {}).get(META_EXPIRES_AT))


@dataclass
class StoredFile:
    """
    Entity representing an uploaded file.

    The entity is rebuilt from its storage key and metadata on every read;
    there is no separate metadata store. An entity without ``expires_at``
    never expires.
    """
    storage_key: StorageKey
    size: int = 0
    content_type: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    original_name: Optional[str] = None
    user_id: Optional[str] = None
    user_email: Optional[str] = None

    @classmethod
    def create(
        cls,
        scope: str,
        filename: str,
        content_type: str,
        size: int,
        now: datetime,
        user_id: Optional[str] = None,
        user_email: Optional[str] = None,
    ) -> "StoredFile":
        """
        Factory method for a new upload.

        Args:
            scope: Storage namespace ('uploads' or 'uploads/<user id>')
            filename: Client-supplied filename, sanitized into the key
            content_type: MIME type of the payload
            size: Payload size in bytes
            now: Upload time; the file expires FILE_TTL later
            user_id: Owning identity for scoped uploads
            user_email: Owning identity's email for scoped uploads

        Returns:
            New StoredFile instance
        """
        file_id = FileId.generate(now)
        return cls(
            storage_key=StorageKey.build(scope, file_id, filename),
            size=size,
            content_type=content_type,
            expires_at=now + FILE_TTL,
            created_at=now,
            original_name=filename,
            user_id=user_id,
            user_email=user_email,
        )

    @classmethod
    def from_stored_object(cls, obj: StoredObject) -> Optional["StoredFile"]:
        """
        Rebuild an entity from a backend listing entry.

        Returns None for keys that were not produced by an upload.
        """
        storage_key = StorageKey.parse(obj.key)
        if storage_key is None:
            return None

        metadata = obj.metadata or {}
        return cls(
            storage_key=storage_key,
            size=object_size(obj),
            content_type=obj.content_type or metadata.get(META_CONTENT_TYPE),
            expires_at=object_expires_at(obj),
            created_at=obj.created_at,
            original_name=metadata.get(META_ORIGINAL_NAME),
            user_id=metadata.get(META_USER_ID),
            user_email=metadata.get(META_USER_EMAIL),
        )

    @property
    def key(self) -> str:
        return self.storage_key.key

    @property
    def file_id(self) -> str:
        return self.storage_key.file_id

    @property
    def file_name(self) -> str:
        return self.storage_key.file_name

    @property
    def expires_at_millis(self) -> Optional[int]:
        if self.expires_at is None:
            return None
        return to_epoch_millis(self.expires_at)

    def is_expired(self, now: datetime) -> bool:
        """
        Check if file has expired.

        Args:
            now: Current time to compare against

        Returns:
            True once now reaches expires_at; always False without an expiry
        """
        if self.expires_at is None:
            return False
        return now >= self.expires_at

    def to_metadata(self) -> Dict[str, str]:
        """Metadata written with the object at upload time."""
        metadata = {
            META_CONTENT_TYPE: self.content_type or "application/octet-stream",
            META_SIZE: str(self.size),
        }
        if self.expires_at is not None:
            metadata[META_EXPIRES_AT] = str(to_epoch_millis(self.expires_at))
        if self.original_name:
            metadata[META_ORIGINAL_NAME] = self.original_name
        if self.user_id:
            metadata[META_USER_ID] = self.user_id
        if self.user_email:
            metadata[META_USER_EMAIL] = self.user_email
        return metadata

    def to_listing_dict(self, now: datetime) -> dict:
        """Serialize for the file listing response."""
        return {
            "fileId": self.file_id,
            "fileName": self.file_name,
            "expiresAt": self.expires_at_millis,
            "isExpired": self.is_expired(now),
            "size": self.size,
            "uploadedAt": self.created_at.isoformat() if self.created_at else None,
        }
