"""
File Operation Results

Value objects returned by FileService and serialized by the API layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from filedrop.domain.file_storage.entities import (
    StoredFile,
    object_expires_at,
    object_size,
)
from filedrop.domain.file_storage.storage_repository import StoredObject
from filedrop.domain.file_storage.value_objects import UPLOADS_PREFIX


@dataclass
class UploadResult:
    """Outcome of a successful upload."""

    file: StoredFile
    download_url: str

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "message": "File uploaded successfully",
            "fileId": self.file.file_id,
            "downloadUrl": self.download_url,
            "expiresAt": self.file.expires_at_millis,
        }
        if self.file.user_id:
            result["userId"] = self.file.user_id
        return result


@dataclass
class DownloadLink:
    """Access URL for a resolved, unexpired file."""

    file: StoredFile
    download_url: str

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "downloadUrl": self.download_url,
            "fileName": self.file.file_name,
            "expiresAt": self.file.expires_at_millis,
        }
        # Only present on objects whose upload recorded the unsanitized name
        if self.file.original_name:
            result["originalFileName"] = self.file.original_name
        return result


@dataclass
class FileListing:
    """Files of one namespace, annotated against a single point in time."""

    files: List[StoredFile]
    checked_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"files": [f.to_listing_dict(self.checked_at) for f in self.files]}


@dataclass
class CleanupReport:
    """
    Outcome of an expiry sweep.

    A failed batch delete is reported as zero deletions with the error
    message; partial backend results are not decomposed.
    """

    deleted_count: int
    remaining: List[StoredObject] = field(default_factory=list)
    error: Optional[str] = None

    @staticmethod
    def _entry(obj: StoredObject) -> Dict[str, Any]:
        expires_at = object_expires_at(obj)
        name = obj.key
        if name.startswith(f"{UPLOADS_PREFIX}/"):
            name = name[len(UPLOADS_PREFIX) + 1:]
        return {
            "name": name,
            "size": object_size(obj),
            "expiresAt": expires_at.isoformat() if expires_at else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "message": f"Cleanup completed. Deleted {self.deleted_count} expired files.",
            "deletedFiles": self.deleted_count,
            "remainingFiles": len(self.remaining),
            "files": [self._entry(obj) for obj in self.remaining],
        }
        if self.error:
            result["error"] = self.error
        return result
