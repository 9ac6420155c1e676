"""
File Application Service

Coordinates the upload, retrieval, listing, cleanup and usage use cases
against a pluggable storage backend.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from filedrop.domain.errors import (
    FileExpiredError,
    InvalidInputError,
    StorageError,
    StorageWriteError,
    StoredFileNotFoundError,
)
from filedrop.domain.file_storage import (
    FileId,
    IFileStorageRepository,
    StorageStats,
    StoredFile,
    scope_for,
)
from filedrop.domain.file_storage.entities import object_expires_at, object_size
from filedrop.domain.file_storage.value_objects import UPLOADS_PREFIX
from filedrop.domain.identity import Identity

from .file_results import CleanupReport, DownloadLink, FileListing, UploadResult

logger = logging.getLogger(__name__)

# Signed download URLs stay valid for one hour
DOWNLOAD_URL_TTL = timedelta(hours=1)

# Per-identity storage quota (500 MiB)
STORAGE_QUOTA_BYTES = 500 * 1024 * 1024

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileService:
    """
    Application service for temporary file storage.

    Stateless apart from its collaborators; one instance serves every request.
    """

    def __init__(
        self,
        storage: IFileStorageRepository,
        clock: Callable[[], datetime] = utcnow,
        quota_bytes: int = STORAGE_QUOTA_BYTES,
        url_ttl: timedelta = DOWNLOAD_URL_TTL,
    ):
        """
        Initialize FileService.

        Args:
            storage: Storage backend shared by all handlers
            clock: Returns the current time; replaced in tests
            quota_bytes: Per-identity storage quota
            url_ttl: Validity of generated download URLs
        """
        self.storage = storage
        self.clock = clock
        self.quota_bytes = quota_bytes
        self.url_ttl = url_ttl

    @staticmethod
    def _scope(identity: Optional[Identity]) -> str:
        return scope_for(identity.user_id if identity else None)

    def upload_file(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        identity: Optional[Identity] = None,
    ) -> UploadResult:
        """
        Store an uploaded file and return its download reference.

        Args:
            filename: Client-supplied filename
            content: Full file content
            content_type: MIME type reported by the client
            identity: Owner for scoped uploads, None for the global namespace

        Returns:
            UploadResult with the new identifier and download URL

        Raises:
            InvalidInputError: If the payload is empty
            StorageWriteError: If the backend write fails
        """
        if not content:
            raise InvalidInputError("No file provided")

        now = self.clock()
        file = StoredFile.create(
            scope=self._scope(identity),
            filename=filename or "file",
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size=len(content),
            now=now,
            user_id=identity.user_id if identity else None,
            user_email=identity.email if identity else None,
        )

        logger.info(f"Uploading {file.key} ({file.size} bytes)")
        self.storage.put(file.key, content, file.content_type, file.to_metadata())

        download_url = self.storage.get_access_url(file.key, self.url_ttl)
        logger.info(f"Uploaded file {file.file_id}")
        return UploadResult(file=file, download_url=download_url)

    def _find_file(self, file_id: str, scope: str) -> StoredFile:
        if not FileId.is_valid(file_id):
            raise StoredFileNotFoundError("File not found")

        for obj in self.storage.list(f"{scope}/{file_id}-"):
            file = StoredFile.from_stored_object(obj)
            # The prefix match alone would accept a longer identifier
            if file and file.file_id == file_id and file.storage_key.scope == scope:
                return file

        raise StoredFileNotFoundError("File not found")

    def get_download_link(
        self, file_id: str, identity: Optional[Identity] = None
    ) -> DownloadLink:
        """
        Resolve an identifier to a time-limited access URL.

        Expired files are deleted on sight. Deletion failures are logged
        and do not change the outcome.

        Raises:
            InvalidInputError: If file_id is empty
            StoredFileNotFoundError: If no object matches file_id
            FileExpiredError: If the object is past its expiration
            StorageReadError: If the backend listing fails
        """
        if not file_id:
            raise InvalidInputError("fileId parameter required")

        file = self._find_file(file_id, self._scope(identity))

        if file.is_expired(self.clock()):
            logger.info(f"File {file_id} expired, deleting {file.key}")
            try:
                self.storage.delete(file.key)
            except StorageError as e:
                logger.warning(f"Failed to delete expired file {file.key}: {e}")
            raise FileExpiredError("File has expired")

        download_url = self.storage.get_access_url(file.key, self.url_ttl)
        return DownloadLink(file=file, download_url=download_url)

    def list_files(self, identity: Optional[Identity] = None) -> FileListing:
        """
        List the files of a namespace without deleting expired ones.

        Raises:
            StorageReadError: If the backend listing fails
        """
        objects = self.storage.list(f"{self._scope(identity)}/")
        files: List[StoredFile] = []
        for obj in objects:
            file = StoredFile.from_stored_object(obj)
            if file is None:
                logger.debug(f"Skipping foreign object {obj.key}")
                continue
            files.append(file)
        return FileListing(files=files, checked_at=self.clock())

    def cleanup_expired_files(self) -> CleanupReport:
        """
        Sweep every upload, across all namespaces, and batch-delete expired ones.

        Returns:
            CleanupReport with deletion and remaining counts

        Raises:
            StorageReadError: If the backend listing fails
        """
        now = self.clock()
        objects = self.storage.list(f"{UPLOADS_PREFIX}/", recursive=True)

        expired_keys = []
        remaining = []
        for obj in objects:
            expires_at = object_expires_at(obj)
            if expires_at is not None and now >= expires_at:
                expired_keys.append(obj.key)
            else:
                remaining.append(obj)

        if not expired_keys:
            logger.info(f"Cleanup found no expired files ({len(remaining)} remaining)")
            return CleanupReport(deleted_count=0, remaining=remaining)

        try:
            self.storage.delete_many(expired_keys)
        except StorageWriteError as e:
            logger.error(f"Batch delete of {len(expired_keys)} expired files failed: {e}")
            return CleanupReport(deleted_count=0, remaining=remaining, error=str(e))

        logger.info(
            f"Cleanup deleted {len(expired_keys)} expired files ({len(remaining)} remaining)"
        )
        return CleanupReport(deleted_count=len(expired_keys), remaining=remaining)

    def get_storage_stats(self, identity: Identity) -> StorageStats:
        """
        Sum the sizes in an identity's namespace against the quota.

        Expired objects still count until they are deleted.

        Raises:
            StorageReadError: If the backend listing fails
        """
        objects = self.storage.list(f"{self._scope(identity)}/")
        total_size = sum(object_size(obj) for obj in objects)
        return StorageStats(
            total_size=total_size,
            max_size=self.quota_bytes,
            file_count=len(objects),
        )
