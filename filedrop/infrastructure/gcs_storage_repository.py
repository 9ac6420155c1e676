"""
Google Cloud Storage Repository Implementation

Concrete implementation of IFileStorageRepository for Google Cloud Storage,
which also backs Firebase Storage buckets. Uses the google-cloud-storage
library for all operations.
"""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound
from requests.exceptions import RequestException

from filedrop.domain.errors import StorageReadError, StorageWriteError
from filedrop.domain.file_storage.storage_repository import (
    IFileStorageRepository,
    StoredObject,
)

logger = logging.getLogger(__name__)

# API errors plus transport and credential-refresh failures
_BACKEND_ERRORS = (GoogleCloudError, RequestException, GoogleAuthError)


def _ignore_missing(blob) -> None:
    """on_error callback for batch deletes: a missing blob is already gone."""
    logger.debug(f"Blob already deleted: {getattr(blob, 'name', blob)}")


class GCSStorageRepository(IFileStorageRepository):
    """
    Google Cloud Storage implementation of IFileStorageRepository.

    Custom metadata is stored as blob metadata; access URLs are V4 signed
    URLs, which require credentials holding a private key (a service account).

    Attributes:
        bucket_name: Name of the GCS bucket for file storage
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
    """

    def __init__(self, bucket_name: str, client: Optional[storage.Client] = None):
        """
        Initialize the GCS storage repository.

        Args:
            bucket_name: Name of the GCS bucket to use for storage
            client: Preconfigured client (default: client from ambient credentials)

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)

    def put(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Dict[str, str],
    ) -> None:
        try:
            blob = self.bucket.blob(key)
            blob.metadata = dict(metadata)
            blob.upload_from_string(content, content_type=content_type)
        except _BACKEND_ERRORS as e:
            raise StorageWriteError(f"Failed to upload {key}: {e}", e) from e

    def list(self, prefix: str, recursive: bool = False) -> List[StoredObject]:
        delimiter = None if recursive else "/"
        try:
            blobs = self.client.list_blobs(
                self.bucket_name, prefix=prefix, delimiter=delimiter
            )
            objects = []
            for blob in blobs:
                # Folder placeholders created by consoles end with '/'
                if blob.name.endswith("/"):
                    continue
                objects.append(
                    StoredObject(
                        key=blob.name,
                        size=blob.size or 0,
                        content_type=blob.content_type,
                        metadata=dict(blob.metadata or {}),
                        created_at=blob.time_created,
                    )
                )
            return objects
        except _BACKEND_ERRORS as e:
            raise StorageReadError(f"Failed to list {prefix}: {e}", e) from e

    def get_access_url(self, key: str, ttl: timedelta) -> str:
        try:
            blob = self.bucket.blob(key)
            return blob.generate_signed_url(
                version="v4",
                expiration=ttl,
                method="GET",
            )
        except Exception as e:
            raise StorageReadError(f"Failed to generate signed URL: {e}", e) from e

    def delete(self, key: str) -> bool:
        try:
            self.bucket.blob(key).delete()
            return True
        except NotFound:
            # Idempotent - non-existent blob treated as success
            return False
        except _BACKEND_ERRORS as e:
            raise StorageWriteError(f"Failed to delete {key}: {e}", e) from e

    def delete_many(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not keys:
            return 0
        try:
            self.bucket.delete_blobs(keys, on_error=_ignore_missing)
            return len(keys)
        except _BACKEND_ERRORS as e:
            raise StorageWriteError(f"Failed to delete {len(keys)} files: {e}", e) from e
