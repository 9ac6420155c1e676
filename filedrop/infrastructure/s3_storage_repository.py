"""S3-compatible object storage (AWS S3 / Supabase Storage / MinIO)."""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from filedrop.domain.errors import StorageReadError, StorageWriteError
from filedrop.domain.file_storage.entities import (
    META_CONTENT_TYPE,
    META_EXPIRES_AT,
    META_ORIGINAL_NAME,
    META_SIZE,
    META_USER_EMAIL,
    META_USER_ID,
)
from filedrop.domain.file_storage.storage_repository import (
    IFileStorageRepository,
    StoredObject,
)

logger = logging.getLogger(__name__)

# S3 returns user metadata keys lowercased
_CANONICAL_META_KEYS = {
    key.lower(): key
    for key in (
        META_CONTENT_TYPE,
        META_SIZE,
        META_EXPIRES_AT,
        META_ORIGINAL_NAME,
        META_USER_ID,
        META_USER_EMAIL,
    )
}

# delete_objects accepts at most 1000 keys per request
_DELETE_BATCH_LIMIT = 1000

_MISSING_KEY_CODES = {"404", "NoSuchKey", "NotFound"}


def _encode_metadata(metadata: Dict[str, str]) -> Dict[str, str]:
    # Metadata travels as HTTP headers, which must be ASCII
    return {key: quote(str(value), safe="") for key, value in metadata.items()}


def _decode_metadata(metadata: Dict[str, str]) -> Dict[str, str]:
    return {
        _CANONICAL_META_KEYS.get(key.lower(), key): unquote(value)
        for key, value in (metadata or {}).items()
    }


class S3StorageRepository(IFileStorageRepository):
    """S3-compatible object storage client."""

    def __init__(
        self,
        bucket: str,
        endpoint: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        region: str = "us-east-1",
        client=None,
    ):
        if not bucket or not bucket.strip():
            raise ValueError("bucket cannot be empty")

        self._bucket = bucket
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

    @property
    def bucket_name(self) -> str:
        return self._bucket

    def put(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Dict[str, str],
    ) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                Metadata=_encode_metadata(metadata),
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(f"Failed to upload {key}: {e}", e) from e
        logger.debug("Uploaded %s (%d bytes)", key, len(content))

    def _head(self, key: str) -> Optional[Dict]:
        try:
            return self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            # Deleted between the listing and the HEAD request
            if e.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                logger.debug("Skipping %s, deleted during listing", key)
                return None
            raise

    def list(self, prefix: str, recursive: bool = False) -> List[StoredObject]:
        params = {"Bucket": self._bucket, "Prefix": prefix}
        if not recursive:
            params["Delimiter"] = "/"

        objects = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                for entry in page.get("Contents", []):
                    key = entry["Key"]
                    if key.endswith("/"):
                        continue
                    # Listings carry no user metadata
                    head = self._head(key)
                    if head is None:
                        continue
                    objects.append(
                        StoredObject(
                            key=key,
                            size=entry.get("Size", 0),
                            content_type=head.get("ContentType"),
                            metadata=_decode_metadata(head.get("Metadata", {})),
                            created_at=entry.get("LastModified"),
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            raise StorageReadError(f"Failed to list {prefix}: {e}", e) from e
        return objects

    def get_access_url(self, key: str, ttl: timedelta) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=int(ttl.total_seconds()),
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageReadError(f"Failed to generate presigned URL: {e}", e) from e

    def delete(self, key: str) -> bool:
        # S3 deletes are idempotent; a missing key is not reported
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
            return True
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(f"Failed to delete {key}: {e}", e) from e

    def delete_many(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        try:
            for start in range(0, len(keys), _DELETE_BATCH_LIMIT):
                chunk = keys[start:start + _DELETE_BATCH_LIMIT]
                response = self._client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": k} for k in chunk], "Quiet": True},
                )
                errors = response.get("Errors") or []
                if errors:
                    first = errors[0]
                    raise StorageWriteError(
                        f"Failed to delete {len(errors)} files: "
                        f"{first.get('Code')} {first.get('Message')}"
                    )
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(f"Failed to delete {len(keys)} files: {e}", e) from e
        return len(keys)
