"""
Local File Storage Repository Implementation

Concrete implementation of IFileStorageRepository on the local filesystem,
for development and single-host deployments. Object content lives under
``<base>/objects`` and metadata in JSON sidecars under ``<base>/metadata``.
Access URLs point back at the application's signed content endpoint.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from filedrop.domain.errors import StorageReadError, StorageWriteError
from filedrop.domain.file_storage.signed_url_service import SignedUrlService
from filedrop.domain.file_storage.storage_repository import (
    IFileStorageRepository,
    StoredObject,
)

logger = logging.getLogger(__name__)

META_SUFFIX = ".json"


class LocalFileStorageRepository(IFileStorageRepository):
    """
    Local filesystem implementation of IFileStorageRepository.

    Attributes:
        base_path: Base directory for file storage operations
        signed_url_service: Signs URLs served by the content endpoint
    """

    def __init__(
        self,
        base_path: str = "/tmp/filedrop",
        signed_url_service: Optional[SignedUrlService] = None,
    ):
        """
        Initialize the local file storage repository.

        Args:
            base_path: Base directory for file storage (default: /tmp/filedrop)
            signed_url_service: URL signer (default: one built from env vars)
        """
        self.base_path = Path(base_path)
        self.objects_path = self.base_path / "objects"
        self.metadata_path = self.base_path / "metadata"
        self.signed_url_service = signed_url_service or SignedUrlService()
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        """
        Ensure the storage directories exist.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            self.objects_path.mkdir(parents=True, exist_ok=True)
            self.metadata_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self.base_path}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create storage directory: {self.base_path}"
            ) from e

    def _object_file(self, key: str) -> Path:
        path = (self.objects_path / key).resolve()
        # Keys must not escape the storage root
        if self.objects_path.resolve() not in path.parents:
            raise ValueError(f"Invalid key: {key}")
        return path

    def _metadata_file(self, key: str) -> Path:
        path = (self.metadata_path / (key + META_SUFFIX)).resolve()
        if self.metadata_path.resolve() not in path.parents:
            raise ValueError(f"Invalid key: {key}")
        return path

    def put(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Dict[str, str],
    ) -> None:
        try:
            object_file = self._object_file(key)
            metadata_file = self._metadata_file(key)
            object_file.parent.mkdir(parents=True, exist_ok=True)
            metadata_file.parent.mkdir(parents=True, exist_ok=True)

            object_file.write_bytes(content)
            metadata_file.write_text(
                json.dumps({"contentType": content_type, "metadata": metadata})
            )
        except (OSError, ValueError) as e:
            raise StorageWriteError(f"Failed to save {key}: {e}", e) from e

    def _load_metadata(self, key: str) -> Dict:
        try:
            return json.loads(self._metadata_file(key).read_text())
        except FileNotFoundError:
            return {}

    def list(self, prefix: str, recursive: bool = False) -> List[StoredObject]:
        objects = []
        try:
            for path in sorted(self.objects_path.rglob("*")):
                if not path.is_file():
                    continue
                key = path.relative_to(self.objects_path).as_posix()
                if not key.startswith(prefix):
                    continue
                if not recursive and "/" in key[len(prefix):]:
                    continue

                stat = path.stat()
                stored = self._load_metadata(key)
                objects.append(
                    StoredObject(
                        key=key,
                        size=stat.st_size,
                        content_type=stored.get("contentType"),
                        metadata=stored.get("metadata", {}),
                        created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    )
                )
        except (OSError, ValueError) as e:
            raise StorageReadError(f"Failed to list {prefix}: {e}", e) from e
        return objects

    def get_access_url(self, key: str, ttl: timedelta) -> str:
        return self.signed_url_service.generate_signed_url(key, ttl).url

    def read(self, key: str) -> Optional[bytes]:
        try:
            path = self._object_file(key)
            if not path.is_file():
                return None
            return path.read_bytes()
        except ValueError:
            return None
        except OSError as e:
            raise StorageReadError(f"Failed to read {key}: {e}", e) from e

    def content_type(self, key: str) -> Optional[str]:
        return self._load_metadata(key).get("contentType")

    def delete(self, key: str) -> bool:
        try:
            object_file = self._object_file(key)
            existed = object_file.is_file()
            object_file.unlink(missing_ok=True)
            self._metadata_file(key).unlink(missing_ok=True)
            return existed
        except (OSError, ValueError) as e:
            raise StorageWriteError(f"Failed to delete {key}: {e}", e) from e

    def delete_many(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        for key in keys:
            self.delete(key)
        return len(keys)
