"""
Storage Factory

Factory for creating the storage repository selected by configuration.
The application layer depends only on IFileStorageRepository, never on a
concrete backend.

Unlike a development fallback, a missing or unknown configuration is an
error: handlers must report "not initialized" rather than silently writing
to a different place.
"""

import logging
from typing import Optional

from filedrop.config.storage_config import (
    BACKEND_GCS,
    BACKEND_LOCAL,
    BACKEND_S3,
    SUPPORTED_BACKENDS,
    StorageConfig,
    build_gcs_client,
)
from filedrop.domain.errors import ConfigurationError
from filedrop.domain.file_storage.signed_url_service import SignedUrlService
from filedrop.domain.file_storage.storage_repository import IFileStorageRepository

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Factory for creating storage repository implementations.

    Selection Logic:
    - STORAGE_BACKEND if set ('gcs', 's3' or 'local')
    - otherwise the first of GCS_BUCKET_NAME, S3_BUCKET_NAME, LOCAL_STORAGE_DIR present
    """

    @staticmethod
    def create_storage(config: Optional[StorageConfig] = None) -> IFileStorageRepository:
        """
        Create storage repository based on configuration.

        Returns:
            IFileStorageRepository implementation

        Raises:
            ConfigurationError: If no backend is configured or its settings are incomplete
        """
        config = config or StorageConfig()

        if not config.backend:
            raise ConfigurationError(
                "Storage not initialized. Set STORAGE_BACKEND or one of "
                "GCS_BUCKET_NAME, S3_BUCKET_NAME, LOCAL_STORAGE_DIR."
            )
        if config.backend not in SUPPORTED_BACKENDS:
            raise ConfigurationError(f"Unsupported STORAGE_BACKEND: {config.backend}")

        if config.backend == BACKEND_GCS:
            return StorageFactory._create_gcs_storage(config)
        if config.backend == BACKEND_S3:
            return StorageFactory._create_s3_storage(config)
        return StorageFactory._create_local_storage(config)

    @staticmethod
    def _create_gcs_storage(config: StorageConfig) -> IFileStorageRepository:
        if not config.gcs_bucket_name:
            raise ConfigurationError("GCS_BUCKET_NAME is required for the gcs backend")

        from filedrop.infrastructure.gcs_storage_repository import GCSStorageRepository

        client = build_gcs_client(config)
        storage = GCSStorageRepository(config.gcs_bucket_name, client=client)
        logger.info(f"Storage factory: Using GCS storage with bucket {config.gcs_bucket_name}")
        return storage

    @staticmethod
    def _create_s3_storage(config: StorageConfig) -> IFileStorageRepository:
        if not config.s3_bucket_name:
            raise ConfigurationError("S3_BUCKET_NAME is required for the s3 backend")

        from filedrop.infrastructure.s3_storage_repository import S3StorageRepository

        storage = S3StorageRepository(
            bucket=config.s3_bucket_name,
            endpoint=config.s3_endpoint_url,
            access_key=config.s3_access_key_id,
            secret_key=config.s3_secret_access_key,
            region=config.s3_region,
        )
        logger.info(f"Storage factory: Using S3 storage with bucket {config.s3_bucket_name}")
        return storage

    @staticmethod
    def _create_local_storage(config: StorageConfig) -> IFileStorageRepository:
        if not config.local_storage_dir:
            raise ConfigurationError("LOCAL_STORAGE_DIR is required for the local backend")

        from filedrop.infrastructure.local_file_storage_repository import (
            LocalFileStorageRepository,
        )

        signer = SignedUrlService(
            secret_key=config.secret_key, base_url=config.download_base_url
        )
        try:
            storage = LocalFileStorageRepository(config.local_storage_dir, signer)
        except OSError as e:
            raise ConfigurationError(f"Failed to initialize local storage: {e}", e) from e

        logger.info(f"Storage factory: Using local filesystem storage at {config.local_storage_dir}")
        return storage
