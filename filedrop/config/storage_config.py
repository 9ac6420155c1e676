"""
Storage Configuration

Reads storage backend settings from the environment and builds the
Google Cloud Storage client with service-account credentials.
"""

import json
import logging
import os
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

from filedrop.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

BACKEND_GCS = "gcs"
BACKEND_S3 = "s3"
BACKEND_LOCAL = "local"
SUPPORTED_BACKENDS = (BACKEND_GCS, BACKEND_S3, BACKEND_LOCAL)


class StorageConfig:
    """Storage backend configuration settings."""

    def __init__(self):
        # Google Cloud Storage / Firebase Storage
        self.gcs_bucket_name = os.getenv("GCS_BUCKET_NAME")
        self.firebase_service_account_key = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY")
        self.google_credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

        # S3-compatible storage (AWS S3, Supabase Storage, MinIO)
        self.s3_bucket_name = os.getenv("S3_BUCKET_NAME")
        self.s3_endpoint_url = os.getenv("S3_ENDPOINT_URL")
        self.s3_access_key_id = os.getenv("S3_ACCESS_KEY_ID")
        self.s3_secret_access_key = os.getenv("S3_SECRET_ACCESS_KEY")
        self.s3_region = os.getenv("S3_REGION", "us-east-1")

        # Local filesystem
        self.local_storage_dir = os.getenv("LOCAL_STORAGE_DIR")
        self.secret_key = os.getenv("SECRET_KEY")
        self.download_base_url = os.getenv("DOWNLOAD_BASE_URL", "")

        self.backend = (os.getenv("STORAGE_BACKEND") or self._infer_backend() or "").lower()

    def _infer_backend(self) -> Optional[str]:
        if self.gcs_bucket_name:
            return BACKEND_GCS
        if self.s3_bucket_name:
            return BACKEND_S3
        if self.local_storage_dir:
            return BACKEND_LOCAL
        return None


def build_gcs_client(config: StorageConfig) -> storage.Client:
    """
    Build a Google Cloud Storage client.

    Credential precedence: FIREBASE_SERVICE_ACCOUNT_KEY (inline JSON), then
    GOOGLE_APPLICATION_CREDENTIALS (file path), then ambient default credentials.

    Raises:
        ConfigurationError: If the inline service account key is not valid JSON
    """
    if config.firebase_service_account_key:
        try:
            info = json.loads(config.firebase_service_account_key)
        except ValueError as e:
            raise ConfigurationError(
                "Failed to parse FIREBASE_SERVICE_ACCOUNT_KEY", e
            ) from e
        credentials = service_account.Credentials.from_service_account_info(info)
        logger.info("GCS client initialized with inline service account")
        return storage.Client(project=info.get("project_id"), credentials=credentials)

    if config.google_credentials_path and os.path.exists(config.google_credentials_path):
        credentials = service_account.Credentials.from_service_account_file(
            config.google_credentials_path
        )
        logger.info(f"GCS client initialized with service account: {config.google_credentials_path}")
        return storage.Client(project=credentials.project_id, credentials=credentials)

    logger.info("GCS client initialized with default credentials")
    return storage.Client()
