"""Application layer: use-case services composed at application start."""

from .auth_service import AuthService
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .file_results import CleanupReport, DownloadLink, FileListing, UploadResult
from .file_service import DOWNLOAD_URL_TTL, STORAGE_QUOTA_BYTES, FileService

__all__ = [
    "AuthService",
    "DependencyContainer",
    "DependencyNotFoundError",
    "FileService",
    "UploadResult",
    "DownloadLink",
    "FileListing",
    "CleanupReport",
    "DOWNLOAD_URL_TTL",
    "STORAGE_QUOTA_BYTES",
]
