"""
File Storage Domain

Handles upload identifiers, storage keys, expiration and usage figures.
"""

from .entities import FILE_TTL, StoredFile
from .signed_url_service import SignedUrl, SignedUrlService
from .storage_repository import IFileStorageRepository, StoredObject
from .value_objects import (
    FileId,
    InvalidFileIdError,
    StorageKey,
    StorageStats,
    format_bytes,
    sanitize_filename,
    scope_for,
)

__all__ = [
    "FILE_TTL",
    "StoredFile",
    "StoredObject",
    "IFileStorageRepository",
    "SignedUrlService",
    "SignedUrl",
    "FileId",
    "InvalidFileIdError",
    "StorageKey",
    "StorageStats",
    "format_bytes",
    "sanitize_filename",
    "scope_for",
]
