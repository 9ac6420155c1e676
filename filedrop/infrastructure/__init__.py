"""Infrastructure layer: storage backends and identity providers."""

from .identity_factory import IdentityProviderFactory
from .local_file_storage_repository import LocalFileStorageRepository
from .storage_factory import StorageFactory

__all__ = [
    "IdentityProviderFactory",
    "LocalFileStorageRepository",
    "StorageFactory",
]
