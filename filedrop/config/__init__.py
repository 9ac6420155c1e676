"""Configuration read from environment variables."""

from .auth_config import AuthConfig
from .logging_config import configure_logging
from .storage_config import StorageConfig

__all__ = [
    "AuthConfig",
    "StorageConfig",
    "configure_logging",
]
