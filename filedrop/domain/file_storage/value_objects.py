"""
File Storage Value Objects

Immutable value objects for identifiers, storage keys and usage figures.
"""

import re
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


UPLOADS_PREFIX = "uploads"
FILE_ID_RANDOM_LENGTH = 16

_FILE_ID_PATTERN = re.compile(r"^\d+-[a-z0-9]+$")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


class InvalidFileIdError(ValueError):
    """Raised when a string is not a well-formed file identifier."""
    pass


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename or "")


@dataclass(frozen=True)
class FileId:
    """
    Value object representing an upload identifier.

    Format: ``<epoch milliseconds>-<random lowercase alphanumerics>``.
    Neither segment contains a hyphen, which lets the identifier be split
    back out of a storage key.
    """
    value: str

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise InvalidFileIdError(f"Invalid file id: {self.value!r}")

    @staticmethod
    def is_valid(value: str) -> bool:
        return isinstance(value, str) and bool(_FILE_ID_PATTERN.match(value))

    @classmethod
    def generate(cls, now: Optional[datetime] = None) -> "FileId":
        """
        Generate a new identifier from the current time and a random suffix.

        Uniqueness is assumed, never checked against existing objects.

        Args:
            now: Timestamp to embed (default: current UTC time)

        Returns:
            New FileId instance
        """
        now = now or datetime.now(timezone.utc)
        millis = int(now.timestamp() * 1000)
        suffix = "".join(
            secrets.choice(_RANDOM_ALPHABET) for _ in range(FILE_ID_RANDOM_LENGTH)
        )
        return cls(f"{millis}-{suffix}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StorageKey:
    """
    Value object for an object key: ``<scope>/<file_id>-<sanitized name>``.
    """
    scope: str
    file_id: str
    file_name: str

    @classmethod
    def build(cls, scope: str, file_id: FileId, original_name: str) -> "StorageKey":
        return cls(scope=scope, file_id=str(file_id), file_name=sanitize_filename(original_name))

    @classmethod
    def parse(cls, key: str) -> Optional["StorageKey"]:
        """
        Split a storage key back into scope, identifier and file name.

        Returns None when the key's basename does not start with an identifier.
        """
        scope, _, basename = key.rpartition("/")
        parts = basename.split("-", 2)
        if len(parts) < 3:
            return None
        file_id = f"{parts[0]}-{parts[1]}"
        if not FileId.is_valid(file_id):
            return None
        return cls(scope=scope, file_id=file_id, file_name=parts[2])

    @property
    def key(self) -> str:
        return f"{self.scope}/{self.file_id}-{self.file_name}"

    def __str__(self) -> str:
        return self.key


def scope_for(user_id: Optional[str] = None) -> str:
    """Storage namespace for an identity, or the global namespace."""
    if user_id:
        return f"{UPLOADS_PREFIX}/{user_id}"
    return UPLOADS_PREFIX


_SIZE_LABELS = ("B", "KB", "MB", "GB")


def format_bytes(size: int) -> str:
    """
    Format a byte count with 1024-based units.

    Examples:
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(500 * 1024 * 1024)
        '500 MB'
    """
    if size <= 0:
        return "0 B"
    exponent = 0
    while exponent < len(_SIZE_LABELS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = f"{size / (1024 ** exponent):.1f}".rstrip("0").rstrip(".")
    return f"{value} {_SIZE_LABELS[exponent]}"


@dataclass(frozen=True)
class StorageStats:
    """Usage of one namespace against a fixed quota."""
    total_size: int
    max_size: int
    file_count: int

    @property
    def remaining_size(self) -> int:
        return max(0, self.max_size - self.total_size)

    @property
    def used_percentage(self) -> float:
        if self.max_size <= 0:
            return 0.0
        return round(self.total_size / self.max_size * 100, 1)

    def to_dict(self) -> dict:
        return {
            "totalSize": self.total_size,
            "maxSize": self.max_size,
            "remainingSize": self.remaining_size,
            "usedPercentage": self.used_percentage,
            "fileCount": self.file_count,
            "formatted": {
                "used": format_bytes(self.total_size),
                "max": format_bytes(self.max_size),
                "remaining": format_bytes(self.remaining_size),
            },
        }
