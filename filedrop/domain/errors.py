"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions map categories to user-facing messages and HTTP status codes.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    STORAGE_READ_ERROR = "storage_read_error"
    STORAGE_WRITE_ERROR = "storage_write_error"
    CONFIGURATION_ERROR = "configuration_error"
    SYSTEM_ERROR = "system_error"


ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.METHOD_NOT_ALLOWED: {
        "title": "Method Not Allowed",
        "message": "Method not allowed",
    },
    ErrorCategory.INVALID_INPUT: {
        "title": "Invalid Request",
        "message": "The request is missing required information",
    },
    ErrorCategory.UNAUTHORIZED: {
        "title": "Unauthorized",
        "message": "Unauthorized",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "File not found",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "File Expired",
        "message": "File has expired",
    },
    ErrorCategory.STORAGE_READ_ERROR: {
        "title": "Storage Error",
        "message": "Failed to read from storage",
    },
    ErrorCategory.STORAGE_WRITE_ERROR: {
        "title": "Storage Error",
        "message": "Failed to write to storage",
    },
    ErrorCategory.CONFIGURATION_ERROR: {
        "title": "Service Not Initialized",
        "message": "Service not initialized",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred",
    },
}


ERROR_STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.METHOD_NOT_ALLOWED: 405,
    ErrorCategory.INVALID_INPUT: 400,
    ErrorCategory.UNAUTHORIZED: 401,
    ErrorCategory.FILE_NOT_FOUND: 404,
    ErrorCategory.FILE_EXPIRED: 410,
    ErrorCategory.STORAGE_READ_ERROR: 500,
    ErrorCategory.STORAGE_WRITE_ERROR: 500,
    ErrorCategory.CONFIGURATION_ERROR: 500,
    ErrorCategory.SYSTEM_ERROR: 500,
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Every subclass carries the ErrorCategory it maps to, so the API layer
    can translate it without a per-exception branch.
    """

    category = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class InvalidInputError(DomainError):
    """Raised when a required parameter is missing or the uploaded file is empty."""

    category = ErrorCategory.INVALID_INPUT


class UnauthorizedError(DomainError):
    """Raised when the bearer token is missing, malformed or rejected."""

    category = ErrorCategory.UNAUTHORIZED


class StoredFileNotFoundError(DomainError):
    """Raised when an identifier does not resolve to a stored object."""

    category = ErrorCategory.FILE_NOT_FOUND


class FileExpiredError(DomainError):
    """Raised when a stored object is past its expiration timestamp."""

    category = ErrorCategory.FILE_EXPIRED


class StorageError(DomainError):
    """Base class for failures reported by the storage backend."""

    category = ErrorCategory.SYSTEM_ERROR


class StorageReadError(StorageError):
    """Raised when listing or reading from the storage backend fails."""

    category = ErrorCategory.STORAGE_READ_ERROR


class StorageWriteError(StorageError):
    """Raised when writing to or deleting from the storage backend fails."""

    category = ErrorCategory.STORAGE_WRITE_ERROR


class ConfigurationError(DomainError):
    """Raised when required external credentials or settings are absent."""

    category = ErrorCategory.CONFIGURATION_ERROR


# ============================================================================
# Application Layer Exceptions
# ============================================================================

# Categories whose technical message is appended to the user-facing message
_DIAGNOSTIC_CATEGORIES = {
    ErrorCategory.STORAGE_READ_ERROR,
    ErrorCategory.STORAGE_WRITE_ERROR,
    ErrorCategory.CONFIGURATION_ERROR,
    ErrorCategory.SYSTEM_ERROR,
}


class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    This bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details
            context: Additional context information
            message: Overrides the category's default user message
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = message or error_info["message"]
        self.status_code = ERROR_STATUS_CODES.get(category, 500)

        super().__init__(self.message)

    @classmethod
    def from_domain_error(cls, error: DomainError) -> "ApplicationError":
        """Build an application error from a domain exception."""
        if error.category in _DIAGNOSTIC_CATEGORIES:
            return cls(error.category, technical_message=str(error))
        return cls(error.category, message=str(error) or None)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        error = self.message
        if self.category in _DIAGNOSTIC_CATEGORIES and self.technical_message:
            error = f"{self.message}: {self.technical_message}"
        return {
            "error": error,
            "category": self.category.value,
            "title": self.title,
        }


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details appended for storage failures
        context: Additional context information
        status_code: HTTP status code, defaults to the category's mapping
        message: Overrides the category's default user message

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context, message)
    return error.to_dict(), status_code or error.status_code


def error_response_from(error: DomainError) -> tuple[Dict[str, Any], int]:
    """Create a structured error response from a domain exception."""
    app_error = ApplicationError.from_domain_error(error)
    return app_error.to_dict(), app_error.status_code
