"""
Custom exceptions for the tracking service with structured error context.

Every failure raised by the hosted-service wrappers or the view layer is a
TrackerException carrying a human-readable message plus a context dict.
The API layer maps each family onto an HTTP status and a generic error body.

Exception Hierarchy:
    TrackerException (base)
    ├── ConfigurationError
    ├── ServiceError
    │   ├── TableServiceError
    │   │   └── RecordNotFoundError
    │   ├── ImageUploadError
    │   └── EmailDeliveryError
    ├── ValidationError
    │   ├── DuplicateEmailError
    │   ├── CustomerNotFoundError
    │   └── ImportFormatError
    ├── AuthenticationError
    └── PermissionDeniedError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class TrackerException(Exception):
    """
    Base exception for all tracking-service errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (table, record id, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class ConfigurationError(TrackerException):
    """Raised when a required environment value is missing."""
    pass


# ============================================================================
# Hosted Service Errors
# ============================================================================

class ServiceError(TrackerException):
    """Base exception for failures talking to a hosted API."""
    pass


class TableServiceError(ServiceError):
    """
    Exception raised when a table service call fails.

    Context should include:
        - table: Table name
        - status_code: HTTP status code (if applicable)
        - response_body: Response body (truncated)
    """
    pass


class RecordNotFoundError(TableServiceError):
    """Raised when a record id or lookup key does not exist."""
    pass


class ImageUploadError(ServiceError):
    """
    Exception raised when an image upload fails.

    Context should include:
        - filename: Name of the uploaded file
        - status_code: HTTP status code (if applicable)
    """
    pass


class EmailDeliveryError(ServiceError):
    """Raised by a single mail transport; callers fall through to the next one."""
    pass


# ============================================================================
# Input Errors
# ============================================================================

class ValidationError(TrackerException):
    """
    Exception raised when user input fails validation.

    Context should include:
        - field_name: Name of the field that failed validation
    """
    pass


class DuplicateEmailError(ValidationError):
    """Raised when an account with the same email already exists."""
    pass


class CustomerNotFoundError(ValidationError):
    """Raised when a customer reference cannot be resolved."""
    pass


class ImportFormatError(ValidationError):
    """
    Exception raised when an uploaded tracking CSV cannot be used.

    Context should include:
        - columns: Header columns found in the file
    """
    pass


# ============================================================================
# Access Errors
# ============================================================================

class AuthenticationError(TrackerException):
    """Raised for bad credentials or an invalid or expired token."""
    pass


class PermissionDeniedError(TrackerException):
    """Raised when the current user's role may not use an endpoint."""
    pass


def is_duplicate_error(error: Exception) -> bool:
    """The table service reports uniqueness violations only in message text."""
    message = getattr(error, "message", str(error)).lower()
    return "duplicate" in message or "unique" in message
