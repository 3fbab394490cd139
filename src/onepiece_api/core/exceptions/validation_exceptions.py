# src/onepiece_api/core/exceptions/validation_exceptions.py
from typing import Any, Optional

from onepiece_api.core.exceptions.custom_exceptions import OnePieceApiError, ErrorCode


class ValidationError(OnePieceApiError):
    """Raised when request input fails validation. Always a client error."""

    status_code = 400

    def __init__(self, message: str, error_code: Optional[str] = None,
                 field: Optional[str] = None, value: Any = None):
        """
        Initialize validation error.

        Args:
            message (str): Error message
            error_code (Optional[str]): Code reported in the response envelope
            field (Optional[str]): Name of the offending field or parameter
            value (Any): The rejected value
        """
        self.field = field
        self.value = value
        super().__init__(message, error_code or ErrorCode.VALIDATION_ERROR)


class InvalidIdError(ValidationError):
    """Raised when a path id is not a positive integer."""

    def __init__(self, value: Any, resource_label: str = "resource"):
        super().__init__(f"Invalid {resource_label} ID", ErrorCode.INVALID_ID, "id", value)


class InvalidFieldError(ValidationError):
    """Raised when a filter or body field has the wrong type, range or enum value."""

    def __init__(self, field: str, message: Optional[str] = None, value: Any = None):
        super().__init__(
            message or f"Invalid {field} parameter",
            f"INVALID_{field.upper()}",
            field,
            value
        )


class MissingFieldError(ValidationError):
    """Raised when a required field is absent or blank."""

    def __init__(self, field: str):
        label = field.replace("_", " ").capitalize()
        super().__init__(f"{label} is required", f"MISSING_{field.upper()}", field)


class NoFieldsProvidedError(ValidationError):
    """Raised when an update payload carries no writable field."""

    def __init__(self):
        super().__init__("No fields provided for update", ErrorCode.NO_FIELDS_PROVIDED)
