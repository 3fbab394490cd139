# src/onepiece_api/core/exceptions/custom_exceptions.py
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Fixed error codes surfaced in the ``error`` field of the response envelope."""

    INVALID_ID = "INVALID_ID"
    NO_FIELDS_PROVIDED = "NO_FIELDS_PROVIDED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    IN_USE = "IN_USE"
    HAS_ASSOCIATIONS = "HAS_ASSOCIATIONS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_MISSING = "TOKEN_MISSING"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    DATABASE_CONNECTION_ERROR = "DATABASE_CONNECTION_ERROR"
    QUERY_EXECUTION_ERROR = "QUERY_EXECUTION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class OnePieceApiError(Exception):
    """Base exception for the One Piece catalog API."""

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = str(error_code.value if isinstance(error_code, ErrorCode) else
                              error_code or ErrorCode.INTERNAL_ERROR.value)
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        """Whether the error was caused by the request rather than the server."""
        return self.status_code < 500

    def get_user_message(self) -> str:
        """Get a user-friendly message."""
        return self.message


class DatabaseConnectionError(OnePieceApiError):
    """Raised when the store cannot be reached."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message, error_code or ErrorCode.DATABASE_CONNECTION_ERROR)

    def get_user_message(self) -> str:
        """Get a user-friendly message about the connection error."""
        return f"Unable to connect to database. {self.message}"


class QueryExecutionError(OnePieceApiError):
    """Raised when there's an error executing a database statement."""

    def __init__(self, query: str, error_message: str):
        self.query = query
        self.error_message = error_message
        super().__init__(
            f"Error executing query: {query}. Details: {error_message}",
            ErrorCode.QUERY_EXECUTION_ERROR
        )

    def get_user_message(self) -> str:
        """Get a user-friendly message for query errors."""
        if "syntax" in self.error_message.lower():
            return "The query syntax is incorrect."
        elif "constraint" in self.error_message.lower():
            return "The operation violates database constraints."
        else:
            return "An error occurred while executing the query."


class ConfigurationError(OnePieceApiError):
    """Raised when a required setting is missing or malformed."""

    def __init__(self, setting: str, reason: str = "is not configured"):
        self.setting = setting
        super().__init__(f"{setting} {reason}", ErrorCode.CONFIGURATION_ERROR)


class AuthenticationError(OnePieceApiError):
    """Raised when credentials or a bearer token are rejected."""

    status_code = 401

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_CREDENTIALS):
        super().__init__(message, error_code)
