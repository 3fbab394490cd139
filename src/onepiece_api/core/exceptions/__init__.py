# src/onepiece_api/core/exceptions/__init__.py
from .custom_exceptions import (
    ErrorCode,
    OnePieceApiError,
    DatabaseConnectionError,
    QueryExecutionError,
    ConfigurationError,
    AuthenticationError
)
from .validation_exceptions import (
    ValidationError,
    InvalidIdError,
    InvalidFieldError,
    MissingFieldError,
    NoFieldsProvidedError
)
from .resource_exceptions import (
    NotFoundError,
    DuplicateNameError,
    InUseError
)

__all__ = [
    'ErrorCode',
    'OnePieceApiError',
    'DatabaseConnectionError',
    'QueryExecutionError',
    'ConfigurationError',
    'AuthenticationError',
    'ValidationError',
    'InvalidIdError',
    'InvalidFieldError',
    'MissingFieldError',
    'NoFieldsProvidedError',
    'NotFoundError',
    'DuplicateNameError',
    'InUseError'
]
