# src/onepiece_api/database/error_handler.py
import logging
from typing import Callable, Any, Optional, Dict

from sqlalchemy.exc import SQLAlchemyError, OperationalError, IntegrityError, ProgrammingError

from onepiece_api.core.exceptions import (
    OnePieceApiError,
    DatabaseConnectionError,
    QueryExecutionError,
    DuplicateNameError
)

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = ('password', 'token', 'key', 'secret')

CONNECTION_MARKERS = ('connection', 'timeout', 'unable to open', 'can\'t connect', 'server has gone away')
UNIQUE_MARKERS = ('unique', 'duplicate')


class DatabaseErrorHandler:
    """
    Centralized conversion of SQLAlchemy errors into API exceptions.

    Nothing is retried: a failed statement is logged once and surfaced as the
    matching exception for the HTTP layer.
    """

    def __init__(self, log_level: int = logging.ERROR):
        """
        Initialize the database error handler.

        Args:
            log_level: Logging level for database errors
        """
        self.log_level = log_level

    def handle_error(
            self,
            error: Exception,
            operation: str,
            context: Optional[Dict[str, Any]] = None
    ) -> OnePieceApiError:
        """
        Handle a database error.

        Args:
            error: The original exception
            operation: Description of the operation being performed
            context: Additional context; ``resource`` and ``name`` feed duplicate-name errors

        Returns:
            OnePieceApiError: Appropriate API exception
        """
        context = context or {}

        if isinstance(error, OnePieceApiError):
            return error

        self._log_error(error, operation, context)

        if isinstance(error, SQLAlchemyError):
            return self._handle_sqlalchemy_error(error, operation, context)

        return QueryExecutionError(
            query=context.get("query", operation),
            error_message=f"Unexpected error: {str(error)}"
        )

    def _handle_sqlalchemy_error(
            self,
            error: SQLAlchemyError,
            operation: str,
            context: Dict[str, Any]
    ) -> OnePieceApiError:
        error_str = str(error)
        lowered = error_str.lower()

        if isinstance(error, IntegrityError) and any(marker in lowered for marker in UNIQUE_MARKERS):
            return DuplicateNameError(context.get("resource", "record"), context.get("name", ""))

        if isinstance(error, OperationalError) and any(marker in lowered for marker in CONNECTION_MARKERS):
            return DatabaseConnectionError(f"Database connection error during {operation}")

        if isinstance(error, IntegrityError):
            return QueryExecutionError(
                query=context.get("query", operation),
                error_message=f"Constraint violation: {error_str}"
            )

        if isinstance(error, ProgrammingError):
            return QueryExecutionError(
                query=context.get("query", operation),
                error_message=f"SQL syntax error: {error_str}"
            )

        return QueryExecutionError(
            query=context.get("query", operation),
            error_message=f"Database error: {error_str}"
        )

    def _log_error(
            self,
            error: Exception,
            operation: str,
            context: Dict[str, Any]
    ) -> None:
        message = f"Database error during {operation}: {str(error)}"

        safe_context = {k: v for k, v in context.items()
                        if not any(sensitive in k.lower() for sensitive in SENSITIVE_KEYS)}

        logger.log(self.log_level, message, exc_info=True, extra={"context": safe_context})

    def execute(
            self,
            func: Callable[..., Any],
            *args,
            operation_name: str = "database operation",
            context: Optional[Dict[str, Any]] = None,
            **kwargs
    ) -> Any:
        """
        Run a database operation and convert any store error it raises.

        Raises:
            OnePieceApiError: The converted error
        """
        try:
            return func(*args, **kwargs)
        except OnePieceApiError:
            raise
        except SQLAlchemyError as e:
            raise self.handle_error(e, operation_name, context) from e
