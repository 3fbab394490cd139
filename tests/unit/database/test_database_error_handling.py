import unittest
from unittest.mock import patch, MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError, SQLAlchemyError

from onepiece_api.core.exceptions import (
    DatabaseConnectionError,
    DuplicateNameError,
    NotFoundError,
    QueryExecutionError
)
from onepiece_api.database.error_handler import DatabaseErrorHandler


class TestDatabaseErrorHandler(unittest.TestCase):
    """Test cases for the DatabaseErrorHandler class."""

    def setUp(self):
        """Set up test environment before each test."""
        self.error_handler = DatabaseErrorHandler()

    def test_unique_violation_becomes_duplicate_name(self):
        """Test that unique constraint failures map to DUPLICATE_NAME."""
        error = IntegrityError("INSERT INTO races", {}, Exception("UNIQUE constraint failed: races.name"))

        result = self.error_handler.handle_error(error, "create races", {"resource": "race", "name": "Human"})

        self.assertIsInstance(result, DuplicateNameError)
        self.assertEqual(result.status_code, 409)
        self.assertEqual(result.error_code, "DUPLICATE_NAME")
        self.assertEqual(result.message, "A race with this name already exists")

    def test_mysql_duplicate_entry(self):
        """Test the MySQL wording of a unique violation."""
        error = IntegrityError("INSERT", {}, Exception("(1062, \"Duplicate entry 'Human' for key 'name'\")"))

        self.assertIsInstance(self.error_handler.handle_error(error, "create races"), DuplicateNameError)

    def test_other_integrity_error(self):
        """Test that non-unique constraint failures are generic query errors."""
        error = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: races.name"))

        result = self.error_handler.handle_error(error, "create races")

        self.assertIsInstance(result, QueryExecutionError)
        self.assertEqual(result.status_code, 500)
        self.assertEqual(result.get_user_message(), "The operation violates database constraints.")

    def test_connection_error(self):
        """Test that lost connections map to DatabaseConnectionError."""
        error = OperationalError("SELECT 1", {}, Exception("Lost connection to MySQL server during query"))

        result = self.error_handler.handle_error(error, "list races")

        self.assertIsInstance(result, DatabaseConnectionError)
        self.assertEqual(result.error_code, "DATABASE_CONNECTION_ERROR")

    def test_syntax_error(self):
        """Test that programming errors are reported as syntax errors."""
        error = ProgrammingError("SELEC", {}, Exception("You have an error in your SQL syntax"))

        result = self.error_handler.handle_error(error, "execute script")

        self.assertIsInstance(result, QueryExecutionError)
        self.assertEqual(result.get_user_message(), "The query syntax is incorrect.")

    def test_api_errors_pass_through(self):
        """Test that errors already converted are returned unchanged."""
        error = NotFoundError("race", 7)

        self.assertIs(self.error_handler.handle_error(error, "get races"), error)

    def test_unexpected_error(self):
        """Test that arbitrary exceptions become query errors."""
        result = self.error_handler.handle_error(RuntimeError("boom"), "list races")

        self.assertIsInstance(result, QueryExecutionError)
        self.assertIn("boom", result.message)

    @patch('onepiece_api.database.error_handler.logger')
    def test_sensitive_context_is_not_logged(self, mock_logger):
        """Test that passwords and tokens are filtered from the logged context."""
        error = SQLAlchemyError("failure")

        self.error_handler.handle_error(error, "login", {"username": "admin", "password": "secret",
                                                         "api_token": "abc"})

        mock_logger.log.assert_called_once()
        context = mock_logger.log.call_args.kwargs["extra"]["context"]
        self.assertEqual(context, {"username": "admin"})

    def test_execute_returns_result(self):
        """Test that successful operations pass their result through."""
        result = self.error_handler.execute(lambda a, b: a + b, 2, 3, operation_name="add")

        self.assertEqual(result, 5)

    def test_execute_converts_store_errors(self):
        """Test that SQLAlchemy errors raised by the operation are converted once, without retry."""
        operation = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("connection refused")))

        with self.assertRaises(DatabaseConnectionError):
            self.error_handler.execute(operation, operation_name="diagnose")

        self.assertEqual(operation.call_count, 1)

    def test_execute_keeps_api_errors(self):
        """Test that API errors raised by the operation propagate unchanged."""
        error = NotFoundError("ship", 3)

        with self.assertRaises(NotFoundError) as context:
            self.error_handler.execute(MagicMock(side_effect=error))

        self.assertIs(context.exception, error)

    def test_execute_does_not_hide_programming_bugs(self):
        """Test that non-database exceptions are not converted."""
        with self.assertRaises(KeyError):
            self.error_handler.execute(MagicMock(side_effect=KeyError("missing")))


if __name__ == '__main__':
    unittest.main()
