from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session


class DatabaseConnectionInterface(ABC):
    """Abstract base class for database connections."""

    @abstractmethod
    def connect(self) -> bool:
        """Establish a database connection.

        Returns:
            bool: True if connection is successful, False otherwise.
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the database connection."""
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Check that the store answers a trivial query."""
        pass

    @abstractmethod
    def get_engine(self) -> Engine:
        """Return the SQLAlchemy engine, connecting first if needed."""
        pass

    @abstractmethod
    def get_session(self) -> Session:
        """Return a new ORM session bound to the engine."""
        pass

    @abstractmethod
    def get_connection_info(self) -> Dict[str, Any]:
        """Describe the current connection without exposing credentials."""
        pass
