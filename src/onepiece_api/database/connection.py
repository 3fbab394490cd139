# src/onepiece_api/database/connection.py
from contextlib import contextmanager
from typing import Dict, Any, Iterator, Optional
import logging

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from onepiece_api.core.interfaces import DatabaseConnectionInterface
from onepiece_api.core.exceptions import DatabaseConnectionError
from onepiece_api.database.config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnection(DatabaseConnectionInterface):
    """
    Owns the SQLAlchemy engine and session factory for the catalog database.

    Constructed explicitly by the application factory and connected/disposed by
    the application lifespan. Nothing in the package creates one at import time.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None,
                 connection_string: Optional[str] = None):
        """
        Initialize the connection.

        Args:
            config (Optional[DatabaseConfig]): Database configuration (read from the environment if None)
            connection_string (Optional[str]): Shortcut that overrides the configured URL
        """
        if connection_string:
            config = DatabaseConfig(overrides={'url': connection_string})
        self._config = config or DatabaseConfig()

        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._is_connected = False

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    def connect(self) -> bool:
        """
        Create the engine and check it answers.

        Returns:
            bool: True if connection is successful

        Raises:
            DatabaseConnectionError: If connection fails
        """
        if self._is_connected and self._engine:
            return True

        try:
            engine = sa.create_engine(self._config.get_url(), **self._config.get_engine_kwargs())

            with engine.connect() as connection:
                connection.execute(sa.text("SELECT 1"))

            self._engine = engine
            self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
            self._is_connected = True
            logger.info(f"Successfully connected to database: {self._config.describe()}")
            return True
        except SQLAlchemyError as e:
            self._is_connected = False
            self._engine = None
            self._session_factory = None

            error_message = f"Failed to connect to database: {str(e)}"
            logger.error(error_message)
            raise DatabaseConnectionError(error_message) from e

    def disconnect(self) -> None:
        """Dispose the engine and its pool."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database connection closed")

        self._engine = None
        self._session_factory = None
        self._is_connected = False

    def is_connected(self) -> bool:
        return self._is_connected and self._engine is not None

    def ping(self) -> bool:
        """
        Run ``SELECT 1`` against the store.

        Returns:
            bool: True when the store answers; never raises
        """
        try:
            engine = self.get_engine()
            with engine.connect() as connection:
                connection.execute(sa.text("SELECT 1"))
            return True
        except (SQLAlchemyError, DatabaseConnectionError) as e:
            logger.warning(f"Database ping failed: {str(e)}")
            return False

    def get_engine(self) -> Engine:
        """
        Get the engine, connecting first if needed.

        Raises:
            DatabaseConnectionError: If no connection can be established
        """
        if not self.is_connected():
            self.connect()
        return self._engine

    def get_session(self) -> Session:
        """
        Get a new database session.

        Returns:
            Session: SQLAlchemy database session

        Raises:
            DatabaseConnectionError: If no connection can be established
        """
        if not self.is_connected():
            self.connect()
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success, rolls back on any error and always closes."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_connection_info(self) -> Dict[str, Any]:
        """
        Get information about the current connection.

        Returns:
            Dict[str, Any]: Backend, host, database and whether the engine is live
        """
        info = self._config.describe()
        info["connected"] = self.is_connected()
        return info
