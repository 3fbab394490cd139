# src/onepiece_api/database/config.py
from typing import Dict, Any, Optional, Union
from pathlib import Path

from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import StaticPool

from onepiece_api.config.base_config import BaseConfig
from onepiece_api.core.exceptions import ConfigurationError
from onepiece_api.database.auth_manager import AuthenticationManager


class DatabaseConfig(BaseConfig):
    """
    Centralized configuration for the catalog database.

    ``DB_URL`` wins when set. Otherwise the URL is assembled from ``DB_TYPE``,
    ``DB_HOST``, ``DB_PORT``, ``DB_USERNAME``, ``DB_PASSWORD`` and ``DB_DATABASE``.
    With ``DB_KEYRING_SERVICE`` set the password is read from the system keyring.
    """

    POSTGRES = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    DRIVERS = {
        POSTGRES: "postgresql",
        MYSQL: "mysql+pymysql",
        SQLITE: "sqlite"
    }

    DEFAULT_PORTS = {
        POSTGRES: 5432,
        MYSQL: 3306
    }

    def __init__(self, env_prefix: str = "DB", overrides: Optional[Dict[str, Any]] = None,
                 config_file: Optional[Union[str, Path]] = None,
                 auth_manager: Optional[AuthenticationManager] = None):
        """
        Initialize database configuration.

        Args:
            env_prefix (str): Prefix for environment variables
            overrides (Optional[Dict[str, Any]]): Values applied after the environment
            config_file (Optional[Union[str, Path]]): Optional JSON/YAML settings file
            auth_manager (Optional[AuthenticationManager]): Credential resolver
        """
        super().__init__("database", env_prefix)
        self.auth_manager = auth_manager or AuthenticationManager()

        self._default_config = {
            'url': None,
            'type': self.MYSQL,
            'host': 'localhost',
            'port': None,
            'username': 'root',
            'password': None,
            'database': 'onepiece_db',
            'keyring_service': None,
            'ssl_ca': None,
            'echo': False,
            'pool_size': 5,
            'max_overflow': 10,
            'pool_timeout': 30,
            'pool_recycle': 1800
        }

        self.load_config(defaults=self._default_config, config_file=config_file)
        for key, value in (overrides or {}).items():
            self.set(key, value)

    @property
    def db_type(self) -> str:
        url = self.get_str('url')
        if url:
            return make_url(url).get_backend_name()
        return (self.get_str('type', self.MYSQL) or self.MYSQL).lower()

    @property
    def is_sqlite(self) -> bool:
        return self.db_type == self.SQLITE

    def _credentials(self) -> Dict[str, Any]:
        username = self.get_str('username')
        service = self.get_str('keyring_service')
        if service:
            credentials = self.auth_manager.get_keyring_credentials(service, username)
        elif self.get_str('ssl_ca'):
            credentials = self.auth_manager.get_ssl_credentials(
                self.get_str('ssl_ca'), username, self.get_str('password'))
        else:
            credentials = self.auth_manager.get_basic_auth_credentials(username, self.get_str('password'))
        return self.auth_manager.get_auth_params(credentials)

    def get_url(self) -> Union[str, URL]:
        """
        Build the SQLAlchemy URL.

        Returns:
            Union[str, URL]: Explicit ``DB_URL`` or an assembled ``URL``

        Raises:
            ConfigurationError: If the database type is not supported
        """
        url = self.get_str('url')
        if url:
            return url

        db_type = self.db_type
        if db_type not in self.DRIVERS:
            raise ConfigurationError("DB_TYPE", f"'{db_type}' is not supported")

        database = self.get_str('database')
        if db_type == self.SQLITE:
            return URL.create("sqlite", database=database)

        params = self._credentials()
        return URL.create(
            self.DRIVERS[db_type],
            username=params.get('username'),
            password=params.get('password'),
            host=self.get_str('host'),
            port=self.get_int('port', self.DEFAULT_PORTS[db_type]),
            database=database
        )

    def get_connect_args(self) -> Dict[str, Any]:
        """Driver arguments: thread sharing for SQLite, SSL for server databases."""
        if self.is_sqlite:
            return {"check_same_thread": False}
        if self.get_str('url'):
            return {}
        return self._credentials().get('connect_args', {})

    def get_connection_pool_args(self) -> Dict[str, Any]:
        """
        Get connection pooling arguments for SQLAlchemy.

        SQLite gets no queue pool settings; in-memory SQLite shares one connection
        so every session sees the same database.

        Returns:
            Dict[str, Any]: Keyword arguments for ``create_engine``
        """
        if self.is_sqlite:
            url = make_url(self.get_url())
            if url.database in (None, "", ":memory:"):
                return {"poolclass": StaticPool}
            return {}

        return {
            "pool_size": self.get_int('pool_size', 5),
            "max_overflow": self.get_int('max_overflow', 10),
            "pool_timeout": self.get_int('pool_timeout', 30),
            "pool_recycle": self.get_int('pool_recycle', 1800),
            "pool_pre_ping": True
        }

    def get_engine_kwargs(self) -> Dict[str, Any]:
        """All keyword arguments for ``sqlalchemy.create_engine`` apart from the URL."""
        kwargs = {
            "connect_args": self.get_connect_args(),
            "echo": self.get_bool('echo', False)
        }
        kwargs.update(self.get_connection_pool_args())
        return kwargs

    def describe(self) -> Dict[str, Any]:
        """Connection details safe to log or return (no password)."""
        url = make_url(self.get_url())
        return {
            "database_type": url.get_backend_name(),
            "host": url.host,
            "port": url.port,
            "database": url.database
        }
