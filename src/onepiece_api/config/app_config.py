# src/onepiece_api/config/app_config.py
from typing import Dict, Any, List, Optional, Union
from pathlib import Path

from onepiece_api.config.base_config import BaseConfig


class AppConfig(BaseConfig):
    """
    Configuration for the HTTP application.
    Holds the environment name, JWT settings, admin credentials and CORS origins.
    """

    PRODUCTION = "production"
    DEVELOPMENT = "development"

    def __init__(self, env_prefix: str = "API", overrides: Optional[Dict[str, Any]] = None,
                 config_file: Optional[Union[str, Path]] = None):
        """
        Initialize application configuration.

        Args:
            env_prefix (str): Prefix for environment variables
            overrides (Optional[Dict[str, Any]]): Values applied after the environment
            config_file (Optional[Union[str, Path]]): Optional JSON/YAML settings file
        """
        super().__init__("app", env_prefix)

        self._default_config = {
            'environment': self.PRODUCTION,
            'jwt_secret': None,
            'jwt_expires_in': 86400,
            'admin_username': None,
            'admin_password_hash': None,
            'cors_origins': '*',
            'host': '0.0.0.0',
            'port': 3000
        }

        self.load_config(defaults=self._default_config, config_file=config_file)
        for key, value in (overrides or {}).items():
            self.set(key, value)

    @property
    def environment(self) -> str:
        return (self.get_str('environment', self.PRODUCTION) or self.PRODUCTION).lower()

    @property
    def is_production(self) -> bool:
        """Whether error details must be withheld from responses."""
        return self.environment == self.PRODUCTION

    @property
    def jwt_secret(self) -> Optional[str]:
        return self.get_str('jwt_secret')

    @property
    def jwt_expires_in(self) -> int:
        return self.get_int('jwt_expires_in', 86400)

    @property
    def admin_username(self) -> Optional[str]:
        return self.get_str('admin_username')

    @property
    def admin_password_hash(self) -> Optional[str]:
        return self.get_str('admin_password_hash')

    @property
    def cors_origins(self) -> List[str]:
        return self.get_list('cors_origins', ['*'])

    @property
    def host(self) -> str:
        return self.get_str('host', '0.0.0.0')

    @property
    def port(self) -> int:
        return self.get_int('port', 3000)
