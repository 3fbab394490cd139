# src/onepiece_api/config/base_config.py
import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dotenv import load_dotenv


class BaseConfig:
    """
    Base configuration class with common functionality for all configuration components.
    Supports loading from environment variables, config files (JSON, YAML), and defaults.
    """

    def __init__(self, config_name: str, env_prefix: str = ""):
        """
        Initialize base configuration.

        Args:
            config_name (str): Name of this configuration component
            env_prefix (str): Prefix for environment variables
        """
        self.config_name = config_name
        self.env_prefix = env_prefix
        self._config_data = {}
        self._config_file_path = None

        # Values already exported in the environment take precedence over .env
        env_path = Path('.env')
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

    def load_from_env(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables carrying this component's prefix.

        Returns:
            Dict[str, Any]: Configuration values from environment variables
        """
        env_config = {}
        prefix = f"{self.env_prefix}_" if self.env_prefix else ""

        for key, value in os.environ.items():
            if self.env_prefix and key.startswith(prefix):
                config_key = key[len(prefix):]
                env_config[config_key.lower()] = self._parse_env_value(value)
            elif not self.env_prefix:
                env_config[key.lower()] = self._parse_env_value(value)

        return env_config

    def _parse_env_value(self, value: str) -> Any:
        """
        Parse environment variable value to appropriate type.

        Args:
            value (str): Environment variable value

        Returns:
            Any: Parsed value
        """
        if value.lower() in ('true', 'yes'):
            return True
        elif value.lower() in ('false', 'no'):
            return False
        elif value.isdigit():
            return int(value)
        elif value.replace('.', '', 1).isdigit() and value.count('.') <= 1:
            return float(value)
        else:
            return value

    def load_from_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            file_path (Union[str, Path]): Path to configuration file

        Returns:
            Dict[str, Any]: Configuration values from file

        Raises:
            ValueError: If file doesn't exist or format is not supported
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path
        if not path.exists():
            raise ValueError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()

        with open(path, 'r') as f:
            if suffix == '.json':
                return json.load(f)
            elif suffix in ('.yml', '.yaml'):
                return yaml.safe_load(f) or {}
            else:
                raise ValueError(f"Unsupported configuration file format: {suffix}")

    def set_config_file(self, file_path: Union[str, Path]) -> None:
        """
        Set the configuration file path.

        Args:
            file_path (Union[str, Path]): Path to configuration file

        Raises:
            ValueError: If file doesn't exist
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path
        if not path.exists():
            raise ValueError(f"Configuration file not found: {path}")
        self._config_file_path = path

    def load_config(self, defaults: Optional[Dict[str, Any]] = None,
                    config_file: Optional[Union[str, Path]] = None,
                    env_override: bool = True) -> Dict[str, Any]:
        """
        Load configuration from defaults, file, and environment variables.

        Args:
            defaults (Optional[Dict[str, Any]]): Default configuration values
            config_file (Optional[Union[str, Path]]): Path to configuration file
            env_override (bool): Whether environment variables should override file values

        Returns:
            Dict[str, Any]: Combined configuration
        """
        config = defaults.copy() if defaults else {}

        if config_file:
            self.set_config_file(config_file)

        if self._config_file_path:
            file_config = self.load_from_file(self._config_file_path)
            for key, value in file_config.items():
                config[key] = value

        if env_override:
            env_config = self.load_from_env()
            for key, value in env_config.items():
                config[key] = value

        self._config_data = config
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key (str): Configuration key
            default (Any): Default value if key is not found

        Returns:
            Any: Configuration value
        """
        return self._config_data.get(key, default)

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a value as a string; numbers parsed from the environment are turned back into text."""
        value = self._config_data.get(key, default)
        if value is None or value == "":
            return default
        return str(value)

    def get_int(self, key: str, default: int) -> int:
        """Get a value as an integer, falling back to ``default`` when it does not parse."""
        value = self._config_data.get(key, default)
        if isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a value as a boolean. Accepts real booleans and true/false style strings."""
        value = self._config_data.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ('true', 'yes', '1', 'on')
        return bool(value)

    def get_list(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        """Get a value as a list. Comma-separated strings are split and trimmed."""
        value = self._config_data.get(key)
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return [part.strip() for part in str(value).split(',') if part.strip()]

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key (str): Configuration key
            value (Any): Configuration value
        """
        self._config_data[key] = value

    def as_dict(self) -> Dict[str, Any]:
        """
        Get the entire configuration as a dictionary.

        Returns:
            Dict[str, Any]: Configuration dictionary
        """
        return self._config_data.copy()
