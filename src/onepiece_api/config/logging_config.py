# src/onepiece_api/config/logging_config.py
import copy
import logging
import logging.config
from pathlib import Path
from typing import Optional, Union

from onepiece_api.config.base_config import BaseConfig

SECURITY_LOGGER_NAME = "onepiece_api.security"


class LoggingConfig(BaseConfig):
    """
    Configuration for application logging.

    Console output always; rotating application, error and security log files
    under ``log_dir`` unless file logging is disabled. ``LOG_LEVEL`` overrides
    the console level and ``LOG_TO_FILE=false`` turns the files off.
    """

    DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s'

    def __init__(self, env_prefix: str = "LOG", log_dir: Union[str, Path] = "logs"):
        """
        Initialize logging configuration.

        Args:
            env_prefix (str): Prefix for environment variables
            log_dir (Union[str, Path]): Directory for rotating log files
        """
        super().__init__("logging", env_prefix)
        self.log_dir = Path(log_dir)

    def _build_dict_config(self, level: str, log_to_file: bool) -> dict:
        handlers = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': level,
                'formatter': 'standard',
                'stream': 'ext://sys.stdout'
            }
        }
        root_handlers = ['console']
        security_handlers = []

        if log_to_file:
            handlers.update({
                'file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'level': 'DEBUG',
                    'formatter': 'detailed',
                    'filename': str(self.log_dir / 'app.log'),
                    'maxBytes': 10485760,  # 10MB
                    'backupCount': 5
                },
                'error_file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'level': 'ERROR',
                    'formatter': 'detailed',
                    'filename': str(self.log_dir / 'error.log'),
                    'maxBytes': 10485760,
                    'backupCount': 5
                },
                'security_file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'level': 'INFO',
                    'formatter': 'standard',
                    'filename': str(self.log_dir / 'security.log'),
                    'maxBytes': 10485760,
                    'backupCount': 5
                }
            })
            root_handlers += ['file', 'error_file']
            security_handlers.append('security_file')

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'standard': {'format': self.DEFAULT_FORMAT},
                'detailed': {'format': self.DETAILED_FORMAT}
            },
            'handlers': handlers,
            'loggers': {
                '': {
                    'handlers': root_handlers,
                    'level': 'DEBUG',
                    'propagate': True
                },
                SECURITY_LOGGER_NAME: {
                    'handlers': security_handlers,
                    'level': 'INFO',
                    'propagate': True
                },
                # Statement echo is far too noisy for the app log
                'sqlalchemy.engine': {
                    'level': 'WARNING',
                    'propagate': True
                }
            }
        }

    def configure(self, config_file: Optional[Union[str, Path]] = None,
                  log_to_file: Optional[bool] = None) -> None:
        """
        Configure logging system.

        Args:
            config_file (Optional[Union[str, Path]]): JSON/YAML file holding a full dictConfig
            log_to_file (Optional[bool]): Force file handlers on or off
        """
        settings = self.load_config(defaults={'level': 'INFO', 'to_file': True}, env_override=True)
        level = str(settings.get('level', 'INFO')).upper()
        if log_to_file is None:
            log_to_file = self.get_bool('to_file', True)

        if config_file:
            dict_config = self.load_from_file(config_file)
        else:
            dict_config = self._build_dict_config(level, log_to_file)

        if log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        logging.config.dictConfig(copy.deepcopy(dict_config))

        logging.getLogger(__name__).info(f"Logging configured with level: {level}")

    def set_level(self, logger_name: str = '', level: Union[int, str] = logging.INFO) -> None:
        """
        Set log level for a specific logger.

        Args:
            logger_name (str): Logger name (empty for root logger)
            level (Union[int, str]): Log level (can be name or level number)
        """
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        logging.getLogger(logger_name).setLevel(level)

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger with the specified name.

        Args:
            name (str): Logger name

        Returns:
            logging.Logger: Configured logger
        """
        return logging.getLogger(name)


def get_security_logger() -> logging.Logger:
    """Logger for login attempts and token failures."""
    return logging.getLogger(SECURITY_LOGGER_NAME)
