# src/onepiece_api/config/__init__.py
from .base_config import BaseConfig
from .logging_config import LoggingConfig, get_security_logger
from .app_config import AppConfig

__all__ = [
    'BaseConfig',
    'LoggingConfig',
    'get_security_logger',
    'AppConfig'
]
