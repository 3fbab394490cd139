# src/onepiece_api/database/__init__.py
from .auth_manager import AuthenticationManager
from .config import DatabaseConfig
from .connection import DatabaseConnection
from .error_handler import DatabaseErrorHandler
from .schema_retriever import SchemaRetriever
from .models import Base, EXPECTED_TABLES

__all__ = [
    'AuthenticationManager',
    'DatabaseConfig',
    'DatabaseConnection',
    'DatabaseErrorHandler',
    'SchemaRetriever',
    'Base',
    'EXPECTED_TABLES'
]
