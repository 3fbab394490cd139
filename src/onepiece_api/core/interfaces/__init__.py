from .database_interface import DatabaseConnectionInterface
from .repository_interface import RepositoryInterface

__all__ = ['DatabaseConnectionInterface', 'RepositoryInterface']
