# src/onepiece_api/database/schema_retriever.py
from typing import Dict, Any, List

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from onepiece_api.core.interfaces import DatabaseConnectionInterface
from onepiece_api.core.exceptions import DatabaseConnectionError


class SchemaRetriever:
    """
    Reads live schema information (tables, columns, foreign keys) from the
    connected store. Used by the diagnostics endpoints, which report what is
    actually deployed rather than what the models declare.
    """

    def __init__(self, connection: DatabaseConnectionInterface):
        """
        Args:
            connection (DatabaseConnectionInterface): Database connection
        """
        self._connection = connection

    def _get_engine(self) -> Engine:
        try:
            return self._connection.get_engine()
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"No active database engine: {str(e)}") from e

    def get_all_tables(self) -> List[str]:
        """
        Get a list of all table names in the database.

        Returns:
            List[str]: Table names, sorted
        """
        return sorted(inspect(self._get_engine()).get_table_names())

    def get_column_metadata(self, table_name: str) -> List[Dict[str, Any]]:
        """
        Get metadata for all columns in the specified table.

        Args:
            table_name (str): The name of the table

        Returns:
            List[Dict[str, Any]]: List of column metadata dictionaries
        """
        columns = inspect(self._get_engine()).get_columns(table_name)

        return [
            {
                'name': col['name'],
                'type': str(col['type']),
                'nullable': col.get('nullable', True)
            }
            for col in columns
        ]

    def get_foreign_keys(self, table_name: str) -> List[Dict[str, Any]]:
        """
        Get outgoing foreign keys of a table in a JSON friendly shape.

        Returns:
            List[Dict[str, Any]]: ``column``, ``referencedTable``, ``referencedColumn`` per key column
        """
        foreign_keys = []
        for fk in inspect(self._get_engine()).get_foreign_keys(table_name):
            for column, referred in zip(fk['constrained_columns'], fk['referred_columns']):
                foreign_keys.append({
                    'column': column,
                    'referencedTable': fk['referred_table'],
                    'referencedColumn': referred
                })
        return foreign_keys

    def get_all_foreign_keys(self) -> Dict[str, List[Dict[str, Any]]]:
        """Foreign keys for every table that has at least one."""
        relationships = {}
        for table in self.get_all_tables():
            foreign_keys = self.get_foreign_keys(table)
            if foreign_keys:
                relationships[table] = foreign_keys
        return relationships
