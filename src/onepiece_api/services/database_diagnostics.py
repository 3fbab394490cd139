# src/onepiece_api/services/database_diagnostics.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from onepiece_api.core.interfaces import DatabaseConnectionInterface
from onepiece_api.core.exceptions import DatabaseConnectionError
from onepiece_api.database.error_handler import DatabaseErrorHandler
from onepiece_api.database.models import Base, EXPECTED_TABLES
from onepiece_api.database.schema_retriever import SchemaRetriever

logger = logging.getLogger(__name__)

POPULATED = "populated"
EMPTY = "empty"
MISSING = "missing"

MISSING_TABLE_MARKERS = ("no such table", "doesn't exist", "does not exist", "undefined table")

SYNC_RECOMMENDATION = "Run schema sync (POST /api/db/sync) to create the missing tables"
SEED_RECOMMENDATION = "Run seed scripts (POST /api/db/execute-sql) to populate the empty tables"
HEALTHY_RECOMMENDATION = "Database is healthy; no action required"
CONNECTION_HINT = "Check that the database server is running and the DB_* settings are correct"


def _is_missing_table(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in MISSING_TABLE_MARKERS)


@dataclass
class TableCheck:
    name: str
    exists: bool
    row_count: int
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "exists": self.exists, "rowCount": self.row_count, "status": self.status}


@dataclass
class Issue:
    type: str
    severity: str
    message: str
    table: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "severity": self.severity, "message": self.message}
        if self.table is not None:
            data["table"] = self.table
        return data


@dataclass
class DiagnosisReport:
    connection_ok: bool
    tables: List[TableCheck] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    foreign_key_count: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def healthy(self) -> bool:
        return self.connection_ok and not self.issues

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connectionOk": self.connection_ok,
            "tables": [table.to_dict() for table in self.tables],
            "issues": [issue.to_dict() for issue in self.issues],
            "recommendations": list(self.recommendations),
            "foreignKeyCount": self.foreign_key_count,
            "hasRelationships": self.foreign_key_count > 0,
            "timestamp": self.timestamp
        }


class DatabaseDiagnostics:
    """
    Read-only health checks over the catalog schema, plus the schema sync used
    to repair missing tables.
    """

    def __init__(self, connection: DatabaseConnectionInterface,
                 expected_tables: Sequence[str] = tuple(EXPECTED_TABLES)):
        self._connection = connection
        self.expected_tables = list(expected_tables)
        self._schema = SchemaRetriever(connection)
        self._error_handler = DatabaseErrorHandler()

    def _count_rows(self, table_name: str) -> int:
        # Table names come from the fixed expected list or the live inspector
        with self._connection.get_engine().connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table_name}")).scalar_one()

    def check_table(self, table_name: str) -> TableCheck:
        """
        Count rows of one table.

        Raises:
            SQLAlchemyError: For failures other than a missing table
        """
        try:
            count = self._count_rows(table_name)
        except SQLAlchemyError as e:
            if _is_missing_table(e):
                return TableCheck(table_name, False, 0, MISSING)
            raise
        return TableCheck(table_name, True, count, POPULATED if count > 0 else EMPTY)

    @staticmethod
    def recommend(issues: Sequence[Issue]) -> List[str]:
        types = {issue.type for issue in issues}
        recommendations = []
        if "missing_table" in types:
            recommendations.append(SYNC_RECOMMENDATION)
        if "empty_table" in types:
            recommendations.append(SEED_RECOMMENDATION)
        if not recommendations:
            recommendations.append(HEALTHY_RECOMMENDATION)
        return recommendations

    def diagnose(self) -> DiagnosisReport:
        """
        Check connectivity, then every expected table.

        Returns:
            DiagnosisReport: Table statuses, issues and recommendations
        """
        return self._error_handler.execute(self._diagnose, operation_name="diagnose database")

    def _diagnose(self) -> DiagnosisReport:
        if not self._connection.ping():
            logger.error("Diagnosis: database connection failed")
            return DiagnosisReport(
                connection_ok=False,
                issues=[Issue("connection", "critical", "Unable to connect to database")],
                recommendations=[CONNECTION_HINT]
            )

        report = DiagnosisReport(connection_ok=True)
        for table_name in self.expected_tables:
            check = self.check_table(table_name)
            report.tables.append(check)
            if check.status == MISSING:
                report.issues.append(Issue("missing_table", "critical",
                                           f"Table '{table_name}' does not exist", table_name))
            elif check.status == EMPTY:
                report.issues.append(Issue("empty_table", "high",
                                           f"Table '{table_name}' has no rows", table_name))

        report.foreign_key_count = sum(len(keys) for keys in self._schema.get_all_foreign_keys().values())
        report.recommendations = self.recommend(report.issues)

        logger.info(f"Diagnosis complete: {len(report.issues)} issue(s) across {len(report.tables)} tables")
        return report

    def status(self) -> Dict[str, Any]:
        """
        Every table actually present with its row count and columns, plus foreign keys
        and a credential-free description of the connection.

        Raises:
            DatabaseConnectionError: If the store is unreachable
        """
        return self._error_handler.execute(self._status, operation_name="database status")

    def _status(self) -> Dict[str, Any]:
        if not self._connection.ping():
            raise DatabaseConnectionError("Database is not reachable")

        tables = [{"tableName": name,
                   "rowCount": self._count_rows(name),
                   "columns": self._schema.get_column_metadata(name)}
                  for name in self._schema.get_all_tables()]

        foreign_keys = [dict(key, table=table)
                        for table, keys in self._schema.get_all_foreign_keys().items()
                        for key in keys]

        return {
            "database": self._connection.get_connection_info(),
            "totalTables": len(tables),
            "tables": tables,
            "foreignKeys": foreign_keys,
            "hasRelationships": len(foreign_keys) > 0,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    def sync_schema(self) -> Dict[str, Any]:
        """Create tables missing from the store. Existing tables are never dropped or altered."""
        return self._error_handler.execute(self._sync_schema, operation_name="sync schema")

    def _sync_schema(self) -> Dict[str, Any]:
        engine = self._connection.get_engine()
        before = set(self._schema.get_all_tables())
        Base.metadata.create_all(engine)
        created = sorted(set(self._schema.get_all_tables()) - before)
        logger.info(f"Schema sync created {len(created)} table(s): {', '.join(created) or 'none'}")
        return {
            "synced": True,
            "createdTables": created,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
