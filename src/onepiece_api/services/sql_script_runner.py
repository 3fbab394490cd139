# src/onepiece_api/services/sql_script_runner.py
"""
Executes named ``.sql`` files from the ``schemas`` directory shipped inside
``onepiece_api.database``.

Each file runs in its own transaction: the first failing statement rolls the
whole file back and the batch moves on to the next file. Files run one after
another in request order.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from importlib import resources
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError

from onepiece_api.core.interfaces import DatabaseConnectionInterface
from onepiece_api.core.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

# Installed as package data; see setup.py
SCRIPTS_DIR = Path(str(resources.files("onepiece_api.database") / "schemas"))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SqlScript:
    file_name: str
    statements: List[str]

    @classmethod
    def parse(cls, file_name: str, content: str) -> "SqlScript":
        """
        Split script text into statements.

        Lines whose trimmed text starts with ``--`` and blank lines are dropped,
        the rest is split on ``;``. Pure ``SELECT`` statements (progress banners
        in seed files) are skipped.
        """
        kept = [line for line in content.splitlines()
                if line.strip() and not line.strip().startswith('--')]
        statements = []
        for chunk in "\n".join(kept).split(';'):
            statement = chunk.strip()
            if not statement:
                continue
            if statement.upper().startswith('SELECT'):
                continue
            statements.append(statement)
        return cls(file_name=file_name, statements=statements)


@dataclass
class ScriptExecutionResult:
    file_name: str
    success: bool
    statements_executed: int = 0
    error: Optional[str] = None

    @property
    def message(self) -> str:
        if self.success:
            return f"File '{self.file_name}' executed successfully"
        return f"File '{self.file_name}' failed: {self.error}"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "fileName": self.file_name,
            "success": self.success,
            "statementsExecuted": self.statements_executed,
            "message": self.message
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class ScriptBatchReport:
    total_files: int
    results: List[ScriptExecutionResult] = field(default_factory=list)
    connection_ok: bool = True
    error: Optional[str] = None
    timestamp: str = field(default_factory=_now)

    @property
    def successful_files(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed_files(self) -> int:
        return self.total_files - self.successful_files

    @property
    def success(self) -> bool:
        return self.connection_ok and self.failed_files == 0

    @property
    def message(self) -> str:
        if not self.connection_ok:
            return "Database connection failed; no SQL files were executed"
        return (f"Executed {self.total_files} SQL files: {self.successful_files} successful, "
                f"{self.failed_files} failed")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "totalFiles": self.total_files,
            "successfulFiles": self.successful_files,
            "failedFiles": self.failed_files,
            "results": [result.to_dict() for result in self.results],
            "timestamp": self.timestamp
        }
        if self.error is not None:
            data["error"] = self.error
        return data


class SqlScriptRunner:
    """Runs seed and schema scripts transactionally, one file at a time."""

    def __init__(self, connection: DatabaseConnectionInterface,
                 scripts_dir: Union[str, Path] = SCRIPTS_DIR):
        self._connection = connection
        self.scripts_dir = Path(scripts_dir).resolve()

    def resolve(self, file_name: str) -> Path:
        """
        Map a requested name onto a file inside the scripts directory.

        Raises:
            ValueError: If the name is empty, is not a ``.sql`` file or escapes the directory
        """
        if not isinstance(file_name, str) or not file_name.strip():
            raise ValueError("File name must be a non-empty string")
        if not file_name.lower().endswith('.sql'):
            raise ValueError(f"Only .sql files can be executed: {file_name}")

        path = (self.scripts_dir / file_name).resolve()
        if self.scripts_dir not in path.parents:
            raise ValueError(f"File '{file_name}' is outside the scripts directory")
        return path

    def load(self, file_name: str) -> SqlScript:
        path = self.resolve(file_name)
        if not path.is_file():
            raise FileNotFoundError(f"SQL file not found: {file_name}")
        return SqlScript.parse(file_name, path.read_text(encoding='utf-8'))

    def _run_file(self, file_name: str) -> ScriptExecutionResult:
        try:
            script = self.load(file_name)
        except (ValueError, OSError) as e:
            logger.warning(f"Rejected SQL file '{file_name}': {str(e)}")
            return ScriptExecutionResult(file_name=str(file_name), success=False, error=str(e))

        engine = self._connection.get_engine()
        executed = 0
        with engine.connect() as conn:
            transaction = conn.begin()
            try:
                for statement in script.statements:
                    conn.exec_driver_sql(statement)
                    executed += 1
                transaction.commit()
            except SQLAlchemyError as e:
                transaction.rollback()
                error = str(getattr(e, 'orig', None) or e)
                logger.error(f"SQL file '{file_name}' rolled back after {executed} statement(s): {error}")
                return ScriptExecutionResult(file_name=file_name, success=False, error=error)

        logger.info(f"SQL file '{file_name}' completed: {executed} statements")
        return ScriptExecutionResult(file_name=file_name, success=True, statements_executed=executed)

    def execute(self, file_names: Sequence[str]) -> ScriptBatchReport:
        """
        Execute files in the given order.

        Args:
            file_names (Sequence[str]): Names relative to the scripts directory

        Returns:
            ScriptBatchReport: Per-file results; ``connection_ok`` is False when
            the store could not be reached and nothing was attempted
        """
        report = ScriptBatchReport(total_files=len(file_names))

        if not self._connection.ping():
            report.connection_ok = False
            report.error = "Unable to connect to database"
            logger.error("SQL execution aborted: database unreachable")
            return report

        for file_name in file_names:
            try:
                report.results.append(self._run_file(file_name))
            except DatabaseConnectionError as e:
                report.results.append(ScriptExecutionResult(file_name=file_name, success=False, error=e.message))
            except SQLAlchemyError as e:
                # Connection lost between files
                logger.error(f"SQL file '{file_name}' could not be started: {str(e)}")
                report.results.append(ScriptExecutionResult(file_name=file_name, success=False, error=str(e)))

        logger.info(report.message)
        return report

    def list_available(self) -> List[Dict[str, Any]]:
        """The ``.sql`` files in the scripts directory, sorted by name, with their size in bytes."""
        if not self.scripts_dir.is_dir():
            return []
        return [
            {"fileName": path.name, "size": path.stat().st_size}
            for path in sorted(self.scripts_dir.glob('*.sql'))
            if path.is_file()
        ]
