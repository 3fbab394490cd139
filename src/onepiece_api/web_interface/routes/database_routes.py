# src/onepiece_api/web_interface/routes/database_routes.py
import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends, status

from onepiece_api.core.exceptions import ValidationError, ErrorCode
from onepiece_api.services.database_diagnostics import DatabaseDiagnostics
from onepiece_api.services.sql_script_runner import SqlScriptRunner
from onepiece_api.web_interface.dependencies import get_diagnostics, get_script_runner, require_auth
from onepiece_api.web_interface.models import ExecuteSqlRequest
from onepiece_api.web_interface.responses import envelope_response, error_response, success_response

logger = logging.getLogger(__name__)

# Every administrative endpoint needs a token
router = APIRouter(dependencies=[Depends(require_auth)])


@router.post("/execute-sql")
def execute_sql(
        body: ExecuteSqlRequest,
        user: Dict[str, Any] = Depends(require_auth),
        runner: SqlScriptRunner = Depends(get_script_runner)
):
    """
    Execute bundled SQL files, one transaction per file.
    """
    if not body.fileNames:
        raise ValidationError("File names array is required", "MISSING_FILE_NAMES", "fileNames")

    logger.info(f"User '{user['username']}' executing SQL files: {', '.join(body.fileNames)}")
    report = runner.execute(body.fileNames)

    if not report.connection_ok:
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            report.message,
            ErrorCode.DATABASE_CONNECTION_ERROR.value,
            data=report.to_dict()
        )

    return envelope_response(report.success, data=report.to_dict(), message=report.message)


@router.get("/available-sql-files")
def available_sql_files(runner: SqlScriptRunner = Depends(get_script_runner)):
    files = runner.list_available()
    return success_response(
        data={"files": files, "total": len(files)},
        message="Available SQL files retrieved successfully"
    )


@router.get("/diagnose")
def diagnose(diagnostics: DatabaseDiagnostics = Depends(get_diagnostics)):
    """
    Structured health report: table presence, row counts, issues and recommendations.
    """
    report = diagnostics.diagnose()
    return success_response(data=report.to_dict(), message="Database diagnosis completed")


@router.get("/status")
def database_status(diagnostics: DatabaseDiagnostics = Depends(get_diagnostics)):
    return success_response(data=diagnostics.status(), message="Database status retrieved successfully")


@router.post("/sync")
def sync_database(
        user: Dict[str, Any] = Depends(require_auth),
        diagnostics: DatabaseDiagnostics = Depends(get_diagnostics)
):
    """
    Create missing tables from the models. Never drops anything.
    """
    result = diagnostics.sync_schema()
    logger.info(f"Schema sync requested by '{user['username']}'")
    return success_response(data=result, message="Database synchronized successfully with models")
