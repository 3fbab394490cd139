# src/onepiece_api/services/__init__.py
from .resource_config import FieldKind, FieldSpec, ReferenceGuard, Include, ResourceConfig
from .resources import RESOURCES
from .resource_service import ResourceService, parse_id
from .sql_script_runner import SqlScript, SqlScriptRunner, ScriptExecutionResult, ScriptBatchReport
from .database_diagnostics import DatabaseDiagnostics, DiagnosisReport
from .auth_service import AuthService, hash_password, verify_password

__all__ = [
    'FieldKind',
    'FieldSpec',
    'ReferenceGuard',
    'Include',
    'ResourceConfig',
    'RESOURCES',
    'ResourceService',
    'parse_id',
    'SqlScript',
    'SqlScriptRunner',
    'ScriptExecutionResult',
    'ScriptBatchReport',
    'DatabaseDiagnostics',
    'DiagnosisReport',
    'AuthService',
    'hash_password',
    'verify_password'
]
