# src/onepiece_api/web_interface/dependencies.py
from typing import Dict, Any, Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from onepiece_api.config.app_config import AppConfig
from onepiece_api.core.exceptions import AuthenticationError, ErrorCode
from onepiece_api.database.connection import DatabaseConnection
from onepiece_api.services.auth_service import AuthService
from onepiece_api.services.database_diagnostics import DatabaseDiagnostics
from onepiece_api.services.sql_script_runner import SqlScriptRunner

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.app_config


def get_db_connection(request: Request) -> DatabaseConnection:
    """The connection created by the application factory and opened by the lifespan."""
    return request.app.state.connection


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_script_runner(request: Request) -> SqlScriptRunner:
    return request.app.state.script_runner


def get_diagnostics(request: Request) -> DatabaseDiagnostics:
    return request.app.state.diagnostics


def require_auth(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Resolve the authenticated identity from the bearer token.

    Raises:
        AuthenticationError: 401 with TOKEN_MISSING, INVALID_TOKEN or TOKEN_EXPIRED
    """
    if credentials is None:
        if request.headers.get("Authorization"):
            raise AuthenticationError("Invalid token format. Use 'Bearer <token>'", ErrorCode.INVALID_TOKEN)
        raise AuthenticationError("Access token is required", ErrorCode.TOKEN_MISSING)

    user = auth_service.verify_token(credentials.credentials)
    request.state.user = user
    return user
