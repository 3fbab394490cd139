# src/onepiece_api/web_interface/app.py
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Union
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from onepiece_api import __version__
from onepiece_api.config.app_config import AppConfig
from onepiece_api.config.logging_config import LoggingConfig
from onepiece_api.core.exceptions import OnePieceApiError, DatabaseConnectionError, ErrorCode
from onepiece_api.database.connection import DatabaseConnection
from onepiece_api.services.auth_service import AuthService
from onepiece_api.services.database_diagnostics import DatabaseDiagnostics
from onepiece_api.services.resource_service import ResourceService
from onepiece_api.services.resources import RESOURCES
from onepiece_api.services.sql_script_runner import SqlScriptRunner, SCRIPTS_DIR
from onepiece_api.web_interface.responses import error_response
from onepiece_api.web_interface.routes.auth_routes import router as auth_router
from onepiece_api.web_interface.routes.database_routes import router as database_router
from onepiece_api.web_interface.routes.health_routes import router as health_router
from onepiece_api.web_interface.routes.resource_routes import create_resource_router

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    connection: DatabaseConnection = app.state.connection
    try:
        connection.connect()
    except DatabaseConnectionError as e:
        # Serve anyway; /health reports the outage and requests retry the connection
        logger.error(f"Starting without a database connection: {e.message}")
    yield
    connection.disconnect()


def _register_exception_handlers(app: FastAPI, app_config: AppConfig) -> None:

    def detail_for(exc: Exception) -> Optional[str]:
        return None if app_config.is_production else str(exc)

    @app.exception_handler(OnePieceApiError)
    async def api_error_handler(request: Request, exc: OnePieceApiError):
        if exc.is_client_error:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
            return error_response(exc.status_code, exc.get_user_message(), exc.error_code)

        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return error_response(exc.status_code, INTERNAL_ERROR_MESSAGE, exc.error_code,
                              detail=None if app_config.is_production else exc.get_user_message())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
        return error_response(400, message, ErrorCode.VALIDATION_ERROR.value)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = ErrorCode.NOT_FOUND.value if exc.status_code == 404 else "HTTP_ERROR"
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return error_response(exc.status_code, message, code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
        return error_response(500, INTERNAL_ERROR_MESSAGE, ErrorCode.INTERNAL_ERROR.value,
                              detail=detail_for(exc))


def create_app(connection: Optional[DatabaseConnection] = None,
               app_config: Optional[AppConfig] = None,
               scripts_dir: Union[str, Path] = SCRIPTS_DIR,
               configure_logging: bool = True) -> FastAPI:
    """
    Build the application and its collaborators.

    Args:
        connection (Optional[DatabaseConnection]): Store client; built from ``DB_*`` settings if None
        app_config (Optional[AppConfig]): Application settings; read from ``API_*`` if None
        scripts_dir (Union[str, Path]): Directory the SQL runner reads from
        configure_logging (bool): Apply ``LoggingConfig`` (tests leave logging alone)

    Returns:
        FastAPI: Configured application; the lifespan opens and closes the connection
    """
    if configure_logging:
        LoggingConfig().configure()

    app_config = app_config or AppConfig()
    connection = connection or DatabaseConnection()

    app = FastAPI(
        title="One Piece API",
        description="REST API over the One Piece catalog",
        version=__version__,
        lifespan=lifespan
    )

    app.state.app_config = app_config
    app.state.connection = connection
    app.state.auth_service = AuthService(app_config)
    app.state.script_runner = SqlScriptRunner(connection, scripts_dir)
    app.state.diagnostics = DatabaseDiagnostics(connection)
    app.state.resource_services = {
        key: ResourceService(connection, config) for key, config in RESOURCES.items()
    }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(database_router, prefix="/api/db", tags=["database"])
    for key, config in RESOURCES.items():
        app.include_router(create_resource_router(config), prefix=f"/api/{key}", tags=[key])

    _register_exception_handlers(app, app_config)

    logger.info(f"One Piece API created ({app_config.environment} mode, {len(RESOURCES)} resources)")
    return app
