# src/onepiece_api/web_interface/routes/health_routes.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from onepiece_api import __version__
from onepiece_api.database.connection import DatabaseConnection
from onepiece_api.services.resources import RESOURCES
from onepiece_api.web_interface.dependencies import get_db_connection

router = APIRouter()


@router.get("/")
def root():
    return {
        "success": True,
        "message": "Welcome to the One Piece API",
        "version": __version__,
        "endpoints": [f"/api/{key}" for key in RESOURCES] + ["/api/auth", "/api/db", "/health"]
    }


@router.get("/health")
def health_check(connection: DatabaseConnection = Depends(get_db_connection)):
    database_ok = connection.ping()
    return {
        "status": "OK" if database_ok else "DEGRADED",
        "message": "One Piece API is running",
        "database": "connected" if database_ok else "unreachable",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
