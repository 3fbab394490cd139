# src/onepiece_api/web_interface/routes/auth_routes.py
from typing import Dict, Any

from fastapi import APIRouter, Depends, Request

from onepiece_api.services.auth_service import AuthService
from onepiece_api.web_interface.dependencies import get_auth_service, require_auth
from onepiece_api.web_interface.models import LoginRequest
from onepiece_api.web_interface.responses import success_response

router = APIRouter()


@router.post("/login")
def login(
        credentials: LoginRequest,
        request: Request,
        auth_service: AuthService = Depends(get_auth_service)
):
    """
    Exchange admin credentials for a bearer token.
    """
    client = request.client.host if request.client else "unknown"
    data = auth_service.authenticate(credentials.username, credentials.password, client)
    return success_response(data=data, message="Login successful")


@router.get("/verify")
def verify(user: Dict[str, Any] = Depends(require_auth)):
    return success_response(data={"user": user}, message="Token is valid")
