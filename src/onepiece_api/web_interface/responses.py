# src/onepiece_api/web_interface/responses.py
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope_response(success: bool, status_code: int = 200, data: Any = None,
                      message: Optional[str] = None, error: Optional[str] = None,
                      pagination: Optional[Dict[str, Any]] = None,
                      detail: Any = None) -> JSONResponse:
    """
    Wrap a payload in the ``{success, data?, message?, error?, pagination?}`` envelope.

    Top-level keys that are unset are left out; ``None`` values inside ``data`` are kept.
    """
    body = {"success": success}
    for key, value in (("data", data), ("message", message), ("error", error),
                       ("pagination", pagination), ("detail", detail)):
        if value is not None:
            body[key] = value
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def success_response(data: Any = None, message: Optional[str] = None, status_code: int = 200,
                     pagination: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return envelope_response(True, status_code, data=data, message=message, pagination=pagination)


def error_response(status_code: int, message: str, error: str, detail: Any = None,
                   data: Any = None) -> JSONResponse:
    return envelope_response(False, status_code, data=data, message=message, error=error, detail=detail)
