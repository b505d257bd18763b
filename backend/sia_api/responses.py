"""
SIA API: Error Response Builder
===============================

What:  Builds the single JSON error body used by every failing request:
       `{"error", "message", "details", "request_id"}`.
Who:   The exception handlers in main.py, and the middleware that answers
       on its own (access guard, rate limiter) before a route runs.
"""

from typing import Any, Dict, Mapping, Optional

from starlette.responses import JSONResponse

from sia_api.middleware.request_id import request_id_var


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details,
            "request_id": request_id_var.get(""),
        },
        headers=dict(headers) if headers else None,
    )
