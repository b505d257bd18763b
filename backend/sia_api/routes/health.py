"""
SIA API: Health Check Route
===========================

What:  GET /health for container probes and load balancers.
How:   Runs `SELECT 1` through the app's Database. Unreachable database →
       "unhealthy" with HTTP 503 so traffic is routed away.
       Not under /api/, so never behind the access guard.
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from sia_api import __version__
from sia_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    state = request.app.state
    connected = await state.database.ping()
    if not connected:
        logger.warning("Health check: database unreachable")
        response.status_code = 503

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.monotonic() - state.started_at, 2),
    )
