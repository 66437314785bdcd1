"""
ResourcePulse Backend - Health Check Route
==========================================

What:  GET /health for load balancers and container health checks.
How:   Runs `SELECT 1`; answers 200 when the database responds and 503
       otherwise. Excluded from rate limiting and access logging.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from resource_pulse import __version__
from resource_pulse.database import check_database
from resource_pulse.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    """
    What:  Reports service and database status.
    Who:   Load balancers and uptime checks; answers 503 when the database is down.
    """
    db_status = "connected"
    overall = "healthy"
    try:
        await check_database()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e)

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
