"""
RondaGuard Backend - Health Check Route
=======================================

What:  GET /health for Docker health checks and load balancers.
How:   Runs SELECT 1 through the Database façade.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from rondaguard import __version__
from rondaguard.exceptions import RondaGuardError
from rondaguard.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    database = getattr(request.app.state, "database", None)
    try:
        if database is None:
            raise RondaGuardError("Database not initialized")
        await database.ping()
    except RondaGuardError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s | %s", e.message, e.context)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
