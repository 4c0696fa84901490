"""
Snippetbox: Health Check Route
===============================

What:  Health check endpoint for monitoring and load balancer health checks.
How:   Runs SELECT 1 against the database and reports the result with the
       application version and uptime.
Who:   Called by Docker health checks, load balancers and monitoring.

Status levels:
    healthy:    database reachable (HTTP 200)
    unhealthy:  database unreachable (HTTP 503)

This route sits outside the dynamic chain: a health check never creates a session.
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from snippetbox import __version__
from snippetbox.database import engine
from snippetbox.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Process start, for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
