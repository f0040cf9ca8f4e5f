"""
SnipShelf Backend — Health Check Route
========================================

What:  GET /health for Docker health checks and load balancer probes.
How:   Runs SELECT 1 against the engine. The service has exactly one
       dependency, so it is either healthy or unhealthy.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from snipshelf import __version__
from snipshelf.database import engine
from snipshelf.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns service status and database connectivity. Does not require authentication.",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
