"""
Inkwell Backend — Health Check Route
=====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks configuration and database connectivity, returns aggregate status.
Who:   Called by Docker health checks, load balancers and uptime monitors.

Status levels:
    - healthy:   every check passed (HTTP 200)
    - degraded:  at least one check failed (HTTP 503, stop routing traffic)

GET and HEAD are both answered; the endpoint is never cached, never rate
limited and never access-logged.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from inkwell import __version__
from inkwell.config import settings
from inkwell.database import engine
from inkwell.schemas.common import HealthChecks, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


async def check_database() -> bool:
    """Executes SELECT 1 to verify connection and query execution."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return False


@router.api_route(
    "/api/health",
    methods=["GET", "HEAD"],
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check() -> JSONResponse:
    """
    Check the health of the service and its dependencies.

    Check details:
        Environment: critical settings (JWT_SECRET) are configured
        Database:    SELECT 1 succeeds
    """
    started = time.perf_counter()
    errors = settings.missing_required_settings()
    environment_ok = not errors

    database_ok = await check_database()
    if not database_ok:
        errors.append("Database connection failed")

    healthy = environment_ok and database_ok
    body = HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=round(time.time() - _start_time, 2),
        version=__version__,
        checks=HealthChecks(api=True, database=database_ok, environment=environment_ok),
        errors=errors,
        response_time_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return JSONResponse(
        status_code=200 if healthy else 503,
        content=body.model_dump(mode="json"),
        headers={"Cache-Control": "no-store"},
    )
