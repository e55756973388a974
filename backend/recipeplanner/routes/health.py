"""
RecipePlanner Backend - Health Check Route
===========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and the recipe API client (API key
       present, circuit breaker state) and returns an aggregate status.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   All dependencies operational (HTTP 200)
    - degraded:  Recipe API unavailable; auth and saved data still work (HTTP 200)
    - unhealthy: Database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from recipeplanner import __version__
from recipeplanner.database import engine
from recipeplanner.middleware.auth_guard import get_recipe_source
from recipeplanner.schemas.common import HealthResponse
from recipeplanner.services.recipe_source import RecipeSource

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    source: RecipeSource = Depends(get_recipe_source),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Recipe API ──────────────────────────────────────────────────
    # No network call: the breaker state already reflects recent traffic
    recipe_api_status = await source.health_check()
    if recipe_api_status != "available" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        recipe_api=recipe_api_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
