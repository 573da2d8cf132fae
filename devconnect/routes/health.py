"""
DevConnect Backend - Health Check Route
=========================================

What:  GET /health for container probes and load balancers.
How:   Runs `SELECT 1` on the application's engine. The endpoint always
       answers 200 so a probe can read the body; `status` is "unhealthy"
       and `database` is "disconnected" when the query fails.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from devconnect import __version__
from devconnect.database import Database
from devconnect.schemas.common import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


class HealthResponse(CamelModel):
    status: str
    version: str
    database: str
    uptime_seconds: float
    timestamp: datetime


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request) -> HealthResponse:
    database: Database = request.app.state.database
    db_status = "connected"
    overall = "healthy"

    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
        timestamp=datetime.now(timezone.utc),
    )
