"""
TerpTaster Backend - Root & Health Check Routes
===============================================

What:  API banner (GET /) and health check (GET /health).
How:   The health check runs `SELECT 1` against the pool and looks for the
       terpene dataset on app.state.

Status levels:
    healthy    database connected, dataset loaded
    degraded   database connected, dataset missing
    unhealthy  database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text

from terptaster import __version__
from terptaster.database import engine
from terptaster.schemas.common import HealthResponse, RootResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=RootResponse, summary="API banner")
async def root() -> RootResponse:
    return RootResponse(
        message="TerpTaster API is running!",
        version=__version__,
        features=["Reviews", "Photo Upload", "Search", "Terpene Analysis", "Terp Training"],
        endpoints=[
            "/api/reviews",
            "/api/upload",
            "/api/search",
            "/api/score/terpenes",
            "/api/training/question",
            "/health",
        ],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Database connectivity and terpene dataset state. 503 when the database is unreachable.",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    dataset = getattr(request.app.state, "terpene_dataset", None)
    if dataset is None and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        dataset="loaded" if dataset is not None else "missing",
        terpene_count=len(dataset) if dataset is not None else 0,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
