"""Health and readiness endpoints.

  /health (liveness)
    Is the process alive?  Always 200; ``status`` says whether a dependency
    is impaired.  Returning 503 here would make the orchestrator restart a
    container that is only waiting on its database.

  /ready (readiness)
    Can this instance take traffic?  The in-memory store is always ready;
    with DATABASE_URL set, the database must answer.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from sqlalchemy.exc import SQLAlchemyError

from app.db import engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _database_status() -> str:
    if engine.engine is None:
        return "not_configured"
    try:
        await engine.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {"database": await _database_status()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _database_status() == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)
