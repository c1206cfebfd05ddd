"""Health check endpoints."""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.api.dependencies import DbSession, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service identity, database reachability and the active overtime threshold."""

    status: str
    service: str
    version: str
    database: str
    regular_hours_threshold: Decimal
    timestamp: datetime


async def _database_reachable(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession, settings: SettingsDep) -> HealthResponse:
    """Report whether the API can serve requests against its database."""
    reachable = await _database_reachable(db)
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        service=settings.app_name,
        version=settings.engine_version,
        database="healthy" if reachable else "unhealthy",
        regular_hours_threshold=settings.regular_hours_threshold,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(db: DbSession) -> dict[str, str]:
    """Ready once the database answers."""
    return {"status": "ready" if await _database_reachable(db) else "not_ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
