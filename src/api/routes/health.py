"""Health check endpoints."""

import asyncio
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from infrastructure.database.session import get_async_session

logger = structlog.get_logger()

router = APIRouter(tags=["health"])

SERVICE_NAME = "user-service"
READINESS_TIMEOUT_SECONDS = 5.0


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str = SERVICE_NAME
    version: str = "1.0.0"
    timestamp: str
    environment: str
    database: str | None = None
    error: str | None = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    summary="Liveness check",
)
async def health_check() -> HealthResponse:
    """
    Liveness probe for load balancers.

    Reports that the process is serving requests; dependencies are not checked.
    """
    return HealthResponse(status="UP", timestamp=_now(), environment=settings.app_env)


@router.get(
    "/readiness",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    summary="Readiness check",
    responses={503: {"description": "Database unreachable"}},
)
async def readiness_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse | JSONResponse:
    """
    Readiness probe including database connectivity.

    Returns 503 while the database cannot be reached.
    """
    try:
        async with asyncio.timeout(READINESS_TIMEOUT_SECONDS):
            await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("readiness_database_unreachable", error=str(e))
        body = HealthResponse(
            status="DOWN",
            timestamp=_now(),
            environment=settings.app_env,
            database="DOWN",
            error="Database ping failed",
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(exclude_none=True),
        )

    return HealthResponse(
        status="UP",
        timestamp=_now(),
        environment=settings.app_env,
        database="UP",
    )
