"""Health check API endpoints.

- Liveness: /health - is the process alive?
- Readiness: /health/ready - can the service reach its database?
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from outbox_service.infra.database import get_async_session

router = APIRouter(prefix="/health", tags=["health"])

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    database: bool


@router.get("", response_model=HealthResponse, summary="Liveness probe")
async def health() -> HealthResponse:
    """Report that the process is up."""
    return HealthResponse(status="ok")


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness probe")
async def readiness(response: Response) -> ReadinessResponse:
    """Report whether the database answers a trivial query.

    Returns 503 when it does not.
    """
    try:
        async with get_async_session() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed", extra={"error": str(e)})
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="unavailable", database=False)
    return ReadinessResponse(status="ok", database=True)


__all__ = ["router"]
