"""Health check routes."""

import logging

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy.exc import DBAPIError

from app import __version__
from app.core.database import ping
from app.core.dependencies import SessionDep
from app.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness check response."""

    status: str
    database: str


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is running.",
)
async def health_check() -> HealthResponse:
    """Return service health status."""
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness check",
    description="Check that the users store answers queries.",
)
async def readiness_check(session: SessionDep) -> ReadyResponse:
    """Return readiness; 503 when the database is unreachable."""
    try:
        reachable = await ping(session)
    except (DBAPIError, OSError) as e:
        logger.warning("Readiness probe failed", extra={"error": type(e).__name__})
        raise StoreUnavailableError("Database unavailable") from e
    if not reachable:
        raise StoreUnavailableError("Database unavailable")
    return ReadyResponse(status="ready", database="connected")


@router.get(
    "/live",
    summary="Liveness check",
    description="Kubernetes liveness probe endpoint.",
)
async def liveness_check() -> dict:
    """Return liveness status."""
    return {"status": "alive"}
