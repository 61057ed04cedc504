"""Liveness and readiness probes."""

from fastapi import APIRouter
from pydantic import BaseModel

from catalog_search.infrastructure.config import settings

router = APIRouter()

SERVICE_NAME = "catalog-search"


class HealthResponse(BaseModel):
    """Liveness probe body."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness probe body; names the stores backend searches go to."""

    status: str
    stores_api_url: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", service=SERVICE_NAME, version=settings.api_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Ready once settings are loaded.

    The stores backend is not called here: facet and search failures are
    already reported per request.
    """
    return ReadinessResponse(status="ready", stores_api_url=settings.stores_api_url)
