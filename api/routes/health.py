"""
Module 10 - Health Check Route

Simple health check endpoint for liveness probes, plus ledger counters.
"""

from fastapi import APIRouter, Depends

from api.deps import get_ledger
from api.models.responses import HealthResponse, SummaryResponse
from core.events import EVENT_SCHEMA_VERSION
from orchestrator.ledger import Ledger


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns service status for liveness probes.
    """
    return HealthResponse(ok=True, version=EVENT_SCHEMA_VERSION)


@router.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return HealthResponse(ok=True, version=EVENT_SCHEMA_VERSION)


@router.get("/summary", response_model=SummaryResponse)
def summary(ledger: Ledger = Depends(get_ledger)) -> SummaryResponse:
    return SummaryResponse(**ledger.summary().to_dict())
