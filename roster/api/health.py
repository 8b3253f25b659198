"""Health check endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from roster.api.deps import get_coordinator
from roster.services.sync_service import SyncCoordinator

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    sync: str
    polling: bool


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
) -> HealthResponse:
    """Health check endpoint for monitoring."""
    return HealthResponse(
        status="ok" if coordinator.is_polling else "degraded",
        version="0.1.0",
        sync=str(coordinator.status),
        polling=coordinator.is_polling,
    )
