"""Badge/ID lookup endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from roster.api.deps import get_coordinator
from roster.schemas.sync import LookupResponse
from roster.services.sync_service import SyncCoordinator

router = APIRouter(prefix="/api", tags=["lookup"])


@router.get("/lookup", response_model=LookupResponse)
async def lookup_employee(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
    q: Annotated[str, Query(max_length=200)],
) -> LookupResponse:
    """Find a record by card number or employee ID."""
    result = coordinator.lookup(q)
    if result.record is None:
        raise HTTPException(status_code=404, detail=f'Not found: "{result.query}"')
    return LookupResponse(query=result.query, record=result.record)
