"""Roster endpoints: upload, push, manual refresh and local reset."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from roster.api.deps import get_coordinator
from roster.filesystem.roster_reader import read_roster_bytes
from roster.schemas.sync import PullResponse, PushRequest, SubmissionInfo, SyncStatusResponse
from roster.services.sync_service import SyncCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roster", tags=["roster"])

_MAX_UPLOAD_SIZE = 20 * 1024 * 1024  # 20 MB


def _status(coordinator: SyncCoordinator) -> SyncStatusResponse:
    return SyncStatusResponse(
        status=str(coordinator.status),
        record_count=len(coordinator.roster),
        local_only=coordinator.local_only,
        local_file_name=coordinator.local_file_name,
        metadata=coordinator.metadata,
        last_synced=coordinator.last_synced,
        last_error=coordinator.last_error,
        progress=coordinator.progress,
    )


@router.get("/status", response_model=SyncStatusResponse)
async def get_status(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
) -> SyncStatusResponse:
    """Report record count, provenance and sync state."""
    return _status(coordinator)


@router.post("/upload", response_model=SyncStatusResponse)
async def upload_roster(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
    file: Annotated[UploadFile, File()],
) -> SyncStatusResponse:
    """Replace the roster with an uploaded spreadsheet, pending a push."""
    file_name = file.filename or ""
    data = await file.read(_MAX_UPLOAD_SIZE + 1)
    if len(data) > _MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="Roster file too large")
    records = await asyncio.to_thread(read_roster_bytes, data, file_name)
    coordinator.load_local(records, file_name)
    return _status(coordinator)


@router.post("/push", response_model=SubmissionInfo)
async def push_roster(
    body: PushRequest,
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
) -> SubmissionInfo:
    """Publish the in-memory roster to the shared bucket."""
    if not coordinator.roster:
        raise HTTPException(status_code=409, detail="No roster loaded")
    return await coordinator.push(body.submitter_name)


@router.post("/refresh", response_model=PullResponse)
async def refresh_roster(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
) -> PullResponse:
    """Pull the shared roster now."""
    updated = await coordinator.pull()
    return PullResponse(
        updated=updated,
        record_count=len(coordinator.roster),
        last_synced=coordinator.last_synced,
    )


@router.delete("", response_model=SyncStatusResponse)
async def reset_roster(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
) -> SyncStatusResponse:
    """Clear the local roster. The shared bucket is left untouched."""
    coordinator.reset()
    return _status(coordinator)
