"""Shared API dependencies."""

from __future__ import annotations

from fastapi import Request

from roster.services.sync_service import SyncCoordinator


def get_coordinator(request: Request) -> SyncCoordinator:
    """Get the sync coordinator owned by the application lifespan."""
    coordinator: SyncCoordinator = request.app.state.coordinator
    return coordinator
