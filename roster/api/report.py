"""Report endpoint with cascading meal/company/camp filters."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from roster.api.deps import get_coordinator
from roster.filesystem.roster_writer import write_roster_csv
from roster.schemas.sync import ReportOptions, ReportResponse
from roster.services.report_service import (
    ALL,
    FilterSelection,
    apply_filters,
    resolve_selection,
)
from roster.services.sync_service import SyncCoordinator

router = APIRouter(prefix="/api", tags=["report"])


@router.get("/report", response_model=ReportResponse)
async def get_report(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
    meal_type: Annotated[str, Query()] = ALL,
    company: Annotated[str, Query()] = ALL,
    camp: Annotated[str, Query()] = ALL,
) -> ReportResponse:
    """Filter the roster; selections no longer available fall back to "All"."""
    roster = coordinator.roster
    selection, options = resolve_selection(
        roster, FilterSelection(meal_type=meal_type, company=company, camp=camp)
    )
    records = apply_filters(roster, selection)
    return ReportResponse(
        meal_type=selection.meal_type,
        company=selection.company,
        camp=selection.camp,
        options=ReportOptions(
            meal_types=options.meal_types,
            companies=options.companies,
            camps=options.camps,
        ),
        total=len(records),
        records=records,
    )


@router.get("/report/export")
async def export_report(
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
    meal_type: Annotated[str, Query()] = ALL,
    company: Annotated[str, Query()] = ALL,
    camp: Annotated[str, Query()] = ALL,
) -> Response:
    """Download the filtered roster as CSV."""
    roster = coordinator.roster
    selection, _ = resolve_selection(
        roster, FilterSelection(meal_type=meal_type, company=company, camp=camp)
    )
    content = write_roster_csv(apply_filters(roster, selection))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="roster-report.csv"'},
    )
