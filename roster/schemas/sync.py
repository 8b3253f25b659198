"""Sync-related schemas: remote manifest and API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from roster.schemas.employee import EmployeeRecord

# Chunked + dictionary-encoded + compressed payload.
MANIFEST_VERSION = 5


class SubmissionInfo(BaseModel):
    """Provenance of the last successful push."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    submitter_name: str
    file_name: str = ""
    timestamp: str = ""


class Manifest(BaseModel):
    """Remote descriptor telling readers how many chunks to fetch."""

    model_config = ConfigDict(populate_by_name=True)

    chunk_count: int = Field(default=0, ge=0, alias="chunkCount")
    metadata: SubmissionInfo | None = None
    version: int = Field(default=MANIFEST_VERSION, alias="v")


class PushRequest(BaseModel):
    """Request to publish the in-memory roster."""

    submitter_name: str = Field(min_length=1, max_length=200)

    @field_validator("submitter_name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class SyncStatusResponse(BaseModel):
    """Snapshot of the coordinator state."""

    status: str
    record_count: int
    local_only: bool
    local_file_name: str = ""
    metadata: SubmissionInfo | None = None
    last_synced: str | None = None
    last_error: str | None = None
    progress: str = ""


class PullResponse(BaseModel):
    """Outcome of a manual refresh."""

    updated: bool
    record_count: int
    last_synced: str | None = None


class LookupResponse(BaseModel):
    """A single lookup hit."""

    query: str
    record: EmployeeRecord


class ReportOptions(BaseModel):
    """Cascading filter options."""

    meal_types: list[str]
    companies: list[str]
    camps: list[str]


class ReportResponse(BaseModel):
    """Filtered roster with the options valid for the current selection."""

    meal_type: str
    company: str
    camp: str
    options: ReportOptions
    total: int
    records: list[EmployeeRecord]
