"""Shared test fixtures for roster sync."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest

from roster.config import Settings
from roster.schemas.employee import EmployeeRecord
from roster.schemas.sync import Manifest, SubmissionInfo
from roster.services.blob_store import BlobStoreClient
from roster.services.chunking import split
from roster.services.codec import encode, serialize_package
from roster.services.compression import compress
from roster.services.local_cache import LocalCache
from roster.services.sync_service import SyncCoordinator

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Sequence
    from pathlib import Path

BASE_URL = "https://bucket.test/b/employee_master"
MANIFEST_KEY = "employee_master_manifest"


def chunk_key(index: int) -> str:
    return f"employee_master_chunk_{index}"


class FakeBucket:
    """In-memory key/value bucket served through ``httpx.MockTransport``.

    Keys named in ``fail_get``/``fail_put`` answer with a server error.
    Every request is recorded as (method, key) in arrival order.
    """

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.fail_get: set[str] = set()
        self.fail_put: set[str] = set()
        self.requests: list[tuple[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = request.url.path.rsplit("/", 1)[-1]
        self.requests.append((request.method, key))
        if request.method == "GET":
            if key in self.fail_get:
                return httpx.Response(500, text="boom")
            if key not in self.values:
                return httpx.Response(404, text="not found")
            return httpx.Response(200, text=self.values[key])
        if request.method == "PUT":
            if key in self.fail_put:
                return httpx.Response(503, text="unavailable")
            self.values[key] = request.content.decode("utf-8")
            return httpx.Response(200, text="OK")
        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def puts(self) -> list[str]:
        return [key for method, key in self.requests if method == "PUT"]

    def manifest(self) -> Manifest | None:
        raw = self.values.get(MANIFEST_KEY)
        return Manifest.model_validate_json(raw) if raw is not None else None

    def publish(
        self,
        roster: Sequence[EmployeeRecord],
        *,
        submitter: str = "Remote Admin",
        chunk_size: int = 64,
    ) -> Manifest:
        """Seed the bucket the way a push from another device would."""
        chunks = split(compress(serialize_package(encode(roster))), chunk_size)
        return self.publish_chunks(chunks, submitter=submitter)

    def publish_chunks(self, chunks: Sequence[str], *, submitter: str = "Remote Admin") -> Manifest:
        for index, chunk in enumerate(chunks):
            self.values[chunk_key(index)] = chunk
        manifest = Manifest(
            chunk_count=len(chunks),
            metadata=SubmissionInfo(
                submitter_name=submitter,
                file_name="remote.xlsx",
                timestamp="2026-01-05 08:00:00",
            ),
        )
        self.values[MANIFEST_KEY] = manifest.model_dump_json(by_alias=True)
        return manifest


def make_record(
    employee_id: str,
    name: str = "",
    *,
    meal: str = "Standard",
    company: str = "Acme",
    camp: str = "North",
    access: str = "Active",
    card: str = "",
) -> EmployeeRecord:
    return EmployeeRecord(
        employee_id=employee_id,
        employee_name=name or f"Employee {employee_id}",
        meal_type=meal,
        company_name=company,
        camp_allocation=camp,
        access_card=access,
        card_number=card or f"CARD-{employee_id}",
    )


def legacy_payload(roster: Sequence[EmployeeRecord]) -> str:
    """Render a roster in the older flat form: a JSON array of camelCase records."""
    return json.dumps([record.model_dump(by_alias=True) for record in roster])


@pytest.fixture
def sample_roster() -> list[EmployeeRecord]:
    """A small roster with repeated categorical values."""
    return [
        make_record("1001", "Alice Ahmed", meal="Standard", company="Acme", camp="North"),
        make_record("1002", "Bilal Khan", meal="Vegetarian", company="Acme", camp="South"),
        make_record("1003", "Chen Wei", meal="Standard", company="Globex", camp="North"),
        make_record("1004", "Dina Saleh", meal="Halal", company="Globex", camp="East"),
        make_record(
            "1005",
            "Erik Olsen",
            meal="Standard",
            company="Initech",
            camp="North",
            access="Suspended",
        ),
    ]


@pytest.fixture
def remote_roster() -> list[EmployeeRecord]:
    """A roster different from ``sample_roster``, as pushed by another device."""
    return [
        make_record("2001", "Farah Noor", meal="Halal", company="Umbrella", camp="West"),
        make_record("2002", "Goran Ilic", meal="Standard", company="Umbrella", camp="West"),
    ]


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "state")


@pytest.fixture
async def store(bucket: FakeBucket) -> AsyncGenerator[BlobStoreClient]:
    async with BlobStoreClient(BASE_URL, timeout=5.0, transport=bucket.transport) as client:
        yield client


@pytest.fixture
async def coordinator(
    store: BlobStoreClient, cache: LocalCache
) -> AsyncGenerator[SyncCoordinator]:
    coord = SyncCoordinator(store, cache, chunk_size=16, sync_interval=0.01)
    yield coord
    await coord.stop()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with temporary paths."""
    return Settings(
        _env_file=None,
        debug=True,
        sync_base_url=BASE_URL,
        chunk_size=16,
        sync_interval_seconds=60,
        request_timeout_seconds=5,
        state_dir=tmp_path / "state",
    )
