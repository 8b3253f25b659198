"""Tests for the file-backed roster cache."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from roster.schemas.sync import SubmissionInfo
from roster.services.local_cache import (
    LAST_SYNC_KEY,
    METADATA_KEY,
    STORAGE_KEY,
    LocalCache,
)

if TYPE_CHECKING:
    from roster.schemas.employee import EmployeeRecord


class TestKeyValue:
    def test_missing_key_is_none(self, cache: LocalCache) -> None:
        assert cache.get("nothing") is None

    def test_set_creates_directory(self, cache: LocalCache) -> None:
        cache.set("k", {"a": 1})
        assert (cache.state_dir / "k.json").is_file()
        assert cache.get("k") == {"a": 1}

    def test_corrupt_entry_is_none(self, cache: LocalCache) -> None:
        cache.state_dir.mkdir(parents=True)
        (cache.state_dir / "k.json").write_text("{not json", encoding="utf-8")
        assert cache.get("k") is None

    def test_remove_missing_is_noop(self, cache: LocalCache) -> None:
        cache.remove("never-written")


class TestRoster:
    def test_round_trip(self, cache: LocalCache, sample_roster: list[EmployeeRecord]) -> None:
        cache.save_roster(sample_roster)
        assert cache.load_roster() == sample_roster

    def test_stored_with_camel_case_fields(
        self, cache: LocalCache, sample_roster: list[EmployeeRecord]
    ) -> None:
        cache.save_roster(sample_roster[:1])
        raw = json.loads((cache.state_dir / f"{STORAGE_KEY}.json").read_text(encoding="utf-8"))
        assert raw[0]["employeeId"] == "1001"
        assert raw[0]["cardNumber"] == "CARD-1001"

    def test_empty_when_absent(self, cache: LocalCache) -> None:
        assert cache.load_roster() == []

    def test_wrong_shape_is_empty(self, cache: LocalCache) -> None:
        cache.set(STORAGE_KEY, {"r": []})
        assert cache.load_roster() == []

    def test_invalid_record_is_empty(self, cache: LocalCache) -> None:
        cache.set(STORAGE_KEY, [{"employeeId": ["not", "a", "string"]}])
        assert cache.load_roster() == []


class TestMetadataAndLastSync:
    def test_metadata_round_trip(self, cache: LocalCache) -> None:
        info = SubmissionInfo(submitter_name="Ops", file_name="a.xlsx", timestamp="t")
        cache.save_metadata(info)
        assert cache.load_metadata() == info

    def test_saving_none_removes_metadata(self, cache: LocalCache) -> None:
        cache.save_metadata(SubmissionInfo(submitter_name="Ops"))
        cache.save_metadata(None)
        assert not (cache.state_dir / f"{METADATA_KEY}.json").exists()
        assert cache.load_metadata() is None

    def test_invalid_metadata_is_none(self, cache: LocalCache) -> None:
        cache.set(METADATA_KEY, {"fileName": "a.xlsx"})
        assert cache.load_metadata() is None

    def test_last_synced(self, cache: LocalCache) -> None:
        assert cache.load_last_synced() is None
        cache.save_last_synced("08:15:00")
        assert cache.load_last_synced() == "08:15:00"

    def test_non_string_last_synced_is_none(self, cache: LocalCache) -> None:
        cache.set(LAST_SYNC_KEY, 12)
        assert cache.load_last_synced() is None

    def test_clear_roster_keeps_last_synced(
        self, cache: LocalCache, sample_roster: list[EmployeeRecord]
    ) -> None:
        cache.save_roster(sample_roster)
        cache.save_metadata(SubmissionInfo(submitter_name="Ops"))
        cache.save_last_synced("08:15:00")
        cache.clear_roster()
        assert cache.load_roster() == []
        assert cache.load_metadata() is None
        assert cache.load_last_synced() == "08:15:00"
