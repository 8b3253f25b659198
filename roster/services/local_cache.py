"""File-backed cache of the last known roster.

Each key is stored as one JSON file in the state directory. The cache is a
convenience for fast restarts, not a source of truth: unreadable entries
degrade to "absent" and are logged.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from roster.schemas.employee import EmployeeRecord
from roster.schemas.sync import SubmissionInfo

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_KEY = "smart_qr_employees_v7"
LAST_SYNC_KEY = "smart_qr_last_sync_v7"
METADATA_KEY = "smart_qr_metadata_v7"


class LocalCache:
    """Key/value JSON store rooted at ``state_dir``."""

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    def _path(self, key: str) -> Path:
        return self.state_dir / f"{key}.json"

    def get(self, key: str) -> Any | None:
        """Return the decoded value for ``key``, or None if absent or corrupt."""
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def set(self, key: str, value: Any) -> None:
        """Write ``value`` as JSON under ``key``."""
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(json.dumps(value), encoding="utf-8")

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
        self._path(key).unlink(missing_ok=True)

    # Typed accessors

    def load_roster(self) -> list[EmployeeRecord]:
        data = self.get(STORAGE_KEY)
        if not isinstance(data, list):
            return []
        try:
            return [EmployeeRecord.model_validate(item) for item in data]
        except ValidationError as exc:
            logger.warning("Ignoring corrupt roster snapshot: %s", exc)
            return []

    def save_roster(self, roster: Iterable[EmployeeRecord]) -> None:
        self.set(STORAGE_KEY, [record.model_dump(by_alias=True) for record in roster])

    def load_metadata(self) -> SubmissionInfo | None:
        data = self.get(METADATA_KEY)
        if data is None:
            return None
        try:
            return SubmissionInfo.model_validate(data)
        except ValidationError as exc:
            logger.warning("Ignoring corrupt submission metadata: %s", exc)
            return None

    def save_metadata(self, metadata: SubmissionInfo | None) -> None:
        if metadata is None:
            self.remove(METADATA_KEY)
        else:
            self.set(METADATA_KEY, metadata.model_dump(by_alias=True))

    def load_last_synced(self) -> str | None:
        value = self.get(LAST_SYNC_KEY)
        return value if isinstance(value, str) else None

    def save_last_synced(self, value: str) -> None:
        self.set(LAST_SYNC_KEY, value)

    def clear_roster(self) -> None:
        """Forget the cached roster and its provenance."""
        self.remove(STORAGE_KEY)
        self.remove(METADATA_KEY)
