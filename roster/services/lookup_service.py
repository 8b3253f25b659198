"""Badge/ID lookup against the in-memory roster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from roster.schemas.employee import EmployeeRecord


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a lookup; ``record`` is None when nothing matched."""

    query: str
    record: EmployeeRecord | None = None

    @property
    def found(self) -> bool:
        return self.record is not None


def normalize_query(value: str) -> str:
    """Trim and case-fold a scanned or typed token."""
    return value.strip().casefold()


def lookup(roster: Iterable[EmployeeRecord], query: str) -> LookupResult:
    """Find the first record whose card number or employee ID equals ``query``.

    Uniqueness is not enforced, so duplicates resolve to the first match in
    roster order.
    """
    needle = normalize_query(query)
    if not needle:
        return LookupResult(query=needle)
    for record in roster:
        if (
            normalize_query(record.card_number) == needle
            or normalize_query(record.employee_id) == needle
        ):
            return LookupResult(query=needle, record=record)
    return LookupResult(query=needle)
