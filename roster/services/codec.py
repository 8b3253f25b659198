"""Dictionary encoding of rosters for compact remote storage.

Categorical columns (meal type, company, camp, access status) repeat heavily
across rows, so each distinct value is stored once in a per-column dictionary
and rows refer to it by index.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from roster.schemas.employee import EmployeeRecord, EncodedPackage

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class _Dictionary:
    """Append-only value table assigning indices in first-seen order."""

    def __init__(self) -> None:
        self.values: list[str] = []
        self._index: dict[str, int] = {}

    def index_of(self, value: str) -> int:
        idx = self._index.get(value)
        if idx is None:
            idx = len(self.values)
            self.values.append(value)
            self._index[value] = idx
        return idx


def encode(roster: Iterable[EmployeeRecord]) -> EncodedPackage:
    """Encode a roster into its columnar, dictionary-encoded form."""
    meals = _Dictionary()
    companies = _Dictionary()
    camps = _Dictionary()
    access = _Dictionary()

    rows = [
        (
            record.employee_id,
            record.employee_name,
            meals.index_of(record.meal_type),
            companies.index_of(record.company_name),
            camps.index_of(record.camp_allocation),
            access.index_of(record.access_card),
            record.card_number,
        )
        for record in roster
    ]

    return EncodedPackage(
        rows=rows,
        meal_types=meals.values,
        companies=companies.values,
        camps=camps.values,
        access_statuses=access.values,
    )


def _lookup(dictionary: Sequence[str], idx: int, column: str, row: int) -> str:
    if not 0 <= idx < len(dictionary):
        msg = f"Row {row}: {column} index {idx} out of range (dictionary size {len(dictionary)})"
        raise IndexError(msg)
    return dictionary[idx]


def decode(package: EncodedPackage) -> list[EmployeeRecord]:
    """Expand an encoded package back into records, preserving row order.

    Raises:
        IndexError: If any row refers outside its dictionary.
    """
    records: list[EmployeeRecord] = []
    for row_no, (emp_id, name, meal, company, camp, access, card) in enumerate(package.rows):
        records.append(
            EmployeeRecord(
                employee_id=emp_id,
                employee_name=name,
                meal_type=_lookup(package.meal_types, meal, "meal", row_no),
                company_name=_lookup(package.companies, company, "company", row_no),
                camp_allocation=_lookup(package.camps, camp, "camp", row_no),
                access_card=_lookup(package.access_statuses, access, "access", row_no),
                card_number=card,
            )
        )
    return records


def serialize_package(package: EncodedPackage) -> str:
    """Render a package as compact JSON with the short wire keys."""
    return package.model_dump_json(by_alias=True)


def decode_payload(text: str) -> list[EmployeeRecord]:
    """Decode a decompressed remote payload of either known shape.

    The shape is detected structurally: an object with a row table is the
    dictionary-encoded form; a bare array is the older flat-record form,
    written before the manifest carried a version tag.

    Raises:
        ValueError: On invalid JSON or an unrecognised shape (pydantic's
            ``ValidationError`` is a ``ValueError``).
        IndexError: On out-of-range dictionary indices.
    """
    data: Any = json.loads(text)
    if isinstance(data, dict) and "r" in data:
        return decode(EncodedPackage.model_validate(data))
    if isinstance(data, list):
        return [EmployeeRecord.model_validate(item) for item in data]
    msg = f"Unrecognised roster payload of type {type(data).__name__}"
    raise ValueError(msg)

