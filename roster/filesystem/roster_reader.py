"""Spreadsheet ingestion: turn an uploaded roster file into employee records."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from openpyxl import load_workbook

from roster.exceptions import RosterFormatError
from roster.schemas.employee import EmployeeRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

# Column header -> record field. "Empoyee_ID" is the header used by the
# roster exports in circulation; the correct spelling is accepted too.
COLUMN_HEADERS: dict[str, str] = {
    "Empoyee_ID": "employee_id",
    "Employee_ID": "employee_id",
    "Employee_Name": "employee_name",
    "Meal_Type": "meal_type",
    "Company_Name": "company_name",
    "Camp_Allocation": "camp_allocation",
    "Access_Card": "access_card",
    "Card_Number": "card_number",
}

SUPPORTED_EXTENSIONS = frozenset({".xlsx", ".xlsm", ".csv"})


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # Numeric IDs come back from Excel as floats.
        value = int(value)
    return str(value).strip()


def _map_header(header: Iterable[Any]) -> dict[int, str]:
    columns: dict[int, str] = {}
    for position, name in enumerate(header):
        field_name = COLUMN_HEADERS.get(_cell_text(name))
        if field_name is not None and field_name not in columns.values():
            columns[position] = field_name
    if "employee_id" not in columns.values():
        msg = "Missing employee ID column (expected 'Empoyee_ID' or 'Employee_ID')"
        raise RosterFormatError(msg)
    return columns


def _records(rows: Iterator[Iterable[Any]]) -> list[EmployeeRecord]:
    header = next(rows, None)
    if header is None:
        return []
    columns = _map_header(header)

    records: list[EmployeeRecord] = []
    for row in rows:
        cells = list(row)
        values = {
            field_name: _cell_text(cells[pos]) if pos < len(cells) else ""
            for pos, field_name in columns.items()
        }
        if not any(values.values()):
            continue
        records.append(EmployeeRecord(**values))
    return records


def _read_xlsx(data: bytes) -> list[EmployeeRecord]:
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        msg = f"Could not open workbook: {exc}"
        raise RosterFormatError(msg) from exc
    try:
        ws = wb.worksheets[0]
        return _records(iter(ws.iter_rows(values_only=True)))
    finally:
        wb.close()


def _read_csv(data: bytes) -> list[EmployeeRecord]:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        msg = f"CSV file is not valid UTF-8: {exc}"
        raise RosterFormatError(msg) from exc
    return _records(iter(csv.reader(io.StringIO(text))))


def read_roster_bytes(data: bytes, file_name: str) -> list[EmployeeRecord]:
    """Parse an uploaded roster file; the format is chosen by extension."""
    suffix = Path(file_name).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        msg = f"Unsupported roster file type: {suffix or file_name!r}"
        raise RosterFormatError(msg)
    records = _read_csv(data) if suffix == ".csv" else _read_xlsx(data)
    logger.info("Parsed %d records from %s", len(records), file_name)
    return records


def read_roster(path: Path) -> list[EmployeeRecord]:
    """Parse a roster file from disk."""
    return read_roster_bytes(path.read_bytes(), path.name)
