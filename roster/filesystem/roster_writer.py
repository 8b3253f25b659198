"""CSV export of roster records, readable back by the roster reader."""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from roster.schemas.employee import EmployeeRecord

# Same headers (and spelling) as the roster exports users upload.
EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Empoyee_ID", "employee_id"),
    ("Employee_Name", "employee_name"),
    ("Meal_Type", "meal_type"),
    ("Company_Name", "company_name"),
    ("Camp_Allocation", "camp_allocation"),
    ("Access_Card", "access_card"),
    ("Card_Number", "card_number"),
)


def write_roster_csv(records: Iterable[EmployeeRecord]) -> str:
    """Render records as CSV text with a header row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header for header, _ in EXPORT_COLUMNS)
    for record in records:
        writer.writerow(getattr(record, field_name) for _, field_name in EXPORT_COLUMNS)
    return buf.getvalue()
