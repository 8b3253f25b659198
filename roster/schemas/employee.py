"""Employee roster schemas and their dictionary-encoded wire form."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# (employeeId, employeeName, mealIdx, companyIdx, campIdx, accessIdx, cardNumber)
EncodedRow = tuple[str, str, int, int, int, int, str]


class EmployeeRecord(BaseModel):
    """One roster entry.

    Spreadsheet cells and legacy payloads may carry numeric IDs, so numbers
    are coerced to strings on validation.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    employee_id: str = ""
    employee_name: str = ""
    meal_type: str = ""
    company_name: str = ""
    camp_allocation: str = ""
    access_card: str = ""
    card_number: str = ""


class EncodedPackage(BaseModel):
    """Columnar, dictionary-encoded roster.

    Serialized with the short keys ``r``/``m``/``c``/``l``/``a`` that remote
    readers expect.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    rows: list[EncodedRow] = Field(default_factory=list, alias="r")
    meal_types: list[str] = Field(default_factory=list, alias="m")
    companies: list[str] = Field(default_factory=list, alias="c")
    camps: list[str] = Field(default_factory=list, alias="l")
    access_statuses: list[str] = Field(default_factory=list, alias="a")
