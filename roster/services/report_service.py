"""Cascading report filters over meal type, company and camp.

Each filter's valid options are derived from the records that match the
other two selections. Everything here is a pure function of
(roster, selection); nothing derived is stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from roster.schemas.employee import EmployeeRecord

ALL = "All"


@dataclass(frozen=True)
class FilterSelection:
    """Current filter values; ``ALL`` disables a filter."""

    meal_type: str = ALL
    company: str = ALL
    camp: str = ALL


@dataclass(frozen=True)
class FilterOptions:
    """Options offered for each filter, ``ALL`` first."""

    meal_types: list[str] = field(default_factory=lambda: [ALL])
    companies: list[str] = field(default_factory=lambda: [ALL])
    camps: list[str] = field(default_factory=lambda: [ALL])


def _matches(value: str, selected: str) -> bool:
    return selected == ALL or value == selected


def _options(values: Iterable[str]) -> list[str]:
    return [ALL, *sorted({v for v in values if v})]


def filter_options(roster: Sequence[EmployeeRecord], selection: FilterSelection) -> FilterOptions:
    """Compute the option sets valid for ``selection``."""
    return FilterOptions(
        meal_types=_options(
            r.meal_type
            for r in roster
            if _matches(r.company_name, selection.company)
            and _matches(r.camp_allocation, selection.camp)
        ),
        companies=_options(
            r.company_name
            for r in roster
            if _matches(r.meal_type, selection.meal_type)
            and _matches(r.camp_allocation, selection.camp)
        ),
        camps=_options(
            r.camp_allocation
            for r in roster
            if _matches(r.company_name, selection.company)
            and _matches(r.meal_type, selection.meal_type)
        ),
    )


def reconcile_selection(options: FilterOptions, selection: FilterSelection) -> FilterSelection:
    """Reset any selection no longer offered by ``options`` back to ``ALL``."""
    updated = selection
    if selection.meal_type not in options.meal_types:
        updated = replace(updated, meal_type=ALL)
    if selection.company not in options.companies:
        updated = replace(updated, company=ALL)
    if selection.camp not in options.camps:
        updated = replace(updated, camp=ALL)
    return updated


def apply_filters(
    roster: Iterable[EmployeeRecord], selection: FilterSelection
) -> list[EmployeeRecord]:
    """Return the records matching every active filter, in roster order."""
    return [
        r
        for r in roster
        if _matches(r.meal_type, selection.meal_type)
        and _matches(r.company_name, selection.company)
        and _matches(r.camp_allocation, selection.camp)
    ]


def resolve_selection(
    roster: Sequence[EmployeeRecord], selection: FilterSelection
) -> tuple[FilterSelection, FilterOptions]:
    """Reconcile ``selection`` until every active filter is offered.

    Resetting one filter can widen or narrow the others, so this repeats
    until stable. Each round resets at least one filter, so it ends within
    three rounds.
    """
    while True:
        options = filter_options(roster, selection)
        reconciled = reconcile_selection(options, selection)
        if reconciled == selection:
            return selection, options
        selection = reconciled
