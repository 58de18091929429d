"""Combine employees with the tax engine into sortable payroll records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum

from payrolltax.config.schema import Employee

from .tax_engine import BracketTable, TaxComputation, TaxDataError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayrollRecord:
    """An employee with gross wages and the outcome of their tax computation."""

    employee: Employee
    gross_wages: Decimal
    computation: TaxComputation | None = None
    error: TaxDataError | None = None

    @property
    def id(self) -> int:
        return self.employee.id

    @property
    def name(self) -> str | None:
        return self.employee.name

    @property
    def jurisdiction_code(self) -> str | None:
        return self.employee.jurisdiction_code

    @property
    def tax_due(self) -> Decimal | None:
        if self.computation is None:
            return None
        return self.computation.amount


def build_record(
    employee: Employee,
    table: BracketTable,
    *,
    include_lowest_bracket: bool = False,
    rounding: str = ROUND_HALF_EVEN,
) -> PayrollRecord:
    """Compute wages and tax for ``employee``, capturing lookup failures."""

    wages = employee.gross_wages(rounding)
    try:
        engine = table.engine(
            employee.jurisdiction_code,
            include_lowest_bracket=include_lowest_bracket,
            rounding=rounding,
        )
        computation = engine.compute(wages)
    except TaxDataError as error:
        _LOGGER.warning("Unable to compute tax for employee %s: %s", employee.id, error)
        return PayrollRecord(employee=employee, gross_wages=wages, error=error)

    return PayrollRecord(employee=employee, gross_wages=wages, computation=computation)


def build_payroll(
    employees: Iterable[Employee],
    table: BracketTable,
    *,
    include_lowest_bracket: bool = False,
    rounding: str = ROUND_HALF_EVEN,
) -> tuple[PayrollRecord, ...]:
    """Return a payroll record for every employee, in input order."""

    return tuple(
        build_record(
            employee,
            table,
            include_lowest_bracket=include_lowest_bracket,
            rounding=rounding,
        )
        for employee in employees
    )


def _absent_first(value: str | None) -> tuple[bool, str]:
    return (value is not None, value or "")


def sort_by_name(records: Sequence[PayrollRecord]) -> tuple[PayrollRecord, ...]:
    """Ascending by name; records without a name come first."""

    return tuple(sorted(records, key=lambda record: _absent_first(record.name)))


def sort_by_id(records: Sequence[PayrollRecord]) -> tuple[PayrollRecord, ...]:
    """Descending by employee id."""

    return tuple(sorted(records, key=lambda record: record.id, reverse=True))


def sort_by_jurisdiction(records: Sequence[PayrollRecord]) -> tuple[PayrollRecord, ...]:
    """Ascending by jurisdiction code; records without one come first."""

    return tuple(
        sorted(records, key=lambda record: _absent_first(record.jurisdiction_code))
    )


def sort_by_wages(records: Sequence[PayrollRecord]) -> tuple[PayrollRecord, ...]:
    """Descending by gross wages."""

    return tuple(sorted(records, key=lambda record: record.gross_wages, reverse=True))


def sort_by_tax_due(records: Sequence[PayrollRecord]) -> tuple[PayrollRecord, ...]:
    """Descending by tax due; records whose tax could not be computed go last."""

    def _key(record: PayrollRecord) -> tuple[bool, Decimal]:
        tax = record.tax_due
        if tax is None:
            return (True, Decimal("0"))
        return (False, -tax)

    return tuple(sorted(records, key=_key))


class SortOrder(Enum):
    """Orderings offered by the interactive menu, keyed by menu choice."""

    NAME = "1"
    ID = "2"
    JURISDICTION = "3"
    WAGES = "4"
    TAX_DUE = "5"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]

    def apply(self, records: Sequence[PayrollRecord]) -> tuple[PayrollRecord, ...]:
        return _SORTERS[self](records)


_SORT_LABELS: dict[SortOrder, str] = {
    SortOrder.NAME: "By Name",
    SortOrder.ID: "By ID",
    SortOrder.JURISDICTION: "By State",
    SortOrder.WAGES: "By Salary",
    SortOrder.TAX_DUE: "By Taxes Due",
}

_SORTERS: dict[SortOrder, Callable[[Sequence[PayrollRecord]], tuple[PayrollRecord, ...]]] = {
    SortOrder.NAME: sort_by_name,
    SortOrder.ID: sort_by_id,
    SortOrder.JURISDICTION: sort_by_jurisdiction,
    SortOrder.WAGES: sort_by_wages,
    SortOrder.TAX_DUE: sort_by_tax_due,
}


def find_records(records: Sequence[PayrollRecord], query: str) -> tuple[PayrollRecord, ...]:
    """Return records whose id equals ``query`` as an integer, or whose name equals it."""

    try:
        requested_id: int | None = int(query)
    except ValueError:
        requested_id = None

    return tuple(
        record
        for record in records
        if (requested_id is not None and record.id == requested_id)
        or (record.name is not None and record.name == query)
    )


__all__ = [
    "PayrollRecord",
    "SortOrder",
    "build_payroll",
    "build_record",
    "find_records",
    "sort_by_id",
    "sort_by_jurisdiction",
    "sort_by_name",
    "sort_by_tax_due",
    "sort_by_wages",
]
