"""Readers for the employee and tax table input files.

Both files are comma-delimited text read once at startup. Rows that cannot be
turned into valid records are skipped and reported only through the debug
log, so a partially damaged file still yields every usable row.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from payrolltax.config.schema import Employee, TaxBracket

from .tax_engine import BracketTable

_LOGGER = logging.getLogger(__name__)

EMPLOYEE_FIELDS = ("id", "name", "state_code", "hours_worked", "rate")
BRACKET_FIELDS = ("code", "name", "floor", "ceiling", "rate")

RecordT = TypeVar("RecordT")


class RowParseError(ValueError):
    """Raised when an input row cannot be converted into a record."""


def parse_employee_row(row: Sequence[str]) -> Employee:
    """Build an :class:`Employee` from ``id,name,stateCode,hoursWorked,rate``.

    Fields beyond the fifth are ignored.
    """

    if len(row) < len(EMPLOYEE_FIELDS):
        raise RowParseError(
            f"Expected {len(EMPLOYEE_FIELDS)} employee fields, found {len(row)}"
        )

    values = dict(zip(EMPLOYEE_FIELDS, (field.strip() for field in row)))
    try:
        return Employee.model_validate(values)
    except ValidationError as error:
        raise RowParseError(f"Invalid employee row {list(row)!r}: {error}") from error


def parse_bracket_row(row: Sequence[str]) -> TaxBracket:
    """Build a :class:`TaxBracket` from ``code,name,floor,ceiling,rate``.

    A single trailing empty field, left by a trailing delimiter, is dropped
    before the field count is checked.
    """

    fields = [field.strip() for field in row]
    if fields and not fields[-1]:
        fields.pop()

    if len(fields) != len(BRACKET_FIELDS):
        raise RowParseError(
            f"Expected {len(BRACKET_FIELDS)} bracket fields, found {len(fields)}"
        )

    values = dict(zip(BRACKET_FIELDS, fields))
    try:
        return TaxBracket.model_validate(values)
    except ValidationError as error:
        raise RowParseError(f"Invalid bracket row {list(row)!r}: {error}") from error


def _read_rows(
    lines: Iterable[str],
    parser: Callable[[Sequence[str]], RecordT],
    label: str,
) -> list[RecordT]:
    records: list[RecordT] = []
    skipped = 0

    for line_number, row in enumerate(csv.reader(lines), start=1):
        if not row or not any(field.strip() for field in row):
            continue
        try:
            records.append(parser(row))
        except RowParseError as error:
            skipped += 1
            _LOGGER.debug("Skipping %s line %d: %s", label, line_number, error)

    _LOGGER.info("Loaded %d %s rows (%d skipped)", len(records), label, skipped)
    return records


def read_employees(lines: Iterable[str]) -> tuple[Employee, ...]:
    """Parse employee rows from ``lines``, skipping malformed entries."""

    return tuple(_read_rows(lines, parse_employee_row, "employee"))


def read_brackets(lines: Iterable[str]) -> tuple[TaxBracket, ...]:
    """Parse bracket rows from ``lines``, skipping malformed entries."""

    return tuple(_read_rows(lines, parse_bracket_row, "tax bracket"))


def load_employees(path: Path) -> tuple[Employee, ...]:
    """Load the employee file at ``path``."""

    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        return read_employees(handle)


def load_bracket_table(path: Path) -> BracketTable:
    """Load the tax table file at ``path`` and index it by jurisdiction."""

    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        return BracketTable(read_brackets(handle))


__all__ = [
    "BRACKET_FIELDS",
    "EMPLOYEE_FIELDS",
    "RowParseError",
    "load_bracket_table",
    "load_employees",
    "parse_bracket_row",
    "parse_employee_row",
    "read_brackets",
    "read_employees",
]
