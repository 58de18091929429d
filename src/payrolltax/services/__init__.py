"""Service-layer helpers for the payroll tax calculator."""

from .loaders import load_bracket_table, load_employees
from .payroll import PayrollRecord, SortOrder, build_payroll, find_records
from .tax_engine import (
    BracketTable,
    NoApplicableBracketError,
    TaxComputation,
    TaxDataError,
    TaxEngine,
    UnknownJurisdictionError,
    compute_tax,
    select_brackets,
)

__all__ = [
    "BracketTable",
    "NoApplicableBracketError",
    "PayrollRecord",
    "SortOrder",
    "TaxComputation",
    "TaxDataError",
    "TaxEngine",
    "UnknownJurisdictionError",
    "build_payroll",
    "compute_tax",
    "find_records",
    "load_bracket_table",
    "load_employees",
    "select_brackets",
]
