"""Command-line entry point for the payroll tax calculator."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from payrolltax.config.schema import ConfigurationError, Settings
from payrolltax.config.settings import load_settings
from payrolltax.config.validator import validate_tax_table_file
from payrolltax.services.loaders import load_bracket_table, load_employees
from payrolltax.services.payroll import build_payroll
from payrolltax.version import get_project_version

from .app import PayrollConsole

_LOGGER = logging.getLogger(__name__)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payrolltax",
        description="Compute gross wages and progressive state income tax per employee.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {get_project_version()}"
    )
    parser.add_argument("--settings", help="Path to a YAML settings file")
    parser.add_argument("--employees", type=Path, help="Employee file to load")
    parser.add_argument("--tax-table", type=Path, help="Tax bracket file to load")
    parser.add_argument(
        "--include-lowest-bracket",
        action="store_true",
        default=None,
        help="Also tax the slice of the lowest selected bracket for multi-bracket incomes",
    )
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        type=str.upper,
        help="Override the configured log level",
    )

    subcommands = parser.add_subparsers(dest="command")
    validate = subcommands.add_parser(
        "validate", help="Check tax table coverage for gaps and overlaps"
    )
    validate.add_argument(
        "codes",
        nargs="*",
        help="Specific jurisdiction codes to validate (defaults to all)",
    )
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates: dict[str, object] = {}
    if args.employees is not None:
        updates["employees_file"] = args.employees
    if args.tax_table is not None:
        updates["tax_table_file"] = args.tax_table
    if args.include_lowest_bracket is not None:
        updates["include_lowest_bracket"] = args.include_lowest_bracket
    if args.log_level is not None:
        updates["log_level"] = args.log_level
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def _fail(message: str) -> int:
    print(f"payrolltax: {message}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, load the input files and run the requested command."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = _apply_overrides(load_settings(args.settings), args)
    except (FileNotFoundError, ConfigurationError) as error:
        return _fail(str(error))

    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "validate":
            return validate_tax_table_file(settings.tax_table_file, args.codes)
        table = load_bracket_table(settings.tax_table_file)
        employees = load_employees(settings.employees_file)
    except OSError as error:
        return _fail(f"cannot read input file: {error}")

    _LOGGER.info(
        "Loaded %d employees and %d brackets across %d jurisdictions",
        len(employees),
        len(table),
        len(table.codes),
    )

    records = build_payroll(
        employees,
        table,
        include_lowest_bracket=settings.include_lowest_bracket,
        rounding=settings.rounding_mode,
    )

    try:
        PayrollConsole(records).run()
    except (EOFError, KeyboardInterrupt):
        print()

    return 0


__all__ = ["main"]
