"""Utilities for validating tax table coverage and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from collections.abc import Callable, Sequence
from pathlib import Path

from payrolltax.services.loaders import load_bracket_table
from payrolltax.services.tax_engine import BracketTable

from .schema import ConfigurationError, TaxBracket
from .settings import load_settings


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_names(scope: str, brackets: Sequence[TaxBracket]) -> list[str]:
    names = sorted({bracket.jurisdiction_name for bracket in brackets})
    if len(names) > 1:
        return [_format_scope(scope, f"inconsistent jurisdiction names {names}")]
    return []


def _validate_ordering(scope: str, brackets: Sequence[TaxBracket]) -> list[str]:
    errors: list[str] = []
    floors = [bracket.floor for bracket in brackets]

    if floors != sorted(floors):
        errors.append(_format_scope(scope, "brackets should be sorted by floor"))

    duplicates = [value for value, count in Counter(floors).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope(
                scope,
                f"duplicate bracket floors detected: {[str(value) for value in sorted(duplicates)]}",
            )
        )

    return errors


def _validate_coverage(scope: str, brackets: Sequence[TaxBracket]) -> list[str]:
    errors: list[str] = []
    ordered = sorted(brackets, key=lambda bracket: bracket.floor)

    lowest = ordered[0]
    if lowest.floor != 0:
        errors.append(
            _format_scope(scope, f"lowest bracket starts at {lowest.floor}, not 0")
        )

    for lower, upper in zip(ordered, ordered[1:]):
        if upper.floor > lower.ceiling:
            errors.append(
                _format_scope(
                    scope,
                    f"gap between {lower.ceiling} and {upper.floor}",
                )
            )
        elif upper.floor < lower.ceiling:
            errors.append(
                _format_scope(
                    scope,
                    f"bracket starting at {upper.floor} overlaps bracket ending at {lower.ceiling}",
                )
            )

    if not ordered[-1].open_ended:
        errors.append(
            _format_scope(
                scope,
                f"top bracket ends at {ordered[-1].ceiling}; incomes above it are not covered",
            )
        )

    return errors


def validate_jurisdiction(code: str, brackets: Sequence[TaxBracket]) -> list[str]:
    """Return validation issues for the brackets of one jurisdiction."""

    if not brackets:
        return [_format_scope(code, "no brackets configured")]

    errors: list[str] = []
    errors.extend(_validate_names(code, brackets))
    errors.extend(_validate_ordering(code, brackets))
    errors.extend(_validate_coverage(code, brackets))
    return errors


def validate_bracket_table(
    table: BracketTable, codes: Sequence[str] | None = None
) -> dict[str, list[str]]:
    """Validate every (or the selected) jurisdiction and return issues keyed by code."""

    targets = codes or table.codes
    return {code: validate_jurisdiction(code, table.brackets_for(code)) for code in targets}


def report_validation(
    table: BracketTable,
    codes: Sequence[str] | None = None,
    emit: Callable[[str], None] = print,
) -> int:
    """Print the validation outcome per jurisdiction and return an exit code."""

    exit_code = 0

    for code, issues in validate_bracket_table(table, codes).items():
        if issues:
            exit_code = 1
            emit(f"[{code}] {len(issues)} issue(s) detected:")
            for issue in issues:
                emit(f"  - {issue}")
        else:
            emit(f"[{code}] OK")

    return exit_code


def validate_tax_table_file(
    path: Path,
    codes: Sequence[str] | None = None,
    emit: Callable[[str], None] = print,
) -> int:
    """Load the tax table at ``path`` and report its coverage.

    A file without a single usable bracket is a failure. Read errors propagate
    as :class:`OSError`.
    """

    table = load_bracket_table(path)
    if not len(table):
        emit(f"no valid brackets found in {path}")
        return 1
    return report_validation(table, codes, emit)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate tax table coverage and report gaps or overlaps."
    )
    parser.add_argument(
        "codes",
        nargs="*",
        help="Specific jurisdiction codes to validate (defaults to all)",
    )
    parser.add_argument("--settings", help="Path to a YAML settings file")
    parser.add_argument("--tax-table", type=Path, help="Tax table file to validate")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except (FileNotFoundError, ConfigurationError) as error:
        print(f"failed to load settings: {error}")
        return 1

    tax_table_file = args.tax_table or settings.tax_table_file
    try:
        return validate_tax_table_file(tax_table_file, args.codes)
    except OSError as error:
        print(f"failed to load tax table: {error}")
        return 1


__all__ = [
    "main",
    "report_validation",
    "validate_bracket_table",
    "validate_jurisdiction",
    "validate_tax_table_file",
]


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
