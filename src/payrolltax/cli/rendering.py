"""Plain-text rendering of payroll tables and tax derivations."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from payrolltax.rounding import format_amount
from payrolltax.services.payroll import PayrollRecord, SortOrder
from payrolltax.services.tax_engine import BracketStep, TaxComputation

RULE = "=" * 50
DIVIDER = "-" * 50
TABLE_DIVIDER = "-" * 74


def _money(value: Decimal) -> str:
    return f"${format_amount(value)}"


def _percent(rate: Decimal) -> str:
    return f"{rate * 100:.2f}"


def render_menu() -> str:
    """Return the sort menu shown before each prompt."""

    lines = ["Enter a number to sort the employee data. Enter anything else to exit.", ""]
    lines.extend(f"\t\t{order.value}. {order.label}" for order in SortOrder)
    return "\n".join(lines)


def render_table(records: Sequence[PayrollRecord]) -> str:
    """Return the fixed-width employee table."""

    lines = [
        f"{'ID':<5}{'Employee':<12}{'State':<10}{'Hours Worked':<15}"
        f"{'Rate':<8}{'Total Wages':<15}{'Taxes Due':<15}",
        TABLE_DIVIDER,
    ]
    for record in records:
        employee = record.employee
        tax = _money(record.tax_due) if record.tax_due is not None else "n/a"
        lines.append(
            f"{employee.id:<5}{employee.name or '':<12}{employee.jurisdiction_code or '':<12}"
            f"{str(employee.hours_worked):<13}{_money(employee.rate):<7}"
            f"{_money(record.gross_wages):>11}{tax:>13}"
        )
    return "\n".join(lines)


def _render_bracket(step: BracketStep, *, with_slice: bool) -> list[str]:
    lines = [
        f"{f'Bracket {step.position}':^50}".rstrip(),
        DIVIDER,
        f"{'Tax Rate(%)':<10}{_percent(step.rate):>19}",
        f"{'Floor(USD)':<10}{format_amount(step.floor):>20}",
        f"{'Ceil(USD)':<10}{format_amount(step.ceiling):>20}",
    ]
    if with_slice:
        lines.extend(
            [
                "",
                f"{'Taxable Income':<10}{format_amount(step.taxable_income):>16}",
                f"{'Tax':<10}{format_amount(step.tax):>20}",
            ]
        )
    lines.append(DIVIDER)
    return lines


def render_computation(computation: TaxComputation, employee_name: str | None) -> str:
    """Return the verbose derivation of ``computation`` for display."""

    trace = computation.trace
    who = employee_name or "This employee"
    where = trace.jurisdiction.name if trace.jurisdiction else "this state"
    income = _money(trace.income)

    lines = [RULE, "", f"Computing state tax for {income} earned in {where}....", ""]

    if not trace.steps:
        lines.append(f"{who} has no taxable income in {where}.")
    elif trace.multi_bracket:
        lines.append(
            f"{where} has {trace.selected_count} tax brackets for {who}'s income. "
            f"To calculate {who}'s taxes you must cumulatively sum the products of each "
            "tax rate with the portion of their income within its range."
        )
        if len(trace.steps) < trace.selected_count:
            lines.append(
                "Bracket 1 contributes no tax: only the income above its ceiling is taxed."
            )
        lines.append("")
        for step in trace.steps:
            lines.extend(_render_bracket(step, with_slice=True))
            lines.append("")
    else:
        step = trace.steps[0]
        lines.extend(
            [
                f"This state has only 1 tax bracket for {who}'s income. "
                f"{who} claims {income} in {where}.",
                f"With a tax rate of {_percent(step.rate)}% for income between "
                f"{_money(step.floor)} and {_money(step.ceiling)}, {who}'s taxes are "
                "calculated by multiplying their income by the tax rate.",
                "",
                f"taxes = (income)*(tax rate) = ({trace.income})*({step.rate}) "
                f"= {_money(computation.amount)}",
                "",
            ]
        )
        lines.extend(_render_bracket(step, with_slice=False))

    lines.extend(
        [
            "",
            f"{who} would owe {_money(computation.amount)} in {where} state taxes on {income}",
            "",
            RULE,
        ]
    )
    return "\n".join(lines)


def render_breakdown(record: PayrollRecord) -> str:
    """Return the derivation for ``record`` or a diagnostic when it has none."""

    if record.computation is not None:
        return render_computation(record.computation, record.name)

    who = record.name or f"Employee {record.id}"
    return "\n".join(
        [
            RULE,
            "",
            f"Unable to compute state tax for {who}: {record.error}",
            "",
            RULE,
        ]
    )


__all__ = [
    "render_breakdown",
    "render_computation",
    "render_menu",
    "render_table",
]
