"""Unit tests for bracket selection and progressive tax computation."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import pytest
from conftest import INF, make_bracket

from payrolltax.config.schema import Jurisdiction
from payrolltax.services.tax_engine import (
    BracketTable,
    NoApplicableBracketError,
    TaxDataError,
    UnknownJurisdictionError,
    compute_multi_bracket_tax,
    compute_tax,
    select_brackets,
)


def test_single_open_bracket_taxes_whole_income() -> None:
    brackets = (make_bracket("0", INF, "0.10"),)

    result = compute_tax(Decimal("1000"), brackets)

    assert result.amount == Decimal("100.00")
    assert not result.trace.multi_bracket
    (step,) = result.trace.steps
    assert step.position == 1
    assert step.taxable_income == Decimal("1000")
    assert step.tax == Decimal("100.00")


def test_income_above_lower_ceiling_selects_both_brackets(two_brackets) -> None:
    selected = select_brackets(Decimal("15000"), two_brackets)

    assert selected == two_brackets


def test_two_bracket_income_skips_lowest_bracket_by_default(two_brackets) -> None:
    """15,000 selects both brackets but only the slice above 10,000 is taxed."""

    result = compute_tax(Decimal("15000"), two_brackets)

    assert result.amount == Decimal("500.00")
    assert result.trace.selected_count == 2
    assert [step.position for step in result.trace.steps] == [2]
    assert result.trace.steps[0].taxable_income == Decimal("5000")


def test_two_bracket_income_with_lowest_bracket_included(two_brackets) -> None:
    result = compute_tax(Decimal("15000"), two_brackets, include_lowest_bracket=True)

    assert result.amount == Decimal("1000.00")
    assert [step.position for step in result.trace.steps] == [2, 1]
    assert [step.taxable_income for step in result.trace.steps] == [
        Decimal("5000"),
        Decimal("10000"),
    ]
    assert [step.tax for step in result.trace.steps] == [Decimal("500"), Decimal("500")]


def test_three_brackets_walk_down_from_highest_floor() -> None:
    brackets = (
        make_bracket("0", "10000", "0.05"),
        make_bracket("10000", "20000", "0.10"),
        make_bracket("20000", INF, "0.20"),
    )

    default = compute_tax(Decimal("25000"), brackets)
    corrected = compute_tax(Decimal("25000"), brackets, include_lowest_bracket=True)

    assert default.amount == Decimal("2000.00")
    assert corrected.amount == Decimal("2500.00")
    assert [step.tax for step in default.trace.steps] == [Decimal("1000"), Decimal("1000")]


def test_income_inside_lowest_bracket_uses_single_path(two_brackets) -> None:
    result = compute_tax(Decimal("5000"), two_brackets)

    assert select_brackets(Decimal("5000"), two_brackets) == two_brackets[:1]
    assert result.amount == Decimal("250.00")
    assert len(result.trace.steps) == 1


@pytest.mark.parametrize("income", ["0", "10000"])
def test_boundary_incomes_are_excluded_from_brackets(two_brackets, income: str) -> None:
    assert select_brackets(Decimal(income), two_brackets) == ()


def test_income_on_bracket_boundary_raises_no_applicable_bracket(two_brackets) -> None:
    jurisdiction = Jurisdiction(code="XX", name="Testland")

    with pytest.raises(NoApplicableBracketError) as excinfo:
        compute_tax(Decimal("10000"), two_brackets, jurisdiction=jurisdiction)

    assert excinfo.value.income == Decimal("10000")
    assert "Testland" in str(excinfo.value)
    assert isinstance(excinfo.value, TaxDataError)


def test_income_without_brackets_raises() -> None:
    with pytest.raises(NoApplicableBracketError):
        compute_tax(Decimal("10"), ())


@pytest.mark.parametrize("income", ["0", "-25.50"])
def test_non_positive_income_owes_nothing(two_brackets, income: str) -> None:
    result = compute_tax(Decimal(income), two_brackets)

    assert result.amount == Decimal("0.00")
    assert result.trace.steps == ()
    assert result.trace.selected_count == 0


def test_computation_is_repeatable(two_brackets) -> None:
    first = compute_tax(Decimal("15000"), two_brackets)
    second = compute_tax(Decimal("15000"), two_brackets)

    assert first == second


def test_rounding_applies_once_to_the_total() -> None:
    """Each half-cent slice would round to zero; their sum rounds to one cent."""

    brackets = (make_bracket("0", "1", "0.005"), make_bracket("1", INF, "0.005"))

    result = compute_tax(Decimal("2"), brackets, include_lowest_bracket=True)

    assert [step.tax for step in result.trace.steps] == [Decimal("0.005"), Decimal("0.005")]
    assert result.trace.total_tax == Decimal("0.010")
    assert result.amount == Decimal("0.01")


def test_rounding_mode_is_configurable() -> None:
    brackets = (make_bracket("0", INF, "0.5"),)

    assert compute_tax(Decimal("0.05"), brackets).amount == Decimal("0.02")
    assert compute_tax(
        Decimal("0.05"), brackets, rounding=ROUND_HALF_UP
    ).amount == Decimal("0.03")


def test_multi_bracket_steps_keep_slices_unrounded() -> None:
    brackets = (make_bracket("0", "100.333", "0.07"), make_bracket("100.333", INF, "0.13"))

    steps = compute_multi_bracket_tax(
        Decimal("250.555"), brackets, include_lowest_bracket=True
    )

    assert steps[0].taxable_income == Decimal("150.222")
    assert steps[0].tax == Decimal("150.222") * Decimal("0.13")
    assert steps[1].taxable_income == Decimal("100.333")


class TestBracketTable:
    def test_indexes_brackets_by_code_in_load_order(self, bracket_table: BracketTable) -> None:
        assert bracket_table.codes == ("XX", "FL")
        assert [bracket.floor for bracket in bracket_table.brackets_for("XX")] == [
            Decimal("0"),
            Decimal("10000"),
        ]
        assert bracket_table.brackets_for("ZZ") == ()
        assert len(bracket_table) == 3

    def test_lookup_matches_code_or_name(self, bracket_table: BracketTable) -> None:
        by_name = bracket_table.lookup(name="Flatland")
        either = bracket_table.lookup(code="XX", name="Flatland")

        assert [bracket.jurisdiction_code for bracket in by_name] == ["FL"]
        assert len(either) == 3

    def test_jurisdiction_is_derived_from_first_match(self, bracket_table: BracketTable) -> None:
        assert bracket_table.jurisdiction("XX") == Jurisdiction(code="XX", name="Testland")
        assert bracket_table.jurisdiction(name="Flatland").code == "FL"

    @pytest.mark.parametrize("code", ["ZZ", None])
    def test_unknown_jurisdiction_raises(self, bracket_table: BracketTable, code) -> None:
        with pytest.raises(UnknownJurisdictionError):
            bracket_table.engine(code)

    def test_engine_is_built_once_per_jurisdiction(self, bracket_table: BracketTable) -> None:
        engine = bracket_table.engine("XX")

        assert bracket_table.engine("XX") is engine
        assert bracket_table.engine("XX", include_lowest_bracket=True) is not engine

    def test_engine_trace_names_the_jurisdiction(self, bracket_table: BracketTable) -> None:
        result = bracket_table.engine("FL").compute(Decimal("1000"))

        assert result.amount == Decimal("30.00")
        assert result.trace.jurisdiction == Jurisdiction(code="FL", name="Flatland")
