"""Progressive state income tax computation.

Brackets are selected with strict comparisons: a bracket applies when the
income exceeds its ceiling or lies strictly between its floor and ceiling, so
an income exactly on a boundary is excluded from that bracket. One selected
bracket is a flat multiplication; several are walked from the highest floor
down, peeling the slice above each floor off the remaining income.

Every computation returns a :class:`TaxComputation` carrying the rounded amount
and a :class:`TaxTrace` describing the arithmetic, leaving presentation to the
caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from payrolltax.config.schema import Jurisdiction, TaxBracket
from payrolltax.rounding import round_currency

_LOGGER = logging.getLogger(__name__)

ZERO = Decimal("0")


class TaxDataError(LookupError):
    """Raised when the loaded tax table cannot answer a tax query."""


class UnknownJurisdictionError(TaxDataError):
    """Raised when no bracket matches the requested jurisdiction."""

    def __init__(self, code: str | None = None, name: str | None = None) -> None:
        label = code or name or "<blank>"
        super().__init__(f"No tax brackets configured for jurisdiction '{label}'")
        self.code = code
        self.name = name


class NoApplicableBracketError(TaxDataError):
    """Raised when a positive income falls in no bracket of its jurisdiction."""

    def __init__(self, income: Decimal, jurisdiction: Jurisdiction | None = None) -> None:
        where = f" in {jurisdiction.name}" if jurisdiction else ""
        super().__init__(f"No tax bracket applies to income {income}{where}")
        self.income = income
        self.jurisdiction = jurisdiction


@dataclass(frozen=True)
class BracketStep:
    """Marginal tax computed for one bracket of the selected set."""

    position: int
    rate: Decimal
    floor: Decimal
    ceiling: Decimal
    taxable_income: Decimal
    tax: Decimal


@dataclass(frozen=True)
class TaxTrace:
    """Step-by-step derivation of a tax amount."""

    jurisdiction: Jurisdiction | None
    income: Decimal
    selected_count: int
    steps: tuple[BracketStep, ...]
    total_tax: Decimal

    @property
    def multi_bracket(self) -> bool:
        return self.selected_count > 1


@dataclass(frozen=True)
class TaxComputation:
    """Rounded tax owed together with its derivation."""

    amount: Decimal
    trace: TaxTrace


def _bracket_applies(income: Decimal, bracket: TaxBracket) -> bool:
    return income > bracket.ceiling or bracket.floor < income < bracket.ceiling


def select_brackets(
    income: Decimal, brackets: Sequence[TaxBracket]
) -> tuple[TaxBracket, ...]:
    """Return the brackets contributing to ``income``, in input order."""

    return tuple(bracket for bracket in brackets if _bracket_applies(income, bracket))


def compute_single_bracket_tax(income: Decimal, bracket: TaxBracket) -> BracketStep:
    """Apply the flat rate of ``bracket`` to the whole ``income``."""

    return BracketStep(
        position=1,
        rate=bracket.rate,
        floor=bracket.floor,
        ceiling=bracket.ceiling,
        taxable_income=income,
        tax=income * bracket.rate,
    )


def compute_multi_bracket_tax(
    income: Decimal,
    brackets: Sequence[TaxBracket],
    *,
    include_lowest_bracket: bool = False,
) -> tuple[BracketStep, ...]:
    """Walk ``brackets`` from the highest floor down, taxing each marginal slice.

    Parameters
    ----------
    income:
        Income being taxed.
    brackets:
        Selected brackets ordered ascending by floor.
    include_lowest_bracket:
        When ``False`` the walk stops before the first (lowest) bracket, so
        that bracket contributes no tax. ``True`` taxes its slice as well.

    Returns
    -------
    tuple[BracketStep, ...]
        Steps in processing order, highest bracket first.
    """

    stop = -1 if include_lowest_bracket else 0
    remaining = income
    steps: list[BracketStep] = []

    for index in range(len(brackets) - 1, stop, -1):
        bracket = brackets[index]
        taxable = remaining - bracket.floor
        steps.append(
            BracketStep(
                position=index + 1,
                rate=bracket.rate,
                floor=bracket.floor,
                ceiling=bracket.ceiling,
                taxable_income=taxable,
                tax=taxable * bracket.rate,
            )
        )
        remaining = bracket.floor

    return tuple(steps)


def compute_tax(
    income: Decimal,
    brackets: Sequence[TaxBracket],
    *,
    jurisdiction: Jurisdiction | None = None,
    include_lowest_bracket: bool = False,
    rounding: str = ROUND_HALF_EVEN,
) -> TaxComputation:
    """Compute the tax owed on ``income`` under one jurisdiction's ``brackets``.

    Intermediate products stay unrounded; only the final total is quantized.
    Incomes of zero or less owe nothing. A positive income that selects no
    bracket raises :class:`NoApplicableBracketError`.
    """

    if income <= 0:
        trace = TaxTrace(
            jurisdiction=jurisdiction,
            income=income,
            selected_count=0,
            steps=(),
            total_tax=ZERO,
        )
        return TaxComputation(amount=round_currency(ZERO, rounding), trace=trace)

    selected = select_brackets(income, brackets)
    _LOGGER.debug(
        "Selected %d of %d brackets for income %s", len(selected), len(brackets), income
    )

    if not selected:
        raise NoApplicableBracketError(income, jurisdiction)

    if len(selected) > 1:
        steps = compute_multi_bracket_tax(
            income, selected, include_lowest_bracket=include_lowest_bracket
        )
    else:
        steps = (compute_single_bracket_tax(income, selected[0]),)

    total = sum((step.tax for step in steps), ZERO)
    trace = TaxTrace(
        jurisdiction=jurisdiction,
        income=income,
        selected_count=len(selected),
        steps=steps,
        total_tax=total,
    )
    return TaxComputation(amount=round_currency(total, rounding), trace=trace)


class TaxEngine:
    """Tax calculator bound to the brackets of a single jurisdiction."""

    def __init__(
        self,
        jurisdiction: Jurisdiction,
        brackets: Sequence[TaxBracket],
        *,
        include_lowest_bracket: bool = False,
        rounding: str = ROUND_HALF_EVEN,
    ) -> None:
        self.jurisdiction = jurisdiction
        self.brackets = tuple(brackets)
        self.include_lowest_bracket = include_lowest_bracket
        self.rounding = rounding

    def compute(self, income: Decimal) -> TaxComputation:
        return compute_tax(
            income,
            self.brackets,
            jurisdiction=self.jurisdiction,
            include_lowest_bracket=self.include_lowest_bracket,
            rounding=self.rounding,
        )

    def __repr__(self) -> str:
        return f"TaxEngine({self.jurisdiction.code!r}, brackets={len(self.brackets)})"


class BracketTable:
    """Brackets indexed by jurisdiction code, built once at load time."""

    def __init__(self, brackets: Iterable[TaxBracket]) -> None:
        self._brackets = tuple(brackets)
        index: dict[str, list[TaxBracket]] = {}
        for bracket in self._brackets:
            index.setdefault(bracket.jurisdiction_code, []).append(bracket)
        self._by_code = {code: tuple(entries) for code, entries in index.items()}
        self._engines: dict[tuple[str, bool, str], TaxEngine] = {}

    def __iter__(self) -> Iterator[TaxBracket]:
        return iter(self._brackets)

    def __len__(self) -> int:
        return len(self._brackets)

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(self._by_code)

    def brackets_for(self, code: str) -> tuple[TaxBracket, ...]:
        """Return the brackets of ``code`` in load order (empty when unknown)."""

        return self._by_code.get(code, ())

    def lookup(
        self, code: str | None = None, name: str | None = None
    ) -> tuple[TaxBracket, ...]:
        """Return brackets whose code equals ``code`` or whose name equals ``name``."""

        if code is not None and name is None:
            return self.brackets_for(code)
        return tuple(
            bracket
            for bracket in self._brackets
            if (code is not None and bracket.jurisdiction_code == code)
            or (name is not None and bracket.jurisdiction_name == name)
        )

    def jurisdiction(self, code: str | None = None, name: str | None = None) -> Jurisdiction:
        """Derive the jurisdiction from the first bracket matching the lookup."""

        matches = self.lookup(code, name)
        if not matches:
            raise UnknownJurisdictionError(code, name)
        first = matches[0]
        return Jurisdiction(code=first.jurisdiction_code, name=first.jurisdiction_name)

    def engine(
        self,
        code: str | None,
        *,
        include_lowest_bracket: bool = False,
        rounding: str = ROUND_HALF_EVEN,
    ) -> TaxEngine:
        """Return the cached engine for jurisdiction ``code``."""

        if code is None:
            raise UnknownJurisdictionError(code)

        key = (code, include_lowest_bracket, rounding)
        engine = self._engines.get(key)
        if engine is None:
            engine = TaxEngine(
                self.jurisdiction(code),
                self.brackets_for(code),
                include_lowest_bracket=include_lowest_bracket,
                rounding=rounding,
            )
            self._engines[key] = engine
        return engine


__all__ = [
    "BracketStep",
    "BracketTable",
    "NoApplicableBracketError",
    "TaxComputation",
    "TaxDataError",
    "TaxEngine",
    "TaxTrace",
    "UnknownJurisdictionError",
    "compute_multi_bracket_tax",
    "compute_single_bracket_tax",
    "compute_tax",
    "select_brackets",
]
