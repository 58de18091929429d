"""Fixed-point rounding and formatting helpers for monetary amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")

ROUNDING_MODES = {
    "HALF_EVEN": ROUND_HALF_EVEN,
    "HALF_UP": ROUND_HALF_UP,
}


def round_currency(value: Decimal, rounding: str = ROUND_HALF_EVEN) -> Decimal:
    """Quantize ``value`` to cents using the :mod:`decimal` ``rounding`` mode."""

    return value.quantize(CENT, rounding=rounding)


def format_amount(value: Decimal) -> str:
    """Return ``value`` with two decimals, or ``inf`` for an open ceiling."""

    if value.is_infinite():
        return "inf" if value > 0 else "-inf"
    return f"{value:.2f}"


__all__ = [
    "CENT",
    "ROUNDING_MODES",
    "format_amount",
    "round_currency",
]
