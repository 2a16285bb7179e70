"""Numeric helpers shared by the ledger, policy store and projections.

All helpers are pure. Amounts travel as :class:`~decimal.Decimal`; user input
is normalised rather than rejected, so every parser returns a finite number.
"""
from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

__all__ = [
    "Number",
    "MAX_AMOUNT",
    "clamp_number",
    "to_decimal",
    "parse_currency_input",
    "parse_percent_input",
    "round_whole",
    "format_usd",
    "format_pct",
]

Number = Union[Decimal, int, float, str]

_NON_CURRENCY = re.compile(r"[^\d.]")
_ZERO = Decimal(0)
_CENT = Decimal("0.01")

# Ceiling for any stored amount. With cents this keeps balances, targets and
# their sums well inside the default 28-digit decimal context, so ledger and
# engine arithmetic is exact.
MAX_AMOUNT = Decimal("1e18")


def _is_nan(value: Union[Decimal, int, float]) -> bool:
    if isinstance(value, Decimal):
        return value.is_nan()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def clamp_number(
    value: Union[Decimal, int, float],
    minimum: Union[Decimal, int, float] = 0,
    maximum: Optional[Union[Decimal, int, float]] = None,
):
    """Clamp *value* into ``[minimum, maximum]``; NaN collapses to *minimum*."""
    if _is_nan(value):
        return minimum
    if value < minimum:
        return minimum
    if maximum is not None and value > maximum:
        return maximum
    return value


def _parse_decimal(text: str) -> Optional[Decimal]:
    text = text.strip()
    if not text:
        # Number("") is 0 in the browser UI this mirrors
        return _ZERO
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def to_decimal(value: Number) -> Decimal:
    """Convert *value* to a finite Decimal, mapping anything unusable to 0."""
    if isinstance(value, bool):
        raise TypeError("to_decimal does not accept bool")
    if isinstance(value, Decimal):
        return value if value.is_finite() else _ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return _ZERO
        return Decimal(repr(value))
    if isinstance(value, str):
        parsed = _parse_decimal(value)
        return _ZERO if parsed is None else parsed
    raise TypeError("to_decimal expects Decimal, int, float or str, got " + type(value).__name__)


def parse_currency_input(raw: Number) -> Decimal:
    """Parse a typed currency amount such as ``"$80,000.50"``.

    Text input keeps only digits and the decimal point (so ``"-500"`` reads as
    ``500``); anything that still fails to parse becomes 0. Numeric input is
    passed through :func:`to_decimal`. The result is clamped to
    ``[0, MAX_AMOUNT]`` and rounded half-up to cents.
    """
    if isinstance(raw, str):
        parsed = _parse_decimal(_NON_CURRENCY.sub("", raw))
        amount = _ZERO if parsed is None else parsed
    else:
        amount = to_decimal(raw)
    return clamp_number(amount, _ZERO, MAX_AMOUNT).quantize(_CENT, rounding=ROUND_HALF_UP)


def parse_percent_input(raw: Number, minimum: int = 0, maximum: int = 100) -> Decimal:
    """Parse a percentage (``"5"``, ``"5.0%"``, ``5.0``) clamped to the range."""
    if isinstance(raw, str):
        parsed = _parse_decimal(raw.replace("%", ""))
        if parsed is None:
            return Decimal(minimum)
        value = parsed
    else:
        if isinstance(raw, float) and math.isnan(raw):
            return Decimal(minimum)
        value = to_decimal(raw)
    return clamp_number(value, Decimal(minimum), Decimal(maximum))


def round_whole(value: Decimal) -> int:
    """Round half-up to a whole currency unit."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_usd(value: Union[Decimal, int, float]) -> str:
    """``80000.4`` -> ``"80,000"`` (no fraction digits, thousands separators)."""
    return f"{round_whole(to_decimal(value)):,}"


def format_pct(value: Union[Decimal, int, float]) -> str:
    """``5`` -> ``"5.00%"``."""
    return f"{to_decimal(value):.2f}%"
