"""Sweep policy: operating buffer target, two yield rates and a horizon.

The store clamps instead of rejecting; each setter returns the new immutable
:class:`Policy` so callers can snapshot it (e.g. into an audit event).
"""
from __future__ import annotations

import math
from decimal import Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from common.numeric import MAX_AMOUNT, Number, parse_currency_input, parse_percent_input, to_decimal

__all__ = [
    "MIN_HORIZON_MONTHS",
    "MAX_HORIZON_MONTHS",
    "Policy",
    "PolicyStore",
    "clamp_horizon",
]

MIN_HORIZON_MONTHS = 1
MAX_HORIZON_MONTHS = 24


class Policy(BaseModel):
    model_config = ConfigDict(frozen=True)

    operating_target: Decimal = Field(Decimal(0), ge=0, le=MAX_AMOUNT, decimal_places=2)
    baseline_rate_pct: Decimal = Field(Decimal(0), ge=0, le=100)
    alternative_rate_pct: Decimal = Field(Decimal(0), ge=0, le=100)
    horizon_months: int = Field(6, ge=MIN_HORIZON_MONTHS, le=MAX_HORIZON_MONTHS)


def clamp_horizon(months: Union[int, float, str, Decimal]) -> int:
    """Clamp to an integer month count in [1, 24]; fractions floor, junk -> 1."""
    if isinstance(months, float) and math.isnan(months):
        return MIN_HORIZON_MONTHS
    if isinstance(months, str) and not months.strip():
        return MIN_HORIZON_MONTHS
    if isinstance(months, float) and math.isinf(months):
        return MAX_HORIZON_MONTHS if months > 0 else MIN_HORIZON_MONTHS
    if isinstance(months, Decimal) and months.is_infinite():
        return MAX_HORIZON_MONTHS if months > 0 else MIN_HORIZON_MONTHS
    value = to_decimal(months)
    whole = int(value)
    return max(MIN_HORIZON_MONTHS, min(MAX_HORIZON_MONTHS, whole))


class PolicyStore:
    """Holds the current :class:`Policy` and applies clamped edits."""

    def __init__(self, policy: Policy | None = None):
        self._policy = policy or Policy()

    @property
    def policy(self) -> Policy:
        return self._policy

    def replace(self, policy: Policy) -> Policy:
        self._policy = policy
        return policy

    def set_target(self, raw_input: Number) -> Policy:
        target = parse_currency_input(raw_input)
        return self.replace(self._policy.model_copy(update={"operating_target": target}))

    def set_baseline_rate(self, pct: Number) -> Policy:
        rate = parse_percent_input(pct)
        return self.replace(self._policy.model_copy(update={"baseline_rate_pct": rate}))

    def set_alternative_rate(self, pct: Number) -> Policy:
        rate = parse_percent_input(pct)
        return self.replace(self._policy.model_copy(update={"alternative_rate_pct": rate}))

    def set_horizon(self, months: Union[int, float, str, Decimal]) -> Policy:
        return self.replace(self._policy.model_copy(update={"horizon_months": clamp_horizon(months)}))
