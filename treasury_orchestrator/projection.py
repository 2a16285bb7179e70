"""Yield projection for the Yield-account principal.

Simple (non-compounding) cumulative interest for the baseline and the
alternative route, month by month. Display-only: nothing here touches
session state or the audit log.
"""
from __future__ import annotations

from decimal import Decimal
from typing import List

from common.numeric import Number, clamp_number, parse_percent_input, round_whole, to_decimal
from treasury_domain.policy import clamp_horizon

from .models import ProjectionPoint, YieldUplift

__all__ = ["cumulative_yield", "project", "yield_uplift"]

_MONTHS_PER_YEAR = 12


def cumulative_yield(principal: Decimal, rate_pct: Decimal, months: int) -> Decimal:
    """``principal * (rate/12) * months`` with the rate given in percent."""
    return principal * rate_pct * months / (100 * _MONTHS_PER_YEAR)


def project(
    principal: Number,
    baseline_rate_pct: Number,
    alternative_rate_pct: Number,
    horizon_months: Number,
) -> List[ProjectionPoint]:
    """One point per month ``1..horizon``, each rounded to whole currency units."""
    base = clamp_number(to_decimal(principal), Decimal(0))
    baseline = parse_percent_input(baseline_rate_pct)
    alternative = parse_percent_input(alternative_rate_pct)
    months = clamp_horizon(horizon_months)

    return [
        ProjectionPoint(
            month=n,
            label=f"Month {n}",
            baseline_cumulative=round_whole(cumulative_yield(base, baseline, n)),
            alternative_cumulative=round_whole(cumulative_yield(base, alternative, n)),
        )
        for n in range(1, months + 1)
    ]


def yield_uplift(principal: Number, baseline_rate_pct: Number, alternative_rate_pct: Number) -> YieldUplift:
    base = clamp_number(to_decimal(principal), Decimal(0))
    delta = parse_percent_input(alternative_rate_pct) - parse_percent_input(baseline_rate_pct)
    annual = base * delta / 100
    monthly = annual / _MONTHS_PER_YEAR
    return YieldUplift(
        principal=base,
        rate_delta_pct=delta,
        annual=annual,
        monthly=monthly,
        first_month=round_whole(monthly),
    )
