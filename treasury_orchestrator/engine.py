"""Sweep recommendation and readiness rules.

Pure functions of the current ledger balances, policy and gate flags; the
session recomputes them on every read instead of caching results.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from treasury_domain.ledger import WalletKey
from treasury_domain.policy import Policy

from .models import BlockReason, SweepReadiness, SweepRecommendation

__all__ = [
    "RATIONALE_SWEEP",
    "RATIONALE_HOLD",
    "excess_operating",
    "recommend",
    "evaluate_readiness",
]

RATIONALE_SWEEP = (
    "Operating balance exceeds the policy target; sweep the excess into the "
    "Yield account to put idle cash to work."
)
RATIONALE_HOLD = (
    "Operating balance is at or below the policy target; no sweep is "
    "recommended."
)


def excess_operating(balances: Mapping[WalletKey, Decimal], policy: Policy) -> Decimal:
    """``max(0, Operating - target)``."""
    return max(Decimal(0), balances[WalletKey.OPERATING] - policy.operating_target)


def recommend(balances: Mapping[WalletKey, Decimal], policy: Policy) -> SweepRecommendation:
    # no hysteresis or minimum: $1 of excess recommends a $1 sweep
    amount = excess_operating(balances, policy)
    return SweepRecommendation(
        sweep_amount=amount,
        rationale=RATIONALE_SWEEP if amount > 0 else RATIONALE_HOLD,
    )


def evaluate_readiness(
    *,
    connected: bool,
    approval_satisfied: bool,
    sweep_amount: Decimal,
) -> SweepReadiness:
    """Return whether a sweep may run, else the highest-priority block reason.

    Priority: not connected > approval pending > nothing to sweep.
    """
    if not connected:
        return SweepReadiness(executable=False, reason=BlockReason.NOT_CONNECTED)
    if not approval_satisfied:
        return SweepReadiness(executable=False, reason=BlockReason.APPROVAL_PENDING)
    if sweep_amount <= 0:
        return SweepReadiness(executable=False, reason=BlockReason.NOTHING_TO_SWEEP)
    return SweepReadiness(executable=True)
