"""Data models for Treasury Orchestrator."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.numeric import MAX_AMOUNT
from treasury_domain.ledger import WalletKey
from treasury_domain.policy import Policy


class SweepPath(str, Enum):
    """UI affordance that triggered a sweep; audit metadata only."""
    GUIDED = "Guided"
    QUICK = "Quick"


class BlockReason(str, Enum):
    NOT_CONNECTED = "not_connected"
    APPROVAL_PENDING = "approval_pending"
    NOTHING_TO_SWEEP = "nothing_to_sweep"


class SweepRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    sweep_amount: Decimal
    rationale: str


class SweepReadiness(BaseModel):
    model_config = ConfigDict(frozen=True)

    executable: bool
    reason: Optional[BlockReason] = None


class LastSweepSummary(BaseModel):
    """Most recent successful sweep."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    ts: datetime
    path: SweepPath


class ApprovalStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    required: bool
    approved: bool
    satisfied: bool


class ProjectionPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: int
    label: str
    baseline_cumulative: int
    alternative_cumulative: int


class YieldUplift(BaseModel):
    """Incremental yield of the alternative route over the baseline."""
    model_config = ConfigDict(frozen=True)

    principal: Decimal
    rate_delta_pct: Decimal
    annual: Decimal
    monthly: Decimal
    first_month: int


class ScenarioPreset(BaseModel):
    """Starting balances and policy a session can be (re)loaded with."""

    balances: Dict[WalletKey, Decimal]
    operating_target: Decimal = Field(ge=0, le=MAX_AMOUNT, decimal_places=2)
    baseline_rate_pct: Decimal = Field(ge=0, le=100)
    alternative_rate_pct: Decimal = Field(ge=0, le=100)
    horizon_months: int = Field(ge=1, le=24)

    def policy(self) -> Policy:
        return Policy(
            operating_target=self.operating_target,
            baseline_rate_pct=self.baseline_rate_pct,
            alternative_rate_pct=self.alternative_rate_pct,
            horizon_months=self.horizon_months,
        )
