"""Treasury sweep simulator: session engine, audit log and HTTP surface."""
from .models import BlockReason, LastSweepSummary, SweepPath, SweepReadiness, SweepRecommendation
from .session import TreasurySession, TreasurySnapshot

__all__ = [
    "BlockReason",
    "LastSweepSummary",
    "SweepPath",
    "SweepReadiness",
    "SweepRecommendation",
    "TreasurySession",
    "TreasurySnapshot",
]
