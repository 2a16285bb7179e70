"""Prometheus metrics for the treasury simulator."""

from .metrics import (audit_events_total, ledger_balance_usd,
                      sweep_latency_seconds, sweeps_total)

__all__ = [
    "audit_events_total",
    "ledger_balance_usd",
    "sweep_latency_seconds",
    "sweeps_total",
]
