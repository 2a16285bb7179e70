"""In-memory treasury session: the single owner of simulator state.

The presentation layer keeps a reference to a :class:`TreasurySession`,
reads :meth:`TreasurySession.snapshot` and subscribes for change
notifications; it never touches the ledger, policy or gates directly. Every
operation runs under one re-entrant lock, so ledger + approval gate + audit
log change as a unit and the readiness check in :meth:`execute_sweep` cannot
race with another caller.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from common.datetime import utc_now
from common.numeric import Number
from treasury_domain.approval import ApprovalGate
from treasury_domain.connection import ConnectionMode, ConnectionState
from treasury_domain.flow import FlowStep, GuidedFlow
from treasury_domain.ledger import Ledger, WalletKey
from treasury_domain.policy import Policy, PolicyStore
from treasury_observability import metrics as met

from .audit import AuditEvent, AuditLog, BalanceUpdated, Connected, PolicyUpdated, SweepExecuted
from .audit_exporter import render_audit_csv, write_audit_csv
from .engine import evaluate_readiness, recommend
from .models import (
    ApprovalStatus,
    LastSweepSummary,
    ProjectionPoint,
    ScenarioPreset,
    SweepPath,
    SweepReadiness,
    SweepRecommendation,
    YieldUplift,
)
from .projection import project, yield_uplift
from .settings import SimulationSettings, get_settings

__all__ = ["TreasurySession", "TreasurySnapshot"]

_log = logging.getLogger(__name__)

Listener = Callable[["TreasurySnapshot"], None]

NOTE_TARGET = "Operating target updated"
NOTE_BASELINE = "Baseline rate updated"
NOTE_ALTERNATIVE = "Alternative rate updated"
NOTE_DEMO = "Demo scenario loaded"


class TreasurySnapshot(BaseModel):
    """Read model handed to the presentation layer after every change."""
    model_config = ConfigDict(frozen=True)

    session_id: str
    balances: Dict[WalletKey, Decimal]
    total_cash: Decimal
    policy: Policy
    connection: ConnectionMode
    recommendation: SweepRecommendation
    approval: ApprovalStatus
    readiness: SweepReadiness
    last_sweep: Optional[LastSweepSummary] = None
    audit_log: Tuple[AuditEvent, ...]
    projection: Tuple[ProjectionPoint, ...]
    uplift: YieldUplift
    flow_step: FlowStep


class TreasurySession:
    def __init__(
        self,
        settings: SimulationSettings | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
        session_id: str | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

        scenario = self._settings.default_scenario
        self._ledger = Ledger(scenario.balances)
        self._policy = PolicyStore(scenario.policy())
        self._connection = ConnectionState()
        self._approval = ApprovalGate(required=self._settings.approval_required)
        self._flow = GuidedFlow()
        self._audit = AuditLog()
        self._last_sweep: Optional[LastSweepSummary] = None
        self._publish_balances()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def settings(self) -> SimulationSettings:
        return self._settings

    def recommendation(self) -> SweepRecommendation:
        with self._lock:
            return recommend(self._ledger.balances(), self._policy.policy)

    def sweep_readiness(self) -> SweepReadiness:
        with self._lock:
            return evaluate_readiness(
                connected=self._connection.is_connected,
                approval_satisfied=self._approval.is_satisfied(),
                sweep_amount=self.recommendation().sweep_amount,
            )

    def projection(self) -> List[ProjectionPoint]:
        with self._lock:
            policy = self._policy.policy
            return project(
                self._ledger.balance(WalletKey.YIELD),
                policy.baseline_rate_pct,
                policy.alternative_rate_pct,
                policy.horizon_months,
            )

    def audit_events(self) -> Tuple[AuditEvent, ...]:
        with self._lock:
            return self._audit.events()

    def snapshot(self) -> TreasurySnapshot:
        with self._lock:
            policy = self._policy.policy
            return TreasurySnapshot(
                session_id=self.session_id,
                balances=self._ledger.balances(),
                total_cash=self._ledger.total_cash(),
                policy=policy,
                connection=self._connection.mode,
                recommendation=self.recommendation(),
                approval=ApprovalStatus(
                    required=self._approval.required,
                    approved=self._approval.approved,
                    satisfied=self._approval.is_satisfied(),
                ),
                readiness=self.sweep_readiness(),
                last_sweep=self._last_sweep,
                audit_log=self._audit.events(),
                projection=tuple(self.projection()),
                uplift=yield_uplift(
                    self._ledger.balance(WalletKey.YIELD),
                    policy.baseline_rate_pct,
                    policy.alternative_rate_pct,
                ),
                flow_step=self._flow.step,
            )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for post-change snapshots; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record(self, event: AuditEvent) -> None:
        self._audit.append(event)
        met.audit_events_total.labels(kind=event.kind).inc()
        met.audit_log_size.set(len(self._audit))

    def _publish_balances(self) -> None:
        for key, value in self._ledger.balances().items():
            met.ledger_balance_usd.labels(account=key.value).set(float(value))

    def _policy_event(self, policy: Policy, note: str) -> None:
        self._record(
            PolicyUpdated(
                ts=self._clock(),
                target=policy.operating_target,
                baseline_rate_pct=policy.baseline_rate_pct,
                alternative_rate_pct=policy.alternative_rate_pct,
                note=note,
            )
        )

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def set_balance(self, account: WalletKey | str, raw_input: Number) -> Decimal:
        with self._lock:
            amount = self._ledger.set_balance(account, raw_input)
            key = WalletKey(account)
            self._record(BalanceUpdated(ts=self._clock(), account=key, new_value=amount))
            self._publish_balances()
            _log.info(
                "balance_updated",
                extra={"session_id": self.session_id, "account": key.value, "amount": str(amount)},
            )
            self._notify()
            return amount

    def total_cash(self) -> Decimal:
        with self._lock:
            return self._ledger.total_cash()

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    def set_target(self, raw_input: Number) -> Policy:
        with self._lock:
            policy = self._policy.set_target(raw_input)
            self._policy_event(policy, NOTE_TARGET)
            self._notify()
            return policy

    def set_baseline_rate(self, pct: Number) -> Policy:
        with self._lock:
            policy = self._policy.set_baseline_rate(pct)
            self._policy_event(policy, NOTE_BASELINE)
            self._notify()
            return policy

    def set_alternative_rate(self, pct: Number) -> Policy:
        with self._lock:
            policy = self._policy.set_alternative_rate(pct)
            self._policy_event(policy, NOTE_ALTERNATIVE)
            self._notify()
            return policy

    def set_horizon(self, months: Number) -> Policy:
        # display-only parameter: not audited
        with self._lock:
            policy = self._policy.set_horizon(months)
            self._notify()
            return policy

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self, mode: ConnectionMode | str) -> ConnectionMode:
        with self._lock:
            connected = self._connection.connect(mode)
            self._record(Connected(ts=self._clock(), mode=connected))
            _log.info("connected", extra={"session_id": self.session_id, "mode": connected.value})
            self._notify()
            return connected

    def disconnect(self) -> None:
        # local UI reset; not audited
        with self._lock:
            self._connection.disconnect()
            self._notify()

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    def set_approval_required(self, required: bool) -> None:
        with self._lock:
            self._approval.set_required(required)
            self._notify()

    def approve(self) -> bool:
        with self._lock:
            approved = self._approval.approve()
            self._notify()
            return approved

    # ------------------------------------------------------------------
    # Sweep execution
    # ------------------------------------------------------------------

    def execute_sweep(self, path: SweepPath | str = SweepPath.GUIDED) -> Optional[LastSweepSummary]:
        """Move the recommended excess from Operating to Yield.

        Returns the new :class:`LastSweepSummary`, or ``None`` when a gate
        blocks execution (see :meth:`sweep_readiness` for the reason).
        """
        sweep_path = SweepPath(path)
        t0 = time.perf_counter()
        with self._lock:
            readiness = self.sweep_readiness()
            if not readiness.executable:
                met.sweep_blocked_total.labels(reason=readiness.reason.value).inc()
                _log.info(
                    "sweep_blocked",
                    extra={
                        "session_id": self.session_id,
                        "reason": readiness.reason.value,
                        "path": sweep_path.value,
                    },
                )
                return None

            amount = self.recommendation().sweep_amount
            self._ledger.transfer(WalletKey.OPERATING, WalletKey.YIELD, amount)
            now = self._clock()
            summary = LastSweepSummary(amount=amount, ts=now, path=sweep_path)
            self._last_sweep = summary
            self._record(SweepExecuted(ts=now, amount=amount, path=sweep_path))
            self._approval.reset_after_sweep()
            self._flow.force_monitor()
            self._publish_balances()

            met.sweeps_total.labels(path=sweep_path.value).inc()
            met.sweep_amount_usd.observe(float(amount))
            met.sweep_latency_seconds.observe(time.perf_counter() - t0)
            _log.info(
                "sweep_executed",
                extra={"session_id": self.session_id, "amount": str(amount), "path": sweep_path.value},
            )
            self._notify()
            return summary

    @property
    def last_sweep(self) -> Optional[LastSweepSummary]:
        return self._last_sweep

    # ------------------------------------------------------------------
    # Guided flow
    # ------------------------------------------------------------------

    def _gates(self) -> dict:
        return {
            "connected": self._connection.is_connected,
            "approval_satisfied": self._approval.is_satisfied(),
        }

    def flow_next(self) -> FlowStep:
        with self._lock:
            if self._flow.next(**self._gates()):
                self._notify()
            return self._flow.step

    def flow_back(self) -> FlowStep:
        with self._lock:
            if self._flow.back():
                self._notify()
            return self._flow.step

    def flow_go_to(self, step: FlowStep | int | str) -> FlowStep:
        with self._lock:
            if self._flow.go_to(step, **self._gates()):
                self._notify()
            return self._flow.step

    def flow_restart(self) -> FlowStep:
        with self._lock:
            self._flow.restart()
            self._notify()
            return self._flow.step

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def clear_audit_log(self) -> int:
        with self._lock:
            removed = self._audit.clear()
            met.audit_log_size.set(0)
            _log.info("audit_log_cleared", extra={"session_id": self.session_id, "amount": removed})
            self._notify()
            return removed

    def export_audit_rows(self) -> List[List[str]]:
        with self._lock:
            return self._audit.export()

    def export_audit_csv(self) -> str:
        with self._lock:
            return render_audit_csv(self._audit.events())

    def write_audit_export(self, directory=None):
        with self._lock:
            events = self._audit.events()
        return write_audit_csv(events, directory or self._settings.audit_export_dir, now=self._clock())

    # ------------------------------------------------------------------
    # Scenarios
    # ------------------------------------------------------------------

    def load_scenario(self, scenario: ScenarioPreset, *, note: str = NOTE_DEMO) -> TreasurySnapshot:
        """Reset balances, policy, flow and last sweep to *scenario*.

        Audits one BalanceUpdated per account and a single PolicyUpdated.
        Connection and approval gate are left as they are.
        """
        with self._lock:
            for key in WalletKey:
                amount = self._ledger.set_balance(key, scenario.balances.get(key, Decimal(0)))
                self._record(BalanceUpdated(ts=self._clock(), account=key, new_value=amount))
            policy = self._policy.replace(scenario.policy())
            self._policy_event(policy, note)
            self._flow.restart()
            self._last_sweep = None
            self._publish_balances()
            self._notify()
            return self.snapshot()

    def load_demo_scenario(self) -> TreasurySnapshot:
        return self.load_scenario(self._settings.demo_scenario)
