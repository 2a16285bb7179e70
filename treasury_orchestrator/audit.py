"""Append-only audit log for the treasury session.

Every mutating session operation appends exactly one typed event. The event
set is a closed pydantic discriminated union keyed on ``kind``; each variant
renders its own ``details`` text, so the exporter never switches on kind.
The log is kept most-recent-first.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Iterable, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from common.numeric import format_pct, format_usd
from treasury_domain.connection import ConnectionMode
from treasury_domain.ledger import WalletKey

from .audit_exporter import audit_rows
from .models import SweepPath

__all__ = [
    "AuditEvent",
    "AuditLog",
    "BalanceUpdated",
    "Connected",
    "PolicyUpdated",
    "SweepExecuted",
    "parse_event",
]


class _AuditEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    ts: datetime

    def details(self) -> str:  # pragma: no cover - every variant overrides
        raise NotImplementedError


class Connected(_AuditEventBase):
    kind: Literal["connected"] = "connected"
    mode: ConnectionMode

    def details(self) -> str:
        return f"mode={self.mode.value}"


class PolicyUpdated(_AuditEventBase):
    kind: Literal["policy_updated"] = "policy_updated"
    target: Decimal
    baseline_rate_pct: Decimal
    alternative_rate_pct: Decimal
    note: str = ""

    def details(self) -> str:
        text = (
            f"target=${format_usd(self.target)}; "
            f"baseline={format_pct(self.baseline_rate_pct)}; "
            f"alternative={format_pct(self.alternative_rate_pct)}"
        )
        return f"{text}; note={self.note}" if self.note else text


class BalanceUpdated(_AuditEventBase):
    kind: Literal["balance_updated"] = "balance_updated"
    account: WalletKey
    new_value: Decimal

    def details(self) -> str:
        return f"account={self.account.value}; value=${format_usd(self.new_value)}"


class SweepExecuted(_AuditEventBase):
    kind: Literal["sweep_executed"] = "sweep_executed"
    amount: Decimal
    path: SweepPath

    def details(self) -> str:
        return (
            f"amount=${format_usd(self.amount)}; path={self.path.value}; "
            f"{WalletKey.OPERATING.value} -> {WalletKey.YIELD.value}"
        )


AuditEvent = Annotated[
    Union[Connected, PolicyUpdated, BalanceUpdated, SweepExecuted],
    Field(discriminator="kind"),
]

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(AuditEvent)


def parse_event(data: dict) -> AuditEvent:
    """Rebuild a typed event from its ``model_dump()`` form."""
    return _EVENT_ADAPTER.validate_python(data)


class AuditLog:
    """Most-recent-first sequence of immutable events."""

    def __init__(self, events: Iterable[AuditEvent] = ()) -> None:
        self._events: List[AuditEvent] = list(events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(tuple(self._events))

    def append(self, event: AuditEvent) -> AuditEvent:
        self._events.insert(0, event)
        return event

    def clear(self) -> int:
        """Drop every event; returns how many were removed."""
        removed = len(self._events)
        self._events.clear()
        return removed

    def events(self) -> Tuple[AuditEvent, ...]:
        return tuple(self._events)

    def export(self) -> List[List[str]]:
        return audit_rows(self._events)
