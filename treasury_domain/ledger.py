"""Three-bucket cash ledger.

The set of accounts is closed (:class:`WalletKey`). Every balance is a
non-negative :class:`~decimal.Decimal`; edits that would go below zero are
clamped, transfers that would overdraw are refused.
"""
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict, Mapping, Optional

from common.numeric import Number, parse_currency_input

__all__ = [
    "WalletKey",
    "Ledger",
]


class WalletKey(str, Enum):
    OPERATING = "Operating"
    YIELD = "Yield"
    PAYMENT = "Payment"


def _coerce_key(account: WalletKey | str) -> WalletKey:
    try:
        return WalletKey(account)
    except ValueError as exc:
        raise ValueError(f"unknown account: {account!r}") from exc


class Ledger:
    """Balances keyed by :class:`WalletKey`."""

    def __init__(self, balances: Optional[Mapping[WalletKey | str, Number]] = None):
        self._balances: Dict[WalletKey, Decimal] = {key: Decimal(0) for key in WalletKey}
        for key, raw in (balances or {}).items():
            self._balances[_coerce_key(key)] = parse_currency_input(raw)

    def balance(self, account: WalletKey | str) -> Decimal:
        return self._balances[_coerce_key(account)]

    def balances(self) -> Dict[WalletKey, Decimal]:
        """Copy of the balances in :class:`WalletKey` declaration order."""
        return {key: self._balances[key] for key in WalletKey}

    def set_balance(self, account: WalletKey | str, raw_input: Number) -> Decimal:
        """Replace *account*'s balance with the normalised *raw_input*.

        Returns the stored amount so the caller can echo it back for display.
        """
        key = _coerce_key(account)
        amount = parse_currency_input(raw_input)
        self._balances[key] = amount
        return amount

    def total_cash(self) -> Decimal:
        return sum(self._balances.values(), Decimal(0))

    def transfer(self, source: WalletKey | str, destination: WalletKey | str, amount: Decimal) -> None:
        """Move *amount* between two accounts; both legs apply or neither does."""
        src = _coerce_key(source)
        dst = _coerce_key(destination)
        if src is dst:
            raise ValueError("transfer requires two distinct accounts")
        if amount < 0:
            raise ValueError("transfer amount must be non-negative")
        if amount > self._balances[src]:
            raise ValueError("Insufficient balance")

        new_src = self._balances[src] - amount
        new_dst = self._balances[dst] + amount
        self._balances[src] = new_src
        self._balances[dst] = new_dst
