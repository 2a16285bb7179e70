from decimal import Decimal

import pytest

from treasury_domain.ledger import Ledger, WalletKey


@pytest.fixture()
def ledger() -> Ledger:
    return Ledger({"Operating": 80_000, "Yield": 320_000, "Payment": 15_000})


def test_total_cash_is_sum_of_accounts(ledger: Ledger):
    assert ledger.total_cash() == Decimal(415_000)
    ledger.set_balance(WalletKey.PAYMENT, "1,000")
    assert ledger.total_cash() == sum(ledger.balances().values())
    assert ledger.total_cash() == Decimal(401_000)


def test_set_balance_normalises_and_returns_amount(ledger: Ledger):
    assert ledger.set_balance("Operating", "$12,345.67") == Decimal("12345.67")
    assert ledger.balance(WalletKey.OPERATING) == Decimal("12345.67")


def test_set_balance_never_goes_negative(ledger: Ledger):
    assert ledger.set_balance(WalletKey.YIELD, -10) == Decimal(0)
    assert ledger.set_balance(WalletKey.YIELD, "not a number") == Decimal(0)
    assert all(v >= 0 for v in ledger.balances().values())


def test_unknown_account_rejected(ledger: Ledger):
    with pytest.raises(ValueError):
        ledger.set_balance("Savings", 10)


def test_transfer_conserves_total(ledger: Ledger):
    before = ledger.total_cash()
    ledger.transfer(WalletKey.OPERATING, WalletKey.YIELD, Decimal(20_000))
    assert ledger.balance(WalletKey.OPERATING) == Decimal(60_000)
    assert ledger.balance(WalletKey.YIELD) == Decimal(340_000)
    assert ledger.balance(WalletKey.PAYMENT) == Decimal(15_000)
    assert ledger.total_cash() == before


@pytest.mark.parametrize(
    "src, dst, amount",
    [
        (WalletKey.OPERATING, WalletKey.YIELD, Decimal(80_001)),
        (WalletKey.OPERATING, WalletKey.YIELD, Decimal(-1)),
        (WalletKey.YIELD, WalletKey.YIELD, Decimal(1)),
    ],
)
def test_rejected_transfer_changes_nothing(ledger: Ledger, src, dst, amount):
    before = ledger.balances()
    with pytest.raises(ValueError):
        ledger.transfer(src, dst, amount)
    assert ledger.balances() == before


def test_missing_accounts_start_at_zero():
    assert Ledger({"Operating": 5}).balances() == {
        WalletKey.OPERATING: Decimal(5),
        WalletKey.YIELD: Decimal(0),
        WalletKey.PAYMENT: Decimal(0),
    }
