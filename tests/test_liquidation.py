"""Tests for priority-ordered asset liquidation."""

import pytest

from coolbeans.liquidation import cover_shortfall, ordered_by_priority, sell
from coolbeans.schema import Investment, InvestmentAccount, ValueAccount
from coolbeans.snapshot import SOLD
from coolbeans.state import AccountState, YearLedger


def _value_account(kind: str, value: float, *, account_id: int = 1, priority: int | None = None) -> AccountState:
    account = ValueAccount(id=account_id, name=f"{kind} {account_id}", kind=kind, value=value, priority=priority)
    return AccountState.opening(account, None)


def _holding_account(kind: str, shares: int, price: float, basis: float | None = None) -> AccountState:
    investment = Investment(id=1, name="VTI", shares=shares, price=price, basis=basis)
    account = InvestmentAccount(id=1, name=kind, kind=kind, investments=[investment])
    return AccountState.opening(account, None)


def test_ordered_by_priority_puts_unset_and_zero_last():
    items = [("none", None), ("zero", 0), ("three", 3), ("one", 1)]
    ordered = ordered_by_priority(items, lambda item: item[1])
    assert [name for name, _ in ordered] == ["one", "three", "none", "zero"]


def test_ordered_by_priority_keeps_ties_stable():
    items = [("a", 2), ("b", 1), ("c", 2), ("d", 1)]
    ordered = ordered_by_priority(items, lambda item: item[1])
    assert [name for name, _ in ordered] == ["b", "d", "a", "c"]


def test_sell_from_balance_account_prorates_gain():
    account = _value_account("brokerage", 105000.0)
    account.basis.total_basis = 100000.0
    ledger = YearLedger()

    remaining = sell(10000.0, account, ledger)

    assert remaining == 0.0
    assert account.value == pytest.approx(95000.0)
    assert ledger.sales == pytest.approx(10000.0)
    assert ledger.gains == pytest.approx(5000.0 * 10000.0 / 105000.0)
    assert ledger.income == 0.0


def test_sell_rounds_shares_up():
    account = _holding_account("IRA", shares=100, price=30.0)
    ledger = YearLedger()

    remaining = sell(1000.0, account, ledger)

    holding = account.investments[0]
    assert remaining == 0.0
    assert holding.shares == 66
    assert holding.value == pytest.approx(1980.0)
    assert ledger.sales == pytest.approx(1020.0)
    assert ledger.income == pytest.approx(1020.0)
    assert ledger.gains == 0.0
    assert ledger.transactions[0].kind == SOLD
    assert ledger.transactions[0].shares == 34


def test_brokerage_share_sale_uses_average_cost():
    account = _holding_account("brokerage", shares=100, price=30.0, basis=1000.0)
    ledger = YearLedger()

    sell(1000.0, account, ledger)

    holding = account.investments[0]
    assert ledger.gains == pytest.approx(680.0)
    assert holding.gains == pytest.approx(680.0)
    assert holding.basis.total_basis == pytest.approx(660.0)


def test_sell_never_exceeds_available_value():
    account = _holding_account("brokerage", shares=10, price=50.0)
    ledger = YearLedger()

    remaining = sell(10000.0, account, ledger)

    assert remaining == pytest.approx(9500.0)
    assert account.value == 0.0
    assert account.investments[0].shares == 0


def test_vul_sale_has_no_tax_character():
    account = _value_account("VUL", 5000.0)
    ledger = YearLedger()

    sell(2000.0, account, ledger)

    assert ledger.sales == pytest.approx(2000.0)
    assert ledger.income == 0.0
    assert ledger.gains == 0.0


def test_cover_shortfall_drains_accounts_in_priority_order():
    last = _value_account("Roth 401k", 10000.0, account_id=3)
    second = _value_account("Roth 401k", 5000.0, account_id=2, priority=2)
    first = _value_account("Roth 401k", 3000.0, account_id=1, priority=1)
    ledger = YearLedger()

    unpaid = cover_shortfall(
        accounts=[last, second, first],
        ledger=ledger,
        need=lambda: 12000.0 - ledger.sales,
    )

    assert unpaid == 0.0
    assert [txn.value for txn in ledger.transactions] == pytest.approx([3000.0, 5000.0, 4000.0])
    assert [txn.account for txn in ledger.transactions] == ["Roth 401k 1", "Roth 401k 2", "Roth 401k 3"]
    assert last.value == pytest.approx(6000.0)


def test_cover_shortfall_reports_unmet_need_when_assets_run_out():
    account = _value_account("Roth 401k", 3000.0)
    ledger = YearLedger()

    unpaid = cover_shortfall(accounts=[account], ledger=ledger, need=lambda: 5000.0 - ledger.sales)

    assert unpaid == pytest.approx(2000.0)
    assert account.value == 0.0


def test_cover_shortfall_rechecks_need_after_taxable_sale():
    account = _value_account("IRA", 50000.0)
    ledger = YearLedger()

    # A flat 20% tax on sale proceeds grows the need after each sale.
    unpaid = cover_shortfall(
        accounts=[account],
        ledger=ledger,
        need=lambda: 8000.0 + 0.2 * ledger.income - ledger.sales,
    )

    assert unpaid == pytest.approx(0.0, abs=0.01)
    assert ledger.sales == pytest.approx(10000.0, abs=0.01)
