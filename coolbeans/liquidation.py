"""Asset liquidation in priority order."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging
import math
from typing import TypeVar

from .state import AccountState, InvestmentState, YearLedger

logger = logging.getLogger(__name__)

# Shortfalls at or below a cent are considered covered.
SHORTFALL_TOLERANCE = 0.01
# Bound on repeated sales from one account while tax re-runs chase the need.
MAX_SALES_PER_ACCOUNT = 100

T = TypeVar("T")


def _priority_key(priority: int | None) -> tuple[bool, int]:
    # Unset and 0 priorities sort after every explicit priority.
    return (not priority, priority or 0)


def ordered_by_priority(items: Iterable[T], priority: Callable[[T], int | None]) -> list[T]:
    """Sort ascending by priority; ties keep their original order."""
    return sorted(items, key=lambda item: _priority_key(priority(item)))


def _sell_investment(
    amount: float,
    account: AccountState,
    holding: InvestmentState,
    ledger: YearLedger,
) -> float:
    """Sell whole shares worth at least `amount` (or everything). Returns proceeds."""
    target = min(amount, holding.value)
    if holding.shares <= 0:
        proceeds = target
        shares_sold = None
        gain = holding.basis.withdraw(proceeds, holding.value)
    else:
        share_value = holding.value / holding.shares
        shares_sold = min(holding.shares, math.ceil(target / share_value))
        if shares_sold == holding.shares:
            proceeds = holding.value
        else:
            proceeds = min(holding.value, shares_sold * share_value)
        gain = holding.basis.sell_shares(proceeds, shares_sold, holding.shares)
        holding.shares -= shares_sold

    holding.value = max(0.0, holding.value - proceeds)
    holding.sales += proceeds
    if account.capabilities.sale_is_gain:
        holding.gains += gain
    ledger.record_sale(account, name=holding.investment.name, proceeds=proceeds, gain=gain, shares=shares_sold)
    logger.debug(
        "sold %s shares of %s from %s for %.2f (gain %.2f)",
        shares_sold,
        holding.investment.name,
        account.account.name,
        proceeds,
        gain,
    )
    return proceeds


def sell(amount: float, account: AccountState, ledger: YearLedger) -> float:
    """Sell up to `amount` from one account and return what is still needed.

    Investments are sold in priority order. Share sales round up, so the
    proceeds may exceed `amount`; the result is never negative.
    """
    remaining = amount
    if remaining <= 0:
        return 0.0

    if account.holds_investments:
        for holding in ordered_by_priority(account.investments, lambda item: item.investment.priority):
            if remaining <= 0:
                break
            if holding.value <= 0:
                continue
            remaining -= _sell_investment(remaining, account, holding, ledger)
        return max(0.0, remaining)

    if account.value <= 0:
        return remaining
    proceeds = min(remaining, account.balance)
    gain = account.basis.withdraw(proceeds, account.balance)
    account.balance -= proceeds
    ledger.record_sale(account, name=account.account.name, proceeds=proceeds, gain=gain, shares=None)
    logger.debug("sold %.2f from %s (gain %.2f)", proceeds, account.account.name, gain)
    return max(0.0, remaining - proceeds)


def cover_shortfall(
    *,
    accounts: list[AccountState],
    ledger: YearLedger,
    need: Callable[[], float],
) -> float:
    """Sell from accounts in priority order until `need()` is covered.

    `need` is re-evaluated after every sale because sales change taxable
    income and gains. Returns the unmet need once assets run out.
    """
    for account in ordered_by_priority(accounts, lambda item: item.account.priority):
        for _ in range(MAX_SALES_PER_ACCOUNT):
            shortfall = need()
            if shortfall <= SHORTFALL_TOLERANCE or account.value <= 0:
                break
            sell(shortfall, account, ledger)
    return max(0.0, need())
