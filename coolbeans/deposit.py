"""Surplus cash deposit into the designated account."""

from __future__ import annotations

import logging
import math

from .snapshot import BOUGHT, Transaction
from .state import AccountState, InvestmentState, YearLedger

logger = logging.getLogger(__name__)

# Holdings priced at exactly this amount keep a constant $1 share value.
CASH_EQUIVALENT_PRICE = 1.0


def find_deposit_target(accounts: list[AccountState]) -> tuple[AccountState, InvestmentState | None] | None:
    for account in accounts:
        if not account.account.deposit:
            continue
        if not account.holds_investments:
            return account, None
        for holding in account.investments:
            if holding.investment.deposit:
                return account, holding
        return None
    return None


def deposit_surplus(amount: float, accounts: list[AccountState], ledger: YearLedger) -> float:
    """Deposit `amount` into the deposit target and return what was deposited.

    Without a target nothing is deposited and the surplus is dropped. A
    cash equivalent takes whole dollars and leaves any cents undeposited.
    """
    if amount <= 0:
        return 0.0

    target = find_deposit_target(accounts)
    if target is None:
        logger.debug("no deposit target; %.2f surplus not reinvested", amount)
        return 0.0

    account, holding = target
    shares: int | None = None
    if holding is None:
        account.balance += amount
        account.basis.add_basis(amount)
        name = account.account.name
    else:
        if holding.unit_price == CASH_EQUIVALENT_PRICE:
            # Whole dollars only, so value stays equal to shares.
            shares = math.floor(amount)
            if shares <= 0:
                return 0.0
            amount = float(shares)
            holding.shares += shares
        holding.value += amount
        holding.basis.add_basis(amount)
        name = holding.investment.name

    ledger.deposit += amount
    ledger.transactions.append(
        Transaction(name=name, account=account.account.name, kind=BOUGHT, value=amount, shares=shares)
    )
    logger.debug("deposited %.2f into %s", amount, name)
    return amount
