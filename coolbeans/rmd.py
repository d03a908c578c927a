"""Required Minimum Distribution helpers."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from .liquidation import sell
from .schema import RMDRule
from .state import AccountState, YearLedger

logger = logging.getLogger(__name__)

# Distributions start the year after this age.
RMD_AGE_THRESHOLD = 72


def divisor_for_age(age: int, rules: Iterable[RMDRule]) -> float | None:
    """Exact-age lookup; ages missing from the table have no divisor."""
    for rule in rules:
        if rule.age == age and rule.distribution_divisor > 0:
            return rule.distribution_divisor
    return None


def compute_rmd_amount(balance: float, age: int, rules: Iterable[RMDRule]) -> float:
    if age <= RMD_AGE_THRESHOLD:
        return 0.0
    divisor = divisor_for_age(age, rules)
    if divisor is None or balance <= 0:
        return 0.0
    return balance / divisor


def execute_rmds(
    *,
    accounts: list[AccountState],
    age: int,
    rules: list[RMDRule],
    ledger: YearLedger,
) -> float:
    """Force distributions from every account that requires them.

    The amount is based on the balance after this year's growth.

    Returns the total proceeds realized.
    """
    total = 0.0
    for account in accounts:
        if not account.capabilities.requires_rmd:
            continue
        target = compute_rmd_amount(account.value, age, rules)
        if target <= 0:
            continue

        sales_before = ledger.sales
        sell(target, account, ledger)
        withdrawn = ledger.sales - sales_before
        account.rmd += withdrawn
        total += withdrawn
        logger.debug("RMD at age %d from %s: %.2f", age, account.account.name, withdrawn)

    ledger.rmd += total
    return total
