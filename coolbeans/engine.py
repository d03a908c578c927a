"""Core year-by-year deterministic projection engine."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
import logging

from .accrual import carry_forward, is_active_in_year, recurs
from .deposit import deposit_surplus
from .liquidation import SHORTFALL_TOLERANCE, cover_shortfall
from .rmd import RMD_AGE_THRESHOLD, execute_rmds
from .schema import Expense, Income, Profile, Quote
from .snapshot import CashFlowSnapshot, YearSnapshot
from .state import AccountState, YearLedger
from .tax import compute_tax, tax_breakdown

logger = logging.getLogger(__name__)


def _income_flows(
    incomes: list[Income],
    year: int,
    prior: tuple[CashFlowSnapshot, ...],
    inflation_pct: float,
) -> tuple[CashFlowSnapshot, ...]:
    prior_by_id = {flow.id: flow.value for flow in prior}
    out: list[CashFlowSnapshot] = []
    for income in incomes:
        value = carry_forward(
            prior_by_id.get(income.id, 0.0),
            income.value,
            is_active_in_year(year, income.start, income.stop),
            inflation_pct,
        )
        out.append(CashFlowSnapshot(id=income.id, name=income.name, value=value, charged=value))
    return tuple(out)


def _expense_flows(
    expenses: list[Expense],
    year: int,
    prior: tuple[CashFlowSnapshot, ...],
    inflation_pct: float,
) -> tuple[CashFlowSnapshot, ...]:
    prior_by_id = {flow.id: flow.value for flow in prior}
    out: list[CashFlowSnapshot] = []
    for expense in expenses:
        value = carry_forward(
            prior_by_id.get(expense.id, 0.0),
            expense.value,
            is_active_in_year(year, expense.start, expense.stop),
            inflation_pct,
        )
        charged = value if recurs(year, expense.frequency, expense.start) else 0.0
        out.append(CashFlowSnapshot(id=expense.id, name=expense.name, value=value, charged=charged))
    return tuple(out)


def _close_year(
    *,
    year: int,
    age: int,
    profile: Profile,
    accounts: list[AccountState],
    incomes: tuple[CashFlowSnapshot, ...],
    expenses: tuple[CashFlowSnapshot, ...],
    ledger: YearLedger,
    settle: bool,
) -> YearSnapshot:
    dividends = sum(account.dividends for account in accounts)
    # Cash received this year; sale proceeds are tracked separately in the ledger.
    cash_income = sum(flow.charged for flow in incomes) + dividends
    expense = sum(flow.charged for flow in expenses)

    def taxable() -> dict[str, float]:
        return {"income": cash_income + ledger.income, "gains": ledger.gains}

    def need() -> float:
        return compute_tax(profile.taxes, taxable()) + expense - cash_income - ledger.sales

    if settle:
        shortfall = need()
        if shortfall > 0:
            unpaid = cover_shortfall(accounts=accounts, ledger=ledger, need=need)
            if unpaid > SHORTFALL_TOLERANCE:
                logger.debug("year %d: assets exhausted with %.2f unpaid", year, unpaid)
        elif shortfall < 0:
            deposit_surplus(-shortfall, accounts, ledger)

    amounts = taxable()
    taxes = tuple(tax_breakdown(profile.taxes, amounts))
    tax = sum(line.tax for line in taxes)
    delta = cash_income + ledger.sales - (tax + expense)
    frozen = tuple(account.freeze() for account in accounts)
    return YearSnapshot(
        year=year,
        age=age,
        accounts=frozen,
        incomes=incomes,
        expenses=expenses,
        taxes=taxes,
        assets=sum(account.value for account in frozen),
        dividends=dividends,
        income=amounts["income"],
        tax=tax,
        expense=expense,
        sales=ledger.sales,
        gains=ledger.gains,
        rmd=ledger.rmd,
        delta=delta,
        deposit=ledger.deposit,
        shortfall=-delta if delta < -SHORTFALL_TOLERANCE else 0.0,
        transactions=tuple(ledger.transactions),
    )


def initial_snapshot(
    profile: Profile,
    prices: dict[str, Quote] | None = None,
    start_year: int | None = None,
) -> YearSnapshot:
    """Build the starting year from current balances without growth or sales."""
    year = date.today().year if start_year is None else start_year
    inflation_pct = profile.general.inflation_pct
    return _close_year(
        year=year,
        age=profile.general.current_age,
        profile=profile,
        accounts=[AccountState.opening(account, prices) for account in profile.accounts],
        incomes=_income_flows(profile.incomes, year, (), inflation_pct),
        expenses=_expense_flows(profile.expenses, year, (), inflation_pct),
        ledger=YearLedger(),
        settle=False,
    )


def step(prior: YearSnapshot, profile: Profile) -> YearSnapshot:
    """Derive the next year's snapshot from `prior`."""
    year = prior.year + 1
    age = prior.age + 1
    inflation_pct = profile.general.inflation_pct

    # Step 1: growth and dividends.
    accounts = [AccountState.accrued(account, prior.account(account.id)) for account in profile.accounts]
    ledger = YearLedger()

    # Step 2: forced distributions.
    if age > RMD_AGE_THRESHOLD:
        execute_rmds(accounts=accounts, age=age, rules=profile.rmds, ledger=ledger)

    # Step 3: incomes and expenses.
    incomes = _income_flows(profile.incomes, year, prior.incomes, inflation_pct)
    expenses = _expense_flows(profile.expenses, year, prior.expenses, inflation_pct)

    # Steps 4-6: tax, shortfall or surplus, snapshot.
    return _close_year(
        year=year,
        age=age,
        profile=profile,
        accounts=accounts,
        incomes=incomes,
        expenses=expenses,
        ledger=ledger,
        settle=True,
    )


def iter_projection(
    profile: Profile,
    prices: dict[str, Quote] | None = None,
    start_year: int | None = None,
) -> Iterator[YearSnapshot]:
    """Yield the starting year and then every following year through the terminal age."""
    snapshot = initial_snapshot(profile, prices, start_year)
    logger.info(
        "projecting %s from age %d to %d",
        profile.name or "profile",
        profile.general.current_age,
        profile.general.terminal_age,
    )
    yield snapshot
    while snapshot.age < profile.general.terminal_age:
        snapshot = step(snapshot, profile)
        yield snapshot


def project(
    profile: Profile,
    prices: dict[str, Quote] | None = None,
    start_year: int | None = None,
) -> list[YearSnapshot]:
    snapshots = list(iter_projection(profile, prices, start_year))
    logger.info("projected %d years; ending assets %.2f", len(snapshots), snapshots[-1].assets)
    return snapshots
