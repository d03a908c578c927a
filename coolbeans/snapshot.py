"""Immutable yearly projection snapshots."""

from __future__ import annotations

from dataclasses import dataclass

from .tax import TaxLine

BOUGHT = "bought"
SOLD = "sold"


@dataclass(frozen=True, slots=True)
class Transaction:
    name: str
    account: str
    kind: str
    value: float
    shares: int | None = None


@dataclass(frozen=True, slots=True)
class InvestmentSnapshot:
    id: int
    name: str
    value: float
    shares: int
    price: float
    basis: float
    dividends: float = 0.0
    sales: float = 0.0
    gains: float = 0.0


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    id: int
    name: str
    kind: str
    value: float
    basis: float
    dividends: float = 0.0
    sales: float = 0.0
    gains: float = 0.0
    income: float = 0.0
    rmd: float = 0.0
    investments: tuple[InvestmentSnapshot, ...] = ()

    def investment(self, investment_id: int) -> InvestmentSnapshot:
        for item in self.investments:
            if item.id == investment_id:
                return item
        raise KeyError(investment_id)


@dataclass(frozen=True, slots=True)
class CashFlowSnapshot:
    """An income or expense for one year.

    `value` is the inflation-carried amount; `charged` is what counted this
    year (expenses that do not recur this year carry a value but charge 0).
    """

    id: int
    name: str
    value: float
    charged: float


@dataclass(frozen=True, slots=True)
class YearSnapshot:
    year: int
    age: int
    accounts: tuple[AccountSnapshot, ...]
    incomes: tuple[CashFlowSnapshot, ...]
    expenses: tuple[CashFlowSnapshot, ...]
    taxes: tuple[TaxLine, ...]
    assets: float
    dividends: float
    income: float
    tax: float
    expense: float
    sales: float
    gains: float
    rmd: float
    delta: float
    deposit: float
    shortfall: float
    transactions: tuple[Transaction, ...] = ()

    def account(self, account_id: int) -> AccountSnapshot:
        for item in self.accounts:
            if item.id == account_id:
                return item
        raise KeyError(account_id)
