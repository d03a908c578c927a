"""Mutable working state for the year being projected."""

from __future__ import annotations

from dataclasses import dataclass, field

from .accrual import grow_by_percent, percent_of
from .cost_basis import CostBasisTracker
from .kinds import KindCapabilities, capabilities_for
from .schema import Account, Investment, InvestmentAccount, Quote
from .snapshot import SOLD, AccountSnapshot, InvestmentSnapshot, Transaction


def resolve_price(investment: Investment, prices: dict[str, Quote] | None) -> float:
    """Live quote when one exists for the symbol, else the stored price."""
    quote = (prices or {}).get(investment.name)
    if quote is not None and quote.price:
        return quote.price
    return investment.price or 0.0


@dataclass(slots=True)
class InvestmentState:
    investment: Investment
    value: float
    shares: int
    unit_price: float
    basis: CostBasisTracker
    dividends: float = 0.0
    sales: float = 0.0
    gains: float = 0.0

    @classmethod
    def opening(cls, investment: Investment, prices: dict[str, Quote] | None, caps: KindCapabilities) -> "InvestmentState":
        price = resolve_price(investment, prices)
        value = investment.shares * price
        return cls(
            investment=investment,
            value=value,
            shares=investment.shares,
            unit_price=price,
            basis=CostBasisTracker(total_basis=investment.basis or 0.0),
            dividends=0.0 if caps.reinvests_dividends else percent_of(value, investment.dividend_pct),
        )

    @classmethod
    def accrued(cls, investment: Investment, prior: InvestmentSnapshot, caps: KindCapabilities) -> "InvestmentState":
        dividends = percent_of(prior.value, investment.dividend_pct)
        value = grow_by_percent(prior.value, investment.return_pct)
        if caps.reinvests_dividends:
            value += dividends
            dividends = 0.0
        return cls(
            investment=investment,
            value=value,
            shares=prior.shares,
            unit_price=prior.price,
            basis=CostBasisTracker(total_basis=prior.basis),
            dividends=dividends,
        )

    def freeze(self) -> InvestmentSnapshot:
        return InvestmentSnapshot(
            id=self.investment.id,
            name=self.investment.name,
            value=self.value,
            shares=self.shares,
            price=self.unit_price,
            basis=self.basis.total_basis,
            dividends=self.dividends,
            sales=self.sales,
            gains=self.gains,
        )


@dataclass(slots=True)
class AccountState:
    account: Account
    capabilities: KindCapabilities
    balance: float = 0.0
    basis: CostBasisTracker = field(default_factory=CostBasisTracker)
    investments: list[InvestmentState] = field(default_factory=list)
    dividends: float = 0.0
    sales: float = 0.0
    gains: float = 0.0
    income: float = 0.0
    rmd: float = 0.0

    @property
    def holds_investments(self) -> bool:
        return isinstance(self.account, InvestmentAccount)

    @property
    def value(self) -> float:
        if self.holds_investments:
            return sum(item.value for item in self.investments)
        return self.balance

    @classmethod
    def opening(cls, account: Account, prices: dict[str, Quote] | None) -> "AccountState":
        caps = capabilities_for(account.kind)
        if isinstance(account, InvestmentAccount):
            investments = [InvestmentState.opening(item, prices, caps) for item in account.investments]
            return cls(
                account=account,
                capabilities=caps,
                investments=investments,
                dividends=sum(item.dividends for item in investments),
            )
        return cls(
            account=account,
            capabilities=caps,
            balance=account.value,
            basis=CostBasisTracker(total_basis=account.value),
            dividends=0.0 if caps.reinvests_dividends else percent_of(account.value, account.dividend_pct),
        )

    @classmethod
    def accrued(cls, account: Account, prior: AccountSnapshot) -> "AccountState":
        caps = capabilities_for(account.kind)
        if isinstance(account, InvestmentAccount):
            investments = [
                InvestmentState.accrued(item, prior.investment(item.id), caps)
                for item in account.investments
            ]
            return cls(
                account=account,
                capabilities=caps,
                investments=investments,
                dividends=sum(item.dividends for item in investments),
            )
        dividends = percent_of(prior.value, account.dividend_pct)
        balance = grow_by_percent(prior.value, account.return_pct)
        if caps.reinvests_dividends:
            balance += dividends
            dividends = 0.0
        return cls(
            account=account,
            capabilities=caps,
            balance=balance,
            basis=CostBasisTracker(total_basis=prior.basis),
            dividends=dividends,
        )

    def freeze(self) -> AccountSnapshot:
        basis = (
            sum(item.basis.total_basis for item in self.investments)
            if self.holds_investments
            else self.basis.total_basis
        )
        return AccountSnapshot(
            id=self.account.id,
            name=self.account.name,
            kind=self.account.kind,
            value=self.value,
            basis=basis,
            dividends=self.dividends,
            sales=self.sales,
            gains=self.gains,
            income=self.income,
            rmd=self.rmd,
            investments=tuple(item.freeze() for item in self.investments),
        )


@dataclass(slots=True)
class YearLedger:
    """Running totals of sales and deposits for one projected year."""

    sales: float = 0.0
    gains: float = 0.0
    income: float = 0.0
    rmd: float = 0.0
    deposit: float = 0.0
    transactions: list[Transaction] = field(default_factory=list)

    def record_sale(
        self,
        account: AccountState,
        *,
        name: str,
        proceeds: float,
        gain: float,
        shares: int | None,
    ) -> None:
        account.sales += proceeds
        self.sales += proceeds
        if account.capabilities.sale_is_income:
            account.income += proceeds
            self.income += proceeds
        if account.capabilities.sale_is_gain:
            account.gains += gain
            self.gains += gain
        self.transactions.append(
            Transaction(name=name, account=account.account.name, kind=SOLD, value=proceeds, shares=shares)
        )
