"""Tax bracket resolution across stacked income and capital-gains tables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .accrual import percent_of
from .schema import Rate, TaxTable

TAX_KINDS = frozenset({"income", "gains"})


@dataclass(frozen=True, slots=True)
class TaxLine:
    table: str
    kind: str
    amount: float
    rate_pct: float | None
    tax: float


def find_rate(rates: Iterable[Rate], amount: float) -> Rate | None:
    """Return the first rate whose (min, max] interval contains `amount`."""
    for rate in rates:
        lower = rate.min or 0.0
        if lower < amount and (rate.max is None or amount <= rate.max):
            return rate
    return None


def table_tax(table: TaxTable, amount: float) -> float:
    rate = find_rate(table.rates, amount)
    if rate is None:
        return 0.0
    return percent_of(amount, rate.rate_pct)


def tax_breakdown(tables: Iterable[TaxTable], amounts: Mapping[str, float]) -> list[TaxLine]:
    lines: list[TaxLine] = []
    for table in tables:
        amount = amounts.get(table.kind, 0.0)
        rate = find_rate(table.rates, amount)
        lines.append(
            TaxLine(
                table=table.name,
                kind=table.kind,
                amount=amount,
                rate_pct=rate.rate_pct if rate else None,
                tax=percent_of(amount, rate.rate_pct) if rate else 0.0,
            )
        )
    return lines


def compute_tax(tables: Iterable[TaxTable], amounts: Mapping[str, float]) -> float:
    """Sum tax over every table; tables of the same kind stack."""
    return sum(table_tax(table, amounts.get(table.kind, 0.0)) for table in tables)
