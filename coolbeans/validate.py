"""Semantic validation for profiles."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .kinds import ACCOUNT_KINDS
from .schema import InvestmentAccount, Profile, TaxTable, ValueAccount
from .tax import TAX_KINDS


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_iso_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return len(value) == 10


def _check_enum(result: ValidationResult, path: str, value: str, allowed: Iterable[str]) -> None:
    allowed_set = set(allowed)
    if value not in allowed_set:
        expected = ", ".join(sorted(allowed_set))
        result.errors.append(f"{path}: '{value}' is not valid; expected one of [{expected}]")


def _check_unique_ids(result: ValidationResult, path: str, ids: list[int]) -> None:
    seen: set[int] = set()
    for idx, item_id in enumerate(ids):
        if item_id in seen:
            result.errors.append(f"{path}[{idx}].id: duplicate id {item_id}")
        seen.add(item_id)


def _check_non_negative(result: ValidationResult, path: str, value: float | None) -> None:
    if value is not None and value < 0:
        result.errors.append(f"{path}: must be >= 0")


def _check_date_range(result: ValidationResult, path: str, start: str | None, stop: str | None) -> None:
    for key, value in (("start", start), ("stop", stop)):
        if value is not None and not _is_iso_date(value):
            result.errors.append(f"{path}.{key}: '{value}' is not valid; expected YYYY-MM-DD")
    if start and stop and _is_iso_date(start) and _is_iso_date(stop) and start > stop:
        result.errors.append(f"{path}.start/{path}.stop: start must be <= stop")


def _check_brackets(result: ValidationResult, path: str, table: TaxTable) -> None:
    bounded = sorted(table.rates, key=lambda rate: rate.min or 0.0)
    for idx, rate in enumerate(table.rates):
        lower = rate.min or 0.0
        if rate.max is not None and rate.max <= lower:
            result.errors.append(f"{path}.rates[{idx}]: min must be < max")
        if rate.rate_pct < 0:
            result.errors.append(f"{path}.rates[{idx}].rate_pct: must be >= 0")

    for previous, current in zip(bounded, bounded[1:]):
        upper = previous.max
        lower = current.min or 0.0
        if upper is None or lower < upper:
            result.warnings.append(f"{path}: brackets overlap near {lower:,.0f}; the first listed rate wins")
        elif lower > upper:
            result.warnings.append(f"{path}: no bracket covers {upper:,.0f} to {lower:,.0f}; that income is untaxed")


def validate_profile(profile: Profile) -> ValidationResult:
    result = ValidationResult()
    general = profile.general

    if general.terminal_age <= general.current_age:
        result.errors.append("general.terminal_age: must be greater than general.current_age")
    if general.current_age < 0:
        result.errors.append("general.current_age: must be >= 0")

    _check_unique_ids(result, "accounts", [account.id for account in profile.accounts])
    _check_unique_ids(result, "incomes", [income.id for income in profile.incomes])
    _check_unique_ids(result, "expenses", [expense.id for expense in profile.expenses])
    _check_unique_ids(result, "taxes", [table.id for table in profile.taxes])

    deposit_accounts: list[str] = []
    for idx, account in enumerate(profile.accounts):
        base = f"accounts[{idx}]"
        _check_enum(result, f"{base}.kind", account.kind, ACCOUNT_KINDS)
        if account.deposit:
            deposit_accounts.append(account.name)

        if isinstance(account, ValueAccount):
            _check_non_negative(result, f"{base}.value", account.value)
            continue

        _check_unique_ids(result, f"{base}.investments", [item.id for item in account.investments])
        deposit_investments = 0
        for inv_idx, investment in enumerate(account.investments):
            inv_base = f"{base}.investments[{inv_idx}]"
            _check_non_negative(result, f"{inv_base}.shares", investment.shares)
            _check_non_negative(result, f"{inv_base}.basis", investment.basis)
            _check_non_negative(result, f"{inv_base}.price", investment.price)
            if investment.shares and not investment.price:
                result.warnings.append(f"{inv_base}.price: missing; value is 0 unless a quote is supplied")
            if investment.deposit:
                deposit_investments += 1
                if not account.deposit:
                    result.warnings.append(f"{inv_base}.deposit: account '{account.name}' is not a deposit account")
        if account.deposit and deposit_investments == 0:
            result.warnings.append(f"{base}.deposit: no investment is flagged for deposits; surplus will be dropped")
        if deposit_investments > 1:
            result.warnings.append(f"{base}.investments: more than one deposit investment; the first is used")

    if len(deposit_accounts) > 1:
        result.warnings.append(
            f"accounts: more than one deposit account ({', '.join(deposit_accounts)}); the first is used"
        )
    if not any(isinstance(account, InvestmentAccount) or account.value for account in profile.accounts):
        result.warnings.append("accounts: no assets to draw on when expenses exceed income")

    for idx, income in enumerate(profile.incomes):
        base = f"incomes[{idx}]"
        _check_non_negative(result, f"{base}.value", income.value)
        _check_date_range(result, base, income.start, income.stop)

    for idx, expense in enumerate(profile.expenses):
        base = f"expenses[{idx}]"
        _check_non_negative(result, f"{base}.value", expense.value)
        _check_date_range(result, base, expense.start, expense.stop)
        if expense.frequency < 1:
            result.errors.append(f"{base}.frequency: must be >= 1")

    for idx, table in enumerate(profile.taxes):
        base = f"taxes[{idx}]"
        _check_enum(result, f"{base}.kind", table.kind, TAX_KINDS)
        _check_unique_ids(result, f"{base}.rates", [rate.id for rate in table.rates])
        _check_brackets(result, base, table)

    seen_ages: set[int] = set()
    for idx, rule in enumerate(profile.rmds):
        base = f"rmds[{idx}]"
        if rule.age in seen_ages:
            result.errors.append(f"{base}.age: duplicate age {rule.age}")
        seen_ages.add(rule.age)
        if rule.distribution_divisor <= 0:
            result.errors.append(f"{base}.distribution_divisor: must be > 0")

    return result
