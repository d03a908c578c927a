"""Profile schema dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import math
from pathlib import Path
from typing import Any

from .tax_data import DEFAULT_RMD_DIVISORS, DEFAULT_TAX_TABLES


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


class ProfileReferenceError(SchemaError):
    """Raised when a record points at a parent id that does not exist."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _number(data: dict[str, Any], key: str, path: str) -> float | None:
    """Read an optional number; absent, null and NaN all become None."""
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise SchemaError(f"{path}.{key}: expected number") from None
    if math.isnan(value):
        return None
    return value


def _integer(data: dict[str, Any], key: str, path: str) -> int | None:
    value = _number(data, key, path)
    if value is None:
        return None
    if not value.is_integer():
        raise SchemaError(f"{path}.{key}: expected whole number")
    return int(value)


def _date(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value or None


def next_id(existing: list[int]) -> int:
    """Ids are assigned as max(existing) + 1 and never reused."""
    return max([0, *existing]) + 1


def _id(data: dict[str, Any], path: str) -> int:
    raw = _require(data, "id", path)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise SchemaError(f"{path}.id: expected whole number") from None
    if not value.is_integer():
        raise SchemaError(f"{path}.id: expected whole number")
    return int(value)


def _assign_ids(items: list[dict[str, Any]], path: str) -> list[dict[str, Any]]:
    out = [
        item if item.get("id") is None else {**item, "id": _id(item, f"{path}[{idx}]")}
        for idx, item in enumerate(items)
    ]
    assigned = [item["id"] for item in out if item.get("id") is not None]
    for idx, item in enumerate(out):
        if item.get("id") is None:
            out[idx] = {**item, "id": next_id(assigned)}
            assigned.append(out[idx]["id"])
    return out


def _records(data: dict[str, Any], key: str, path: str) -> list[dict[str, Any]]:
    return [
        _expect_dict(item, f"{path}[{idx}]")
        for idx, item in enumerate(_expect_list(_optional(data, key, []), path))
    ]


def _collection(data: dict[str, Any], key: str, path: str) -> list[dict[str, Any]]:
    return _assign_ids(_records(data, key, path), path)


@dataclass(slots=True)
class General:
    inflation_pct: float
    current_age: int
    terminal_age: int

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "general") -> "General":
        current_age = _integer(data, "current_age", path)
        terminal_age = _integer(data, "terminal_age", path)
        if current_age is None:
            raise SchemaError(f"{path}.current_age: missing required field")
        if terminal_age is None:
            raise SchemaError(f"{path}.terminal_age: missing required field")
        return cls(
            inflation_pct=_number(data, "inflation_pct", path) or 0.0,
            current_age=current_age,
            terminal_age=terminal_age,
        )


@dataclass(slots=True)
class Investment:
    id: int
    name: str
    shares: int = 0
    basis: float | None = None
    price: float | None = None
    dividend_pct: float | None = None
    return_pct: float | None = None
    priority: int | None = None
    deposit: bool = False
    asset_class: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Investment":
        return cls(
            id=_id(data, path),
            name=_require(data, "name", path),
            shares=_integer(data, "shares", path) or 0,
            basis=_number(data, "basis", path),
            price=_number(data, "price", path),
            dividend_pct=_number(data, "dividend_pct", path),
            return_pct=_number(data, "return_pct", path),
            priority=_integer(data, "priority", path),
            deposit=bool(_optional(data, "deposit", False)),
            asset_class=_optional(data, "asset_class"),
        )


@dataclass(slots=True)
class ValueAccount:
    """Account tracked as a single balance with its own return and dividend rates."""

    id: int
    name: str
    kind: str
    value: float = 0.0
    return_pct: float | None = None
    dividend_pct: float | None = None
    priority: int | None = None
    deposit: bool = False

    @property
    def investments(self) -> list[Investment]:
        return []


@dataclass(slots=True)
class InvestmentAccount:
    """Account whose value is the sum of its investments."""

    id: int
    name: str
    kind: str
    priority: int | None = None
    deposit: bool = False
    investments: list[Investment] = field(default_factory=list)


Account = ValueAccount | InvestmentAccount


def account_from_dict(data: dict[str, Any], path: str, investments: list[Investment]) -> Account:
    common = {
        "id": _id(data, path),
        "name": _require(data, "name", path),
        "kind": _require(data, "kind", path),
        "priority": _integer(data, "priority", path),
        "deposit": bool(_optional(data, "deposit", False)),
    }
    value = _number(data, "value", path)
    if investments:
        if value:
            raise SchemaError(f"{path}: value and investments are mutually exclusive")
        return InvestmentAccount(**common, investments=investments)
    return ValueAccount(
        **common,
        value=value or 0.0,
        return_pct=_number(data, "return_pct", path),
        dividend_pct=_number(data, "dividend_pct", path),
    )


@dataclass(slots=True)
class Income:
    id: int
    name: str
    value: float
    start: str | None = None
    stop: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Income":
        return cls(
            id=_id(data, path),
            name=_require(data, "name", path),
            value=_number(data, "value", path) or 0.0,
            start=_date(data, "start"),
            stop=_date(data, "stop"),
        )


@dataclass(slots=True)
class Expense:
    id: int
    name: str
    value: float
    start: str | None = None
    stop: str | None = None
    frequency: int = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Expense":
        return cls(
            id=_id(data, path),
            name=_require(data, "name", path),
            value=_number(data, "value", path) or 0.0,
            start=_date(data, "start"),
            stop=_date(data, "stop"),
            frequency=_integer(data, "frequency", path) or 1,
        )


@dataclass(slots=True)
class Rate:
    id: int
    rate_pct: float
    min: float | None = None
    max: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Rate":
        return cls(
            id=_id(data, path),
            rate_pct=_number(data, "rate_pct", path) or 0.0,
            min=_number(data, "min", path),
            max=_number(data, "max", path),
        )


@dataclass(slots=True)
class TaxTable:
    id: int
    name: str
    kind: str
    rates: list[Rate] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str, rates: list[Rate]) -> "TaxTable":
        return cls(
            id=_id(data, path),
            name=_require(data, "name", path),
            kind=_optional(data, "kind", "income"),
            rates=rates,
        )


@dataclass(slots=True)
class RMDRule:
    age: int
    distribution_divisor: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "RMDRule":
        age = _integer(data, "age", path)
        if age is None:
            raise SchemaError(f"{path}.age: missing required field")
        return cls(
            age=age,
            distribution_divisor=_number(data, "distribution_divisor", path) or 0.0,
        )


@dataclass(slots=True)
class Quote:
    price: float
    as_of: str | None = None


@dataclass(slots=True)
class Profile:
    general: General
    accounts: list[Account] = field(default_factory=list)
    incomes: list[Income] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    taxes: list[TaxTable] = field(default_factory=list)
    rmds: list[RMDRule] = field(default_factory=list)
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        general = General.from_dict(_expect_dict(_require(data, "general", "profile"), "general"))

        raw_accounts = _collection(data, "accounts", "accounts")
        investments_by_account = _children(
            raw_accounts,
            parent_key="account",
            nested_key="investments",
            loose=_records(data, "investments", "investments"),
            path="accounts",
            loose_path="investments",
            build=Investment.from_dict,
        )
        accounts = [
            account_from_dict(item, f"accounts[{idx}]", investments_by_account[idx])
            for idx, item in enumerate(raw_accounts)
        ]

        raw_taxes = (
            _collection(data, "taxes", "taxes")
            if "taxes" in data
            else [dict(table) for table in DEFAULT_TAX_TABLES]
        )
        rates_by_table = _children(
            raw_taxes,
            parent_key="table",
            nested_key="rates",
            loose=_records(data, "rates", "rates"),
            path="taxes",
            loose_path="rates",
            build=Rate.from_dict,
        )
        taxes = [
            TaxTable.from_dict(item, f"taxes[{idx}]", rates_by_table[idx])
            for idx, item in enumerate(raw_taxes)
        ]

        if "rmds" in data:
            rmds = [
                RMDRule.from_dict(_expect_dict(item, f"rmds[{idx}]"), f"rmds[{idx}]")
                for idx, item in enumerate(_expect_list(data["rmds"], "rmds"))
            ]
        else:
            rmds = [RMDRule(age=age, distribution_divisor=divisor) for age, divisor in DEFAULT_RMD_DIVISORS.items()]

        return cls(
            name=_optional(data, "name"),
            general=general,
            accounts=accounts,
            incomes=[
                Income.from_dict(item, f"incomes[{idx}]")
                for idx, item in enumerate(_collection(data, "incomes", "incomes"))
            ],
            expenses=[
                Expense.from_dict(item, f"expenses[{idx}]")
                for idx, item in enumerate(_collection(data, "expenses", "expenses"))
            ],
            taxes=taxes,
            rmds=rmds,
        )


def _children(
    parents: list[dict[str, Any]],
    *,
    parent_key: str,
    nested_key: str,
    loose: list[dict[str, Any]],
    path: str,
    loose_path: str,
    build: Any,
) -> list[list[Any]]:
    """Gather child records per parent from nested arrays and top-level references."""
    index_by_id = {parent["id"]: idx for idx, parent in enumerate(parents)}
    out: list[list[Any]] = []
    for idx, parent in enumerate(parents):
        nested_path = f"{path}[{idx}].{nested_key}"
        nested = [
            _expect_dict(item, f"{nested_path}[{child_idx}]")
            for child_idx, item in enumerate(_expect_list(_optional(parent, nested_key, []), nested_path))
        ]
        nested = _assign_ids(nested, nested_path)
        out.append([build(item, f"{nested_path}[{child_idx}]") for child_idx, item in enumerate(nested)])

    for idx, item in enumerate(loose):
        item_path = f"{loose_path}[{idx}]"
        parent_id = _require(item, parent_key, item_path)
        try:
            parent_idx = index_by_id[int(parent_id)]
        except (KeyError, TypeError, ValueError):
            raise ProfileReferenceError(
                f"{item_path}.{parent_key}: no {path} record with id {parent_id!r}"
            ) from None
        siblings = out[parent_idx]
        if item.get("id") is None:
            # Unique within the parent, counting nested and earlier top-level children.
            item = {**item, "id": next_id([child.id for child in siblings])}
        siblings.append(build(item, item_path))
    return out


def load_profile(path: str | Path) -> Profile:
    """Load profile JSON into strongly-typed dataclasses."""
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("profile: root must be a JSON object")
    return Profile.from_dict(raw)


def prices_from_dict(data: dict[str, Any], path: str = "prices") -> dict[str, Quote]:
    out: dict[str, Quote] = {}
    for symbol, raw in data.items():
        entry = _expect_dict(raw, f"{path}.{symbol}")
        price = _number(entry, "price", f"{path}.{symbol}")
        if price is None:
            raise SchemaError(f"{path}.{symbol}.price: missing required field")
        out[symbol] = Quote(price=price, as_of=_optional(entry, "as_of"))
    return out


def load_prices(path: str | Path) -> dict[str, Quote]:
    """Load a `{symbol: {price, as_of}}` price map."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("prices: root must be a JSON object")
    return prices_from_dict(raw)
