"""Plain-text and JSON projection reports."""

from __future__ import annotations

from dataclasses import asdict
import json
from pathlib import Path
from typing import Any

from .schema import InvestmentAccount, Profile, Quote
from .snapshot import YearSnapshot
from .state import resolve_price

SUMMARY_COLUMNS: list[tuple[str, str]] = [
    ("delta", "delta"),
    ("expenses", "expense"),
    ("taxes", "tax"),
    ("income", "income"),
    ("dividends", "dividends"),
    ("sales", "sales"),
    ("gains", "gains"),
    ("assets", "assets"),
]


def _money(value: float) -> str:
    if round(value) == 0:
        return ""
    return f"${value:,.0f}"


def _format_row(cells: list[str], widths: list[int]) -> str:
    return "  ".join(cell.rjust(width) for cell, width in zip(cells, widths)).rstrip()


def render_table(snapshots: list[YearSnapshot], expanded: bool = False) -> str:
    """Render one row per year; `expanded` adds a column per account."""
    header = ["year", "age"] + [label for label, _ in SUMMARY_COLUMNS]
    account_names: list[str] = []
    if expanded and snapshots:
        account_names = [account.name for account in snapshots[0].accounts]
        header += account_names

    rows: list[list[str]] = []
    for snapshot in snapshots:
        row = [str(snapshot.year), str(snapshot.age)]
        row += [_money(getattr(snapshot, attr)) for _, attr in SUMMARY_COLUMNS]
        if expanded:
            row += [_money(account.value) for account in snapshot.accounts]
        rows.append(row)

    widths = [len(cell) for cell in header]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]
    lines = [_format_row(header, widths), _format_row(["-" * width for width in widths], widths)]
    lines += [_format_row(row, widths) for row in rows]
    return "\n".join(lines) + "\n"


def asset_class_totals(profile: Profile, prices: dict[str, Quote] | None = None) -> dict[str, float]:
    totals: dict[str, float] = {}
    for account in profile.accounts:
        if not isinstance(account, InvestmentAccount):
            continue
        for investment in account.investments:
            if not investment.asset_class or not investment.shares:
                continue
            value = investment.shares * resolve_price(investment, prices)
            totals[investment.asset_class] = totals.get(investment.asset_class, 0.0) + value
    return totals


def render_asset_classes(profile: Profile, prices: dict[str, Quote] | None = None) -> str:
    totals = asset_class_totals(profile, prices)
    overall = sum(totals.values())
    lines = []
    for name, value in totals.items():
        share = value / overall * 100.0 if overall else 0.0
        lines.append(f"{name}: {_money(value) or '$0'} ({share:.1f}%)")
    return "\n".join(lines) + ("\n" if lines else "")


def snapshots_to_dict(snapshots: list[YearSnapshot]) -> list[dict[str, Any]]:
    return [asdict(snapshot) for snapshot in snapshots]


def render_json(snapshots: list[YearSnapshot]) -> str:
    return json.dumps({"years": snapshots_to_dict(snapshots)}, indent=2)


def write_report(output_path: str | Path, content: str) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
