"""Percentage growth and cash-flow eligibility helpers."""

from __future__ import annotations


def percent_of(value: float, pct: float | None = None) -> float:
    return value * (pct or 0.0) / 100.0


def grow_by_percent(value: float, pct: float | None = None) -> float:
    return value + percent_of(value, pct)


def is_active_in_year(year: int, start: str | None = None, stop: str | None = None) -> bool:
    """Return True when the mid-point of `year` falls inside [start, stop].

    Bounds are ISO dates compared as strings; a missing bound is open.
    """
    mid_year = f"{year:04d}-07-01"
    if start and start > mid_year:
        return False
    if stop and stop < mid_year:
        return False
    return True


def _start_year(start: str | None) -> int:
    if not start:
        return 0
    return int(start[:4])


def recurs(year: int, frequency: int | None = 1, start: str | None = None) -> bool:
    """Return True when a cash flow repeating every `frequency` years is due in `year`."""
    if not frequency or frequency <= 1:
        return True
    return (year - _start_year(start)) % frequency == 0


def carry_forward(prior_value: float, nominal: float, active: bool, inflation_pct: float | None) -> float:
    """Next year's value of a cash flow.

    Inflation compounds only across contiguous active years; a flow that was
    inactive last year restarts at its nominal value.
    """
    if not active:
        return 0.0
    if prior_value:
        return grow_by_percent(prior_value, inflation_pct)
    return nominal
