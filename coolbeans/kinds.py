"""Tax-treatment capabilities per account kind."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class KindCapabilities:
    reinvests_dividends: bool
    sale_is_income: bool
    sale_is_gain: bool
    requires_rmd: bool


ACCOUNT_CAPABILITIES: dict[str, KindCapabilities] = {
    "IRA": KindCapabilities(reinvests_dividends=True, sale_is_income=True, sale_is_gain=False, requires_rmd=True),
    "401k": KindCapabilities(reinvests_dividends=True, sale_is_income=True, sale_is_gain=False, requires_rmd=True),
    "Roth IRA": KindCapabilities(reinvests_dividends=True, sale_is_income=True, sale_is_gain=False, requires_rmd=False),
    "Roth 401k": KindCapabilities(reinvests_dividends=True, sale_is_income=False, sale_is_gain=False, requires_rmd=False),
    "VUL": KindCapabilities(reinvests_dividends=False, sale_is_income=False, sale_is_gain=False, requires_rmd=False),
    "brokerage": KindCapabilities(reinvests_dividends=False, sale_is_income=False, sale_is_gain=True, requires_rmd=False),
    "pension": KindCapabilities(reinvests_dividends=False, sale_is_income=True, sale_is_gain=False, requires_rmd=False),
}

ACCOUNT_KINDS = frozenset(ACCOUNT_CAPABILITIES)


def capabilities_for(kind: str) -> KindCapabilities:
    try:
        return ACCOUNT_CAPABILITIES[kind]
    except KeyError:
        expected = ", ".join(sorted(ACCOUNT_KINDS))
        raise ValueError(f"unknown account kind '{kind}'; expected one of [{expected}]") from None
