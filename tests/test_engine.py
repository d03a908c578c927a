import copy

import pytest

from coolbeans.engine import initial_snapshot, iter_projection, project, step
from coolbeans.schema import Profile, Quote
from coolbeans.snapshot import BOUGHT, SOLD
from tests.helpers import make_profile

FLAT_TAX = [{"id": 1, "name": "Flat", "kind": "income", "rates": [{"id": 1, "rate_pct": 10}]}]


def _cash_brokerage(**extra) -> dict:
    return {
        "id": 1,
        "name": "Brokerage",
        "kind": "brokerage",
        "deposit": True,
        "investments": [{"id": 1, "name": "Cash", "shares": 0, "price": 1, "deposit": True}],
        **extra,
    }


def test_shortfall_is_covered_by_selling_assets():
    profile = make_profile(
        accounts=[{"id": 1, "name": "Brokerage", "kind": "brokerage", "value": 100000, "return_pct": 5}],
        expenses=[{"id": 1, "name": "Living", "value": 10000}],
    )

    year = project(profile, start_year=2025)[1]

    assert year.account(1).value == pytest.approx(95000.0)
    assert year.sales == pytest.approx(10000.0)
    assert year.gains == pytest.approx(476.19, abs=0.01)
    assert year.delta == pytest.approx(0.0, abs=0.01)
    assert year.shortfall == 0.0
    assert year.transactions[0].kind == SOLD


def test_surplus_is_deposited_into_cash_equivalent():
    profile = make_profile(
        accounts=[_cash_brokerage()],
        incomes=[{"id": 1, "name": "Salary", "value": 50000}],
        expenses=[{"id": 1, "name": "Living", "value": 10000}],
    )

    year = project(profile, start_year=2025)[1]

    holding = year.account(1).investment(1)
    assert holding.shares == 40000
    assert holding.value == pytest.approx(40000.0)
    assert year.deposit == pytest.approx(40000.0)
    assert year.delta == pytest.approx(40000.0)
    assert year.transactions[0].kind == BOUGHT


def test_surplus_is_net_of_tax():
    profile = make_profile(
        accounts=[_cash_brokerage()],
        incomes=[{"id": 1, "name": "Salary", "value": 50000}],
        expenses=[{"id": 1, "name": "Living", "value": 10000}],
        taxes=FLAT_TAX,
    )

    year = project(profile, start_year=2025)[1]

    assert year.tax == pytest.approx(5000.0)
    assert year.account(1).investment(1).shares == 35000


def test_unpaid_need_is_reported_as_shortfall():
    profile = make_profile(
        accounts=[{"id": 1, "name": "Roth", "kind": "Roth 401k", "value": 3000}],
        expenses=[{"id": 1, "name": "Living", "value": 5000}],
    )

    year = project(profile, start_year=2025)[1]

    assert year.assets == 0.0
    assert year.shortfall == pytest.approx(2000.0)
    assert year.delta == pytest.approx(-2000.0)


def test_initial_snapshot_is_deterministic(sample_profile_dict):
    profile = Profile.from_dict(sample_profile_dict)
    assert initial_snapshot(profile, start_year=2025) == initial_snapshot(profile, start_year=2025)
    assert project(profile, start_year=2025) == project(profile, start_year=2025)


def test_projection_does_not_mutate_profile(sample_profile_dict):
    profile = Profile.from_dict(sample_profile_dict)
    before = copy.deepcopy(profile)

    project(profile, start_year=2025)

    assert profile == before


def test_projection_runs_through_terminal_age(sample_profile_dict):
    profile = Profile.from_dict(sample_profile_dict)
    snapshots = project(profile, start_year=2025)

    general = profile.general
    assert len(snapshots) == general.terminal_age - general.current_age + 1
    assert snapshots[0].year == 2025
    assert snapshots[-1].age == general.terminal_age
    assert [snap.year for snap in snapshots] == list(range(2025, 2025 + len(snapshots)))


def test_terminal_age_already_reached_yields_only_first_year():
    profile = make_profile(current_age=80, terminal_age=80)
    assert len(project(profile, start_year=2025)) == 1


def test_iter_projection_yields_initial_year_first(sample_profile_dict):
    profile = Profile.from_dict(sample_profile_dict)
    years = iter_projection(profile, start_year=2025)

    first = next(years)
    assert first == initial_snapshot(profile, start_year=2025)
    assert next(years) == step(first, profile)


def test_assets_are_conserved_without_growth():
    profile = make_profile(
        accounts=[
            {"id": 1, "name": "IRA", "kind": "IRA", "value": 200000, "priority": 1},
            _cash_brokerage(id=2),
        ],
        incomes=[{"id": 1, "name": "Salary", "value": 40000, "stop": "2027-12-31"}],
        expenses=[{"id": 1, "name": "Living", "value": 30000}],
        taxes=FLAT_TAX,
        terminal_age=70,
    )

    snapshots = project(profile, start_year=2025)

    for prior, year in zip(snapshots, snapshots[1:]):
        assert year.assets == pytest.approx(prior.assets - year.sales + year.deposit, abs=0.01)
        assert abs(year.deposit - year.shortfall - year.delta) <= 0.01


def test_qualified_accounts_reinvest_dividends():
    profile = make_profile(
        accounts=[{"id": 1, "name": "IRA", "kind": "IRA", "value": 10000, "return_pct": 0, "dividend_pct": 2}],
    )

    year = project(profile, start_year=2025)[1]

    assert year.account(1).value == pytest.approx(10200.0)
    assert year.dividends == 0.0


def test_brokerage_dividends_count_as_income():
    profile = make_profile(
        accounts=[
            {"id": 1, "name": "Brokerage", "kind": "brokerage", "value": 10000, "dividend_pct": 2},
            _cash_brokerage(id=2),
        ],
        taxes=FLAT_TAX,
    )

    year = project(profile, start_year=2025)[1]

    assert year.account(1).value == pytest.approx(10000.0)
    assert year.dividends == pytest.approx(200.0)
    assert year.income == pytest.approx(200.0)
    assert year.tax == pytest.approx(20.0)
    assert year.deposit == pytest.approx(180.0)


def test_incomes_inflate_across_active_years():
    profile = make_profile(
        incomes=[{"id": 1, "name": "Salary", "value": 10000}],
        inflation_pct=10,
        terminal_age=62,
    )

    values = [year.incomes[0].value for year in project(profile, start_year=2025)]

    assert values == pytest.approx([10000.0, 11000.0, 12100.0])


def test_income_outside_window_is_zero():
    profile = make_profile(
        incomes=[{"id": 1, "name": "Pension", "value": 10000, "start": "2026-01-01"}],
        terminal_age=62,
    )

    values = [year.incomes[0].value for year in project(profile, start_year=2025)]

    assert values == [0.0, 10000.0, 10000.0]


def test_periodic_expense_charges_only_on_due_years():
    profile = make_profile(
        accounts=[{"id": 1, "name": "Savings", "kind": "Roth 401k", "value": 100000}],
        expenses=[{"id": 1, "name": "Car", "value": 5000, "start": "2025-01-01", "frequency": 2}],
        terminal_age=64,
    )

    charged = [year.expense for year in project(profile, start_year=2025)]

    assert charged == [5000.0, 0.0, 5000.0, 0.0, 5000.0]


def test_initial_year_has_no_sales():
    profile = make_profile(
        accounts=[{"id": 1, "name": "Savings", "kind": "brokerage", "value": 1000}],
        expenses=[{"id": 1, "name": "Living", "value": 5000}],
    )

    first = project(profile, start_year=2025)[0]

    assert first.sales == 0.0
    assert first.transactions == ()
    assert first.shortfall == pytest.approx(5000.0)


def test_price_map_overrides_stored_price():
    profile = make_profile(
        accounts=[
            {
                "id": 1,
                "name": "Brokerage",
                "kind": "brokerage",
                "investments": [{"id": 1, "name": "VTI", "shares": 10, "price": 100}],
            }
        ],
    )

    first = initial_snapshot(profile, {"VTI": Quote(price=250.0, as_of="2025-01-02")}, start_year=2025)

    assert first.assets == pytest.approx(2500.0)
    assert first.account(1).investment(1).price == 250.0


def test_sample_profile_balances_stay_non_negative(sample_profile_dict):
    profile = Profile.from_dict(sample_profile_dict)

    for year in project(profile, start_year=2025):
        for account in year.accounts:
            assert account.value >= -0.01
            for holding in account.investments:
                assert holding.shares >= 0


def test_fractional_surplus_keeps_cash_at_one_dollar_per_share():
    profile = make_profile(
        accounts=[_cash_brokerage()],
        incomes=[{"id": 1, "name": "Salary", "value": 50000.60}],
        expenses=[{"id": 1, "name": "Living", "value": 10000}],
        terminal_age=62,
    )

    snapshots = project(profile, start_year=2025)

    for year in snapshots[1:]:
        holding = year.account(1).investment(1)
        assert holding.value == pytest.approx(holding.shares)
        assert 0 <= year.delta - year.deposit < 1.0
    assert snapshots[1].account(1).investment(1).shares == 40000


def test_top_level_investment_keeps_its_own_balance():
    profile = Profile.from_dict(
        {
            "general": {"current_age": 60, "terminal_age": 61},
            "accounts": [
                {
                    "id": 1,
                    "name": "Brokerage",
                    "kind": "brokerage",
                    "investments": [{"name": "AAA", "shares": 10, "price": 100}],
                }
            ],
            "investments": [{"account": 1, "name": "BBB", "shares": 1, "price": 5000}],
            "taxes": [],
            "rmds": [],
        }
    )

    first, second = project(profile, start_year=2025)

    assert first.assets == pytest.approx(6000.0)
    assert second.assets == pytest.approx(6000.0)
    assert [item.value for item in second.account(1).investments] == pytest.approx([1000.0, 5000.0])


def test_assets_reconcile_with_growth():
    profile = make_profile(
        accounts=[
            {"id": 1, "name": "Brokerage", "kind": "brokerage", "value": 100000, "return_pct": 5, "priority": 1},
            _cash_brokerage(id=2),
        ],
        incomes=[{"id": 1, "name": "Salary", "value": 12000, "stop": "2027-12-31"}],
        expenses=[{"id": 1, "name": "Living", "value": 10000}],
        taxes=[{"id": 1, "name": "Gains", "kind": "gains", "rates": [{"id": 1, "rate_pct": 15}]}],
        terminal_age=70,
    )

    snapshots = project(profile, start_year=2025)

    for prior, year in zip(snapshots, snapshots[1:]):
        growth = prior.account(1).value * 0.05
        assert year.assets == pytest.approx(prior.assets + growth - year.sales + year.deposit, abs=0.01)
        assert abs(year.deposit - year.shortfall - year.delta) < 1.0
    assert any(year.gains > 0 for year in snapshots)
    assert any(year.deposit > 0 for year in snapshots)
