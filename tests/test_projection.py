"""
Tests for net worth projections.
"""

import json
import math
import sys

import pytest
from datetime import date

from assetplace.calculations.amortization import LoanTerms
from assetplace.calculations.expenses import Expense, Frequency
from assetplace.calculations.projection import (
    AssetClassDefaults,
    AssetSnapshot,
    Granularity,
    GrowthScenario,
    ProjectionConfig,
    ProjectionInput,
    generate_projection,
    generate_projections,
    map_period_to_years,
    resolve_growth_rate,
    resolve_periods_per_year,
)

START = date(2024, 1, 1)


def project(assets, asset_classes=(), holding_types=(), **config):
    config.setdefault("start_date", START)
    return generate_projection(
        ProjectionInput(
            assets=tuple(assets),
            config=ProjectionConfig(**config),
            asset_classes=tuple(asset_classes),
            holding_types=tuple(holding_types),
        )
    )


def series_of(result):
    return [
        result.total_asset_value,
        result.total_liability_value,
        result.net_worth,
        result.total_income,
        result.total_expenses,
        result.net_cashflow,
    ]


class TestSeriesShape:
    """Test series lengths and dates."""

    @pytest.mark.parametrize(
        "years,granularity,length",
        [
            (10, Granularity.yearly, 11),
            (2, Granularity.monthly, 25),
            (3, Granularity.quarterly, 13),
            (2, Granularity.auto, 25),
            (3, Granularity.auto, 4),
            (0, Granularity.yearly, 1),
        ],
    )
    def test_lengths(self, years, granularity, length):
        asset = AssetSnapshot(id="a", asset_class_id="c", value=1000)
        result = project([asset], years=years, granularity=granularity)

        assert result.length == length
        for values in series_of(result):
            assert len(values) == length
        for line in result.asset_class_breakdown.values():
            assert len(line.values) == length

    def test_empty_snapshot(self):
        result = project([], years=5, granularity=Granularity.yearly)
        assert result.net_worth == [0.0] * 6

    def test_dates(self):
        result = project([], years=1, granularity=Granularity.quarterly)
        assert result.dates == [
            "2024-01-01",
            "2024-04-01",
            "2024-07-01",
            "2024-10-01",
            "2025-01-01",
        ]

    def test_auto_granularity(self):
        assert resolve_periods_per_year(Granularity.auto, 1) == 12
        assert resolve_periods_per_year(Granularity.auto, 10) == 1
        assert resolve_periods_per_year(Granularity.quarterly, 10) == 4


class TestAssetGrowth:
    """Test asset growth compounding."""

    def test_one_year_monthly_growth(self):
        """$100k at 5% projected monthly for a year reaches ~$105k."""
        asset = AssetSnapshot(id="a", value=100000, growth_rate=0.05)
        result = project([asset], years=1, granularity=Granularity.monthly)

        assert result.total_asset_value[0] == 100000
        assert result.total_asset_value[12] == pytest.approx(105000.0)
        assert result.net_worth[12] == pytest.approx(105000.0)

    def test_yearly_compounding(self):
        asset = AssetSnapshot(id="a", value=1000, growth_rate=0.10)
        result = project([asset], years=3, granularity=Granularity.yearly)
        assert result.total_asset_value[3] == pytest.approx(1331.0)

    def test_future_start_date(self):
        """An asset bought mid-year contributes nothing before it is held."""
        asset = AssetSnapshot(
            id="a", value=50000, growth_rate=0.0, start_date=date(2024, 7, 1)
        )
        result = project([asset], years=1, granularity=Granularity.monthly)

        assert result.total_asset_value[:6] == [0.0] * 6
        assert result.total_asset_value[6] == 50000
        assert result.total_asset_value[12] == 50000

    def test_deterministic(self):
        assets = [
            AssetSnapshot(id="a", value=100000, growth_rate=0.05, income_yield=0.03),
            AssetSnapshot(
                id="l",
                value=80000,
                is_liability=True,
                loan=LoanTerms(80000, 0.06, 20),
                loan_start_date=START,
            ),
        ]
        first = project(assets, years=10)
        second = project(assets, years=10)
        assert first.to_dict() == second.to_dict()


class TestGrowthRates:
    """Test growth rate resolution."""

    @pytest.fixture
    def shares(self):
        return AssetClassDefaults(
            id="shares", name="Shares", low_growth_rate=0.03, medium_growth_rate=0.07, high_growth_rate=0.10
        )

    def test_asset_rate_wins(self, shares):
        asset = AssetSnapshot(asset_class_id="shares", growth_rate=0.01)
        assert resolve_growth_rate(asset, shares, GrowthScenario.high) == 0.01

    def test_class_rate_per_scenario(self, shares):
        asset = AssetSnapshot(asset_class_id="shares")
        assert resolve_growth_rate(asset, shares, GrowthScenario.low) == 0.03
        assert resolve_growth_rate(asset, shares, GrowthScenario.medium) == 0.07
        assert resolve_growth_rate(asset, shares, GrowthScenario.high) == 0.10

    def test_scenario_fallbacks(self):
        bare = AssetClassDefaults(id="misc", name="Misc")
        asset = AssetSnapshot(asset_class_id="misc")
        assert resolve_growth_rate(asset, bare, GrowthScenario.low) == 0.02
        assert resolve_growth_rate(asset, bare, GrowthScenario.medium) == 0.05
        assert resolve_growth_rate(asset, bare, GrowthScenario.high) == 0.08

    def test_no_class(self):
        assert resolve_growth_rate(AssetSnapshot(), None) == 0.05

    def test_liability_held_flat(self):
        assert resolve_growth_rate(AssetSnapshot(is_liability=True), None) == 0.0

    def test_scenario_changes_projection(self, shares):
        asset = AssetSnapshot(id="a", asset_class_id="shares", value=1000)
        low = project([asset], [shares], years=5, growth_scenario=GrowthScenario.low)
        high = project([asset], [shares], years=5, growth_scenario=GrowthScenario.high)
        assert high.net_worth[-1] > low.net_worth[-1]


class TestLiabilities:
    """Test liability balances and net worth."""

    def test_loan_follows_schedule(self):
        loan = AssetSnapshot(
            id="l",
            value=12000,
            is_liability=True,
            loan=LoanTerms(12000, 0.0, 1),
            loan_start_date=START,
        )
        result = project([loan], years=1, granularity=Granularity.monthly)

        assert result.total_liability_value[0] == pytest.approx(12000.0)
        assert result.total_liability_value[6] == pytest.approx(6000.0)
        assert result.total_liability_value[12] == 0.0

    def test_loan_payments_are_expenses(self):
        loan = AssetSnapshot(
            id="l",
            value=12000,
            is_liability=True,
            loan=LoanTerms(12000, 0.0, 1),
            loan_start_date=START,
        )
        result = project([loan], years=1, granularity=Granularity.monthly)
        assert result.total_expenses[0] == pytest.approx(1000.0)
        assert result.total_expenses[12] == 0.0

        without = project(
            [loan], years=1, granularity=Granularity.monthly, include_loan_payments=False
        )
        assert without.total_expenses == [0.0] * 13

    def test_net_worth_is_assets_minus_liabilities(self):
        assets = [
            AssetSnapshot(id="house", asset_class_id="re", value=450000, growth_rate=0.04),
            AssetSnapshot(
                id="mortgage",
                asset_class_id="re",
                value=280000,
                is_liability=True,
                loan=LoanTerms(280000, 0.045, 30),
                loan_start_date=date(2015, 6, 20),
            ),
            AssetSnapshot(id="debt", value=5000, is_liability=True, payoff_years=2),
        ]
        result = project(assets, years=10)

        for t in range(result.length):
            assert result.net_worth[t] == pytest.approx(
                result.total_asset_value[t] - result.total_liability_value[t]
            )
            assert result.total_liability_value[t] >= 0
            assert result.net_cashflow[t] == pytest.approx(
                result.total_income[t] - result.total_expenses[t]
            )

    def test_loan_started_before_projection(self):
        loan_terms = LoanTerms(12000, 0.0, 1)
        loan = AssetSnapshot(
            id="l",
            value=12000,
            is_liability=True,
            loan=loan_terms,
            loan_start_date=date(2023, 7, 1),
        )
        result = project([loan], years=1, granularity=Granularity.monthly)
        assert result.total_liability_value[0] == pytest.approx(6000.0)
        assert result.total_liability_value[6] == 0.0

    def test_loan_without_start_date_starts_from_recorded_balance(self):
        car = AssetSnapshot(
            id="car",
            value=25000,
            is_liability=True,
            loan=LoanTerms(40000, 0.07, 5),
        )
        result = project([car], years=5, granularity=Granularity.yearly)
        balances = result.total_liability_value

        assert balances[0] == pytest.approx(25000.0)
        assert all(a >= b for a, b in zip(balances, balances[1:]))
        assert balances[-1] == 0.0

    def test_loan_without_start_date_pays_recorded_balance(self):
        car = AssetSnapshot(
            id="car",
            value=25000,
            is_liability=True,
            loan=LoanTerms(40000, 0.07, 5),
        )
        result = project([car], years=1, granularity=Granularity.monthly)
        # Roughly the payment of the original loan
        assert result.total_expenses[0] == pytest.approx(792.05, abs=2)

    def test_straight_line_payoff(self):
        debt = AssetSnapshot(id="d", value=10000, is_liability=True, payoff_years=5)
        result = project([debt], years=6, granularity=Granularity.yearly)
        assert result.total_liability_value == pytest.approx(
            [10000, 8000, 6000, 4000, 2000, 0, 0]
        )

    def test_negative_liability_value_is_magnitude(self):
        debt = AssetSnapshot(id="d", value=-2500, is_liability=True)
        result = project([debt], years=1, granularity=Granularity.yearly)
        assert result.total_liability_value == [2500, 2500]
        assert result.net_worth == [-2500, -2500]

    def test_breakdown_signs(self):
        assets = [
            AssetSnapshot(id="a", asset_class_id="re", holding_type_id="p", value=300000, growth_rate=0.0),
            AssetSnapshot(id="l", asset_class_id="re", holding_type_id="p", value=100000, is_liability=True),
        ]
        result = project(
            assets,
            [AssetClassDefaults(id="re", name="Real Estate")],
            [("p", "Personal")],
            years=1,
            granularity=Granularity.yearly,
        )

        line = result.asset_class_breakdown["re"]
        assert line.name == "Real Estate"
        assert line.values == [200000, 200000]
        assert result.holding_type_breakdown["p"].name == "Personal"


class TestCashflow:
    """Test income and expense series."""

    def test_income_yield(self):
        asset = AssetSnapshot(id="a", value=100000, growth_rate=0.0, income_yield=0.04)
        result = project([asset], years=2, granularity=Granularity.yearly)
        assert result.total_income == pytest.approx([4000, 4000, 4000])

    def test_class_income_yield(self):
        cash = AssetClassDefaults(id="cash", name="Cash", medium_growth_rate=0.0, income_yield=0.02)
        asset = AssetSnapshot(id="a", asset_class_id="cash", value=10000)
        result = project([asset], [cash], years=1, granularity=Granularity.yearly)
        assert result.total_income[0] == pytest.approx(200.0)

    def test_explicit_annual_income(self):
        asset = AssetSnapshot(id="job", value=0, growth_rate=0.0, annual_income=24000)
        result = project([asset], years=1, granularity=Granularity.monthly)
        assert result.total_income[0] == pytest.approx(2000.0)
        assert result.total_income[12] == pytest.approx(2000.0)

    def test_reinvested_income(self):
        asset = AssetSnapshot(id="a", value=100000, growth_rate=0.0, income_yield=0.04)
        result = project(
            [asset], years=2, granularity=Granularity.yearly, reinvest_income=True
        )
        assert result.total_asset_value[1] == pytest.approx(104000.0)
        assert result.total_income[1] == pytest.approx(4160.0)

    def test_income_can_be_excluded(self):
        asset = AssetSnapshot(id="a", value=100000, income_yield=0.04)
        result = project(
            [asset], years=2, granularity=Granularity.yearly, include_income=False
        )
        assert result.total_income == [0.0] * 3

    def test_expenses_escalate_with_inflation(self):
        asset = AssetSnapshot(
            id="a",
            value=100000,
            expenses=(Expense(category="rates", amount=1200, frequency=Frequency.annually),),
        )
        result = project(
            [asset], years=2, granularity=Granularity.yearly, inflation_rate=0.10
        )
        assert result.total_expenses == pytest.approx([1200, 1320, 1452])

    def test_expenses_split_per_period(self):
        asset = AssetSnapshot(
            id="a",
            value=100000,
            expenses=(Expense(category="fees", amount=300, frequency=Frequency.quarterly),),
        )
        result = project([asset], years=1, granularity=Granularity.monthly)
        assert result.total_expenses[0] == pytest.approx(100.0)


class TestFilters:
    """Test which assets enter the projection."""

    @pytest.fixture
    def assets(self):
        return [
            AssetSnapshot(id="a", asset_class_id="cash", holding_type_id="p", value=1000, growth_rate=0.0),
            AssetSnapshot(id="b", asset_class_id="shares", holding_type_id="t", value=2000, growth_rate=0.0),
            AssetSnapshot(id="h", asset_class_id="cash", holding_type_id="p", value=4000, growth_rate=0.0, is_hidden=True),
            AssetSnapshot(id="l", asset_class_id="loans", holding_type_id="p", value=500, is_liability=True),
        ]

    def test_hidden_assets_excluded_by_default(self, assets):
        result = project(assets, years=1)
        assert result.total_asset_value[0] == 3000

        shown = project(assets, years=1, include_hidden_assets=True)
        assert shown.total_asset_value[0] == 7000

    def test_exclude_liabilities(self, assets):
        result = project(assets, years=1, exclude_liabilities=True)
        assert result.total_liability_value == [0.0] * result.length
        assert result.net_worth[0] == 3000

    def test_enabled_asset_classes(self, assets):
        result = project(assets, years=1, enabled_asset_classes=("shares",))
        assert result.total_asset_value[0] == 2000
        assert list(result.asset_class_breakdown) == ["shares"]

    def test_enabled_holding_types(self, assets):
        result = project(assets, years=1, enabled_holding_types=("p",))
        assert result.net_worth[0] == 1000 - 500


def assert_finite_and_consistent(result):
    for values in series_of(result):
        assert all(isinstance(v, float) and math.isfinite(v) for v in values)
    for t in range(result.length):
        assert result.net_worth[t] == pytest.approx(
            result.total_asset_value[t] - result.total_liability_value[t]
        )
        assert result.net_cashflow[t] == pytest.approx(
            result.total_income[t] - result.total_expenses[t]
        )
    json.dumps(result.to_dict(), allow_nan=False)


class TestRateBounds:
    """Test rates at and beyond the supported range."""

    def test_income_growth_below_total_loss_monthly(self):
        salary = AssetSnapshot(id="job", value=0, annual_income=60000, growth_rate=-2)
        result = project([salary], years=1, granularity=Granularity.monthly)

        assert_finite_and_consistent(result)
        assert result.total_income[0] == pytest.approx(5000.0)
        assert result.total_income[1:] == [0.0] * 12

    def test_deflation_below_total_loss_monthly(self):
        house = AssetSnapshot(
            id="h",
            value=1000,
            growth_rate=0.0,
            expenses=(Expense(category="rates", amount=100),),
        )
        result = project(
            [house], years=1, granularity=Granularity.monthly, inflation_rate=-2
        )

        assert_finite_and_consistent(result)
        assert result.total_expenses[0] == pytest.approx(100.0)
        assert result.total_expenses[1] == 0.0

    def test_rates_are_clamped(self):
        crash = AssetSnapshot(id="a", value=1000, growth_rate=-5)
        boom = AssetSnapshot(id="b", value=1000, growth_rate=50)

        crashed = project([crash], years=2, granularity=Granularity.yearly)
        boomed = project([boom], years=2, granularity=Granularity.yearly)

        assert crashed.total_asset_value == [1000, 0, 0]
        assert boomed.total_asset_value == pytest.approx([1000, 11000, 121000])

    def test_flat_liability_with_extreme_growth_over_a_century(self):
        debt = AssetSnapshot(id="d", value=1000, is_liability=True, growth_rate=2000)
        result = project([debt], years=100, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_liability_value[1] == pytest.approx(11000.0)

    def test_runaway_growth_saturates(self):
        asset = AssetSnapshot(id="a", value=1e6, growth_rate=10, income_yield=0.5)
        salary = AssetSnapshot(id="job", value=0, annual_income=1e6, growth_rate=10)
        result = project([asset, salary], years=400, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_asset_value[-1] == sys.float_info.max
        assert result.total_income[-1] == sys.float_info.max

    def test_inflation_adjustment_with_deep_deflation(self):
        asset = AssetSnapshot(id="a", value=100, growth_rate=0.0)
        result = project(
            [asset],
            years=200,
            granularity=Granularity.yearly,
            inflation_rate=-0.99,
            inflation_adjusted=True,
        )

        assert_finite_and_consistent(result)
        assert result.total_asset_value[1] == pytest.approx(10000.0)


class TestMalformedInput:
    """Test that junk numbers project as zero rather than poisoning totals."""

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf"), None])
    def test_bad_value_projects_as_zero(self, bad):
        asset = AssetSnapshot(id="a", value=bad, growth_rate=0.05, income_yield=0.04)
        result = project([asset], years=3, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        for values in series_of(result):
            assert values == [0.0] * 4

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_bad_rates_are_zero(self, bad):
        asset = AssetSnapshot(id="a", value=1000, growth_rate=bad, income_yield=bad)
        result = project([asset], years=3, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_asset_value == [1000.0] * 4
        assert result.total_income == [0.0] * 4

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_bad_class_rates_are_zero(self, bad):
        shares = AssetClassDefaults(
            id="shares", name="Shares", medium_growth_rate=bad, income_yield=bad
        )
        asset = AssetSnapshot(id="a", asset_class_id="shares", value=1000)
        result = project([asset], [shares], years=2, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_asset_value == [1000.0] * 3

    def test_bad_expense_amount(self):
        asset = AssetSnapshot(
            id="a",
            value=1000,
            expenses=(
                Expense(category="rates", amount=float("nan")),
                Expense(category="fees", amount=float("inf"), frequency=Frequency.annually),
            ),
        )
        result = project([asset], years=2, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_expenses == [0.0] * 3

    def test_bad_income_and_payoff(self):
        assets = [
            AssetSnapshot(id="job", value=0, annual_income=float("nan")),
            AssetSnapshot(id="d", value=500, is_liability=True, payoff_years=float("nan")),
        ]
        result = project(assets, years=2, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_income == [0.0] * 3
        assert result.total_liability_value == [500.0] * 3

    def test_bad_loan_terms_hold_balance_flat(self):
        debt = AssetSnapshot(
            id="d",
            value=500,
            is_liability=True,
            loan=LoanTerms(float("nan"), float("nan"), float("nan")),
        )
        result = project([debt], years=2, granularity=Granularity.yearly)

        assert_finite_and_consistent(result)
        assert result.total_liability_value == [500.0] * 3
        assert result.total_expenses == [0.0] * 3

    def test_mixed_snapshot_keeps_net_worth_consistent(self):
        assets = [
            AssetSnapshot(id="ok", asset_class_id="c", value=1000, growth_rate=0.05),
            AssetSnapshot(id="nan", asset_class_id="c", value=float("nan"), growth_rate=float("nan")),
            AssetSnapshot(id="inf", value=float("inf"), income_yield=float("inf")),
            AssetSnapshot(id="l", asset_class_id="c", value=float("-inf"), is_liability=True),
            AssetSnapshot(id="big", value=1e300, growth_rate=10, is_liability=True),
        ]
        result = project(
            assets, years=5, granularity=Granularity.yearly, inflation_rate=float("nan")
        )

        assert_finite_and_consistent(result)
        for line in result.asset_class_breakdown.values():
            assert all(math.isfinite(v) for v in line.values)


class TestInflationAdjustment:
    """Test restating in start-date money."""

    def test_growth_matching_inflation_is_flat(self):
        asset = AssetSnapshot(id="a", value=100000, growth_rate=0.03)
        result = project(
            [asset],
            years=5,
            granularity=Granularity.yearly,
            inflation_rate=0.03,
            inflation_adjusted=True,
        )

        assert result.inflation_adjusted
        assert result.total_asset_value == pytest.approx([100000.0] * 6)
        assert result.net_worth == pytest.approx([100000.0] * 6)

    def test_nominal_by_default(self):
        asset = AssetSnapshot(id="a", value=100000, growth_rate=0.03)
        result = project([asset], years=1, granularity=Granularity.yearly, inflation_rate=0.03)
        assert result.total_asset_value[1] == pytest.approx(103000.0)


class TestPeriodMapping:
    """Test period selector values."""

    @pytest.mark.parametrize(
        "period,years",
        [("annually", 1), ("5-years", 5), ("10-years", 10), ("20-years", 20), ("30-years", 30), ("bogus", 10)],
    )
    def test_fixed_periods(self, period, years):
        assert map_period_to_years(period) == years

    def test_retirement(self):
        assert map_period_to_years("retirement", retirement_age=67, current_age=40) == 27
        assert map_period_to_years("retirement") == 30


class TestResultSerialization:
    """Test the JSON shape handed to the API."""

    def test_to_dict(self):
        result = generate_projections(
            [AssetSnapshot(id="a", asset_class_id="c", holding_type_id="h", value=10)],
            asset_classes={"c": AssetClassDefaults(id="c", name="Cash")},
            holding_types={"h": "Personal"},
            config=ProjectionConfig(years=1, start_date=START),
        )
        data = result.to_dict()

        assert data["dates"][0] == "2024-01-01"
        assert data["asset_class_breakdown"][0]["asset_class"] == "Cash"
        assert data["holding_type_breakdown"][0]["holding_type"] == "Personal"
        assert set(data["cashflow"]) == {"total_income", "total_expenses", "net_cashflow"}
