"""
Net Worth Projections

Advances every asset, liability and attached expense period by period and
aggregates the result into the parallel series the projection charts plot:
total assets, total liabilities, net worth, cashflow, and per asset-class /
holding-type breakdowns.

Conventions:
- Rates are decimals (0.05 for 5%).
- Index 0 is the projection start. Values are balances at each period date;
  income and expenses at index t are the amounts for the period that starts
  at that date.
- Liability balances are carried as positive magnitudes in
  ``total_liability_value`` and as negative values in the breakdowns.
- Assets are held for the whole horizon; sales and maturities are not
  modelled.
- A loan with no start date is amortized from its recorded balance over
  what remains of its term.
- Rates are held within [-100%, +1000%] and every series stays finite.
"""

import enum
import logging
import math
import sys
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from assetplace.calculations.amortization import (
    AmortizationEntry,
    LoanTerms,
    balance_at,
    months_elapsed,
    schedule_for,
)
from assetplace.calculations.expenses import Expense, per_period_amount
from assetplace.calculations.utils import safe_float

logger = logging.getLogger(__name__)

DEFAULT_GROWTH_RATE = 0.05
SCENARIO_FALLBACK_RATES = {"low": 0.02, "medium": 0.05, "high": 0.08}

# Annual rates are held within [-100%, +1000%]
MIN_ANNUAL_RATE = -1.0
MAX_ANNUAL_RATE = 10.0

# Horizons up to this many years are projected month by month under "auto"
SHORT_HORIZON_YEARS = 2


class Granularity(str, enum.Enum):
    """Length of one projection period."""

    auto = "auto"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"


PERIODS_PER_YEAR = {
    Granularity.monthly: 12,
    Granularity.quarterly: 4,
    Granularity.yearly: 1,
}


class GrowthScenario(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


@dataclass(frozen=True)
class AssetClassDefaults:
    """Growth and yield defaults configured per asset class."""

    id: str
    name: str
    low_growth_rate: Optional[float] = None
    medium_growth_rate: Optional[float] = None
    high_growth_rate: Optional[float] = None
    income_yield: Optional[float] = None


@dataclass(frozen=True)
class AssetSnapshot:
    """An asset or liability as the projection sees it."""

    id: Optional[str] = None
    name: str = ""
    asset_class_id: Optional[str] = None
    holding_type_id: Optional[str] = None
    value: float = 0.0
    growth_rate: Optional[float] = None
    income_yield: Optional[float] = None
    annual_income: Optional[float] = None  # rent, salary; overrides income_yield
    is_liability: bool = False
    is_hidden: bool = False
    start_date: Optional[date] = None
    loan: Optional[LoanTerms] = None
    loan_start_date: Optional[date] = None
    payoff_years: Optional[float] = None  # straight-line payoff without a loan
    expenses: Tuple[Expense, ...] = ()


@dataclass(frozen=True)
class ProjectionConfig:
    """User-selected projection options."""

    years: int = 10
    granularity: Granularity = Granularity.auto
    start_date: Optional[date] = None
    growth_scenario: GrowthScenario = GrowthScenario.medium
    inflation_rate: float = 0.0
    inflation_adjusted: bool = False
    include_income: bool = True
    include_expenses: bool = True
    include_loan_payments: bool = True
    reinvest_income: bool = False
    include_hidden_assets: bool = False
    exclude_liabilities: bool = False
    enabled_asset_classes: Tuple[str, ...] = ()
    enabled_holding_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectionInput:
    """Everything a projection depends on. Hashable, so it can key a cache."""

    assets: Tuple[AssetSnapshot, ...]
    config: ProjectionConfig = ProjectionConfig()
    asset_classes: Tuple[AssetClassDefaults, ...] = ()
    holding_types: Tuple[Tuple[str, str], ...] = ()


@dataclass
class SeriesBreakdown:
    """One line of a breakdown chart."""

    id: Optional[str]
    name: str
    values: List[float]


@dataclass
class ProjectionResult:
    """Parallel time series, all of length ``years * periods_per_year + 1``."""

    dates: List[str]
    periods_per_year: int
    total_asset_value: List[float]
    total_liability_value: List[float]
    net_worth: List[float]
    total_income: List[float]
    total_expenses: List[float]
    net_cashflow: List[float]
    asset_class_breakdown: Dict[Optional[str], SeriesBreakdown] = field(
        default_factory=dict
    )
    holding_type_breakdown: Dict[Optional[str], SeriesBreakdown] = field(
        default_factory=dict
    )
    inflation_adjusted: bool = False

    @property
    def length(self) -> int:
        return len(self.dates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dates": self.dates,
            "periods_per_year": self.periods_per_year,
            "total_asset_value": self.total_asset_value,
            "total_liability_value": self.total_liability_value,
            "net_worth": self.net_worth,
            "asset_class_breakdown": [
                {"asset_class_id": line.id, "asset_class": line.name, "values": line.values}
                for line in self.asset_class_breakdown.values()
            ],
            "holding_type_breakdown": [
                {"holding_type_id": line.id, "holding_type": line.name, "values": line.values}
                for line in self.holding_type_breakdown.values()
            ],
            "cashflow": {
                "total_income": self.total_income,
                "total_expenses": self.total_expenses,
                "net_cashflow": self.net_cashflow,
            },
            "inflation_adjusted": self.inflation_adjusted,
        }


@dataclass
class _AssetSeries:
    values: List[float]
    income: List[float]
    expenses: List[float]


def map_period_to_years(
    period: str,
    retirement_age: Optional[int] = None,
    current_age: Optional[int] = None,
) -> int:
    """Translate a period selector value into a number of years."""
    fixed = {
        "annually": 1,
        "5-years": 5,
        "10-years": 10,
        "20-years": 20,
        "30-years": 30,
    }
    if period in fixed:
        return fixed[period]
    if period == "retirement":
        if retirement_age and current_age and retirement_age > current_age:
            return retirement_age - current_age
        return 30
    return 10


def resolve_periods_per_year(granularity: Granularity, years: int) -> int:
    """Periods per year for a granularity; ``auto`` goes monthly on short horizons."""
    if granularity == Granularity.auto:
        return 12 if years <= SHORT_HORIZON_YEARS else 1
    return PERIODS_PER_YEAR.get(Granularity(granularity), 1)


def clamp_rate(rate: Any) -> float:
    """Coerce an annual rate and hold it within the supported range."""
    return min(max(safe_float(rate), MIN_ANNUAL_RATE), MAX_ANNUAL_RATE)


def resolve_growth_rate(
    asset: AssetSnapshot,
    asset_class: Optional[AssetClassDefaults],
    scenario: GrowthScenario = GrowthScenario.medium,
) -> float:
    """
    Annual growth rate for an asset.

    The asset's own rate wins. Otherwise assets fall back to their class
    default for the scenario, then to 5%. Liabilities without their own
    rate are held flat.
    """
    if asset.growth_rate is not None:
        return clamp_rate(asset.growth_rate)
    if asset.is_liability:
        return 0.0

    scenario = GrowthScenario(scenario).value
    if asset_class is not None:
        rate = {
            "low": asset_class.low_growth_rate,
            "medium": asset_class.medium_growth_rate,
            "high": asset_class.high_growth_rate,
        }[scenario]
        if rate is not None:
            return clamp_rate(rate)
        return SCENARIO_FALLBACK_RATES[scenario]

    return DEFAULT_GROWTH_RATE


def resolve_income_yield(
    asset: AssetSnapshot, asset_class: Optional[AssetClassDefaults]
) -> float:
    """Annual income yield for an asset (0 for liabilities)."""
    if asset.is_liability:
        return 0.0
    if asset.income_yield is not None:
        return clamp_rate(asset.income_yield)
    if asset_class is not None and asset_class.income_yield is not None:
        return clamp_rate(asset_class.income_yield)
    return 0.0


def _compound(rate: float, years: float) -> float:
    """(1 + rate) ** years, never complex and never overflowing."""
    base = max(0.0, 1 + rate)
    try:
        return base ** years
    except OverflowError:
        return sys.float_info.max


def _finite(value: float) -> float:
    if math.isnan(value):
        return 0.0
    if math.isinf(value):
        return math.copysign(sys.float_info.max, value)
    return value


def _rebase_loan(loan: LoanTerms, balance: float) -> LoanTerms:
    """
    Terms that pay ``balance`` off over what is left of ``loan``.

    Used when only the current balance is known: the payments already made
    are those whose closing balance is still above ``balance``.
    """
    schedule = schedule_for(loan)
    if not schedule:
        return loan
    paid = sum(1 for entry in schedule if entry.balance > balance)
    remaining = max(len(schedule) - paid, 1)
    ppy = loan.payments_per_year
    return LoanTerms(
        principal=balance,
        annual_rate=loan.annual_rate,
        term_years=remaining / ppy,
        payments_per_year=ppy,
    )


def _is_included(asset: AssetSnapshot, config: ProjectionConfig) -> bool:
    if asset.is_hidden and not config.include_hidden_assets:
        return False
    if asset.is_liability and config.exclude_liabilities:
        return False
    if config.enabled_asset_classes and asset.asset_class_id not in config.enabled_asset_classes:
        return False
    if config.enabled_holding_types and asset.holding_type_id not in config.enabled_holding_types:
        return False
    return True


def _loan_periods_elapsed(loan: LoanTerms, loan_start: date, when: date) -> int:
    """Loan payments made between ``loan_start`` and ``when``."""
    months = months_elapsed(loan_start, when)
    if months <= 0:
        return 0
    return int(months * safe_float(loan.payments_per_year) // 12)


def _loan_payments_between(
    schedule: Sequence[AmortizationEntry], first: int, last: int
) -> float:
    """Sum of payments numbered ``first + 1`` through ``last``."""
    first = max(first, 0)
    last = min(last, len(schedule))
    if last <= first:
        return 0.0
    return sum(entry.payment for entry in schedule[first:last])


def _project_asset(
    asset: AssetSnapshot,
    asset_class: Optional[AssetClassDefaults],
    config: ProjectionConfig,
    periods_per_year: int,
    period_dates: Sequence[date],
) -> _AssetSeries:
    count = len(period_dates)
    series = _AssetSeries([0.0] * count, [0.0] * count, [0.0] * count)

    initial = safe_float(asset.value)
    if asset.is_liability:
        initial = abs(initial)

    growth = resolve_growth_rate(asset, asset_class, config.growth_scenario)
    period_growth = _compound(growth, 1 / periods_per_year)
    income_yield = resolve_income_yield(asset, asset_class)
    inflation = clamp_rate(config.inflation_rate)
    expense_per_period = sum(
        per_period_amount(expense, periods_per_year) for expense in asset.expenses
    )

    loan = asset.loan if asset.is_liability else None
    if loan is not None and asset.loan_start_date is None and initial > 0:
        # Only today's balance is known; amortize it over the remaining term
        loan = _rebase_loan(loan, initial)
    schedule: Sequence[AmortizationEntry] = schedule_for(loan) if loan else ()
    loan_start = asset.loan_start_date or asset.start_date or period_dates[0]
    payoff_periods = safe_float(asset.payoff_years) * periods_per_year

    value = None
    active = 0  # periods since the asset entered the projection
    reinvested = 0.0

    for t, when in enumerate(period_dates):
        if asset.start_date is not None and when < asset.start_date:
            continue

        if value is None:
            active = 0
        else:
            active += 1

        if schedule:
            elapsed = _loan_periods_elapsed(loan, loan_start, when)
            value = balance_at(schedule, loan.principal, elapsed)
        elif asset.is_liability and payoff_periods > 0:
            value = initial * max(0.0, 1 - active / payoff_periods)
        elif value is None:
            value = initial
        else:
            value = _finite(value * period_growth + reinvested)
        reinvested = 0.0

        series.values[t] = value

        if config.include_income and not asset.is_liability:
            if asset.annual_income is not None:
                income = (
                    safe_float(asset.annual_income)
                    * _compound(growth, t / periods_per_year)
                    / periods_per_year
                )
            else:
                income = value * income_yield / periods_per_year
            income = _finite(income)
            series.income[t] = income
            if config.reinvest_income:
                reinvested = income

        if config.include_expenses:
            escalation = _compound(inflation, t / periods_per_year)
            outgoings = expense_per_period * escalation

            if schedule and config.include_loan_payments:
                next_date = when + relativedelta(months=12 // periods_per_year)
                outgoings += _loan_payments_between(
                    schedule,
                    _loan_periods_elapsed(loan, loan_start, when),
                    _loan_periods_elapsed(loan, loan_start, next_date),
                )

            series.expenses[t] = _finite(outgoings)

    return series


def _breakdown_line(
    lines: Dict[Optional[str], SeriesBreakdown],
    key: Optional[str],
    name: str,
    length: int,
) -> SeriesBreakdown:
    line = lines.get(key)
    if line is None:
        line = SeriesBreakdown(id=key, name=name, values=[0.0] * length)
        lines[key] = line
    return line


def generate_projection(projection_input: ProjectionInput) -> ProjectionResult:
    """
    Project a snapshot of assets over the configured horizon.

    Pure function: no I/O, and the same input always yields the same series.
    An empty snapshot or a zero-year horizon still produces a result with
    zero-filled series (one point for a zero-year horizon).
    """
    config = projection_input.config
    years = max(0, int(safe_float(config.years)))
    periods_per_year = resolve_periods_per_year(config.granularity, years)
    total_periods = years * periods_per_year
    length = total_periods + 1

    start = config.start_date or date.today()
    months_per_period = 12 // periods_per_year
    period_dates = [
        start + relativedelta(months=t * months_per_period) for t in range(length)
    ]

    classes = {c.id: c for c in projection_input.asset_classes}
    holding_names = dict(projection_input.holding_types)

    result = ProjectionResult(
        dates=[d.isoformat() for d in period_dates],
        periods_per_year=periods_per_year,
        total_asset_value=[0.0] * length,
        total_liability_value=[0.0] * length,
        net_worth=[0.0] * length,
        total_income=[0.0] * length,
        total_expenses=[0.0] * length,
        net_cashflow=[0.0] * length,
        inflation_adjusted=config.inflation_adjusted,
    )

    included = [a for a in projection_input.assets if _is_included(a, config)]
    logger.debug(
        f"Projecting {len(included)} of {len(projection_input.assets)} assets "
        f"over {years} years at {periods_per_year} periods/year"
    )

    for asset in included:
        asset_class = classes.get(asset.asset_class_id)
        series = _project_asset(
            asset, asset_class, config, periods_per_year, period_dates
        )
        sign = -1.0 if asset.is_liability else 1.0

        class_line = _breakdown_line(
            result.asset_class_breakdown,
            asset.asset_class_id,
            asset_class.name if asset_class else "Unknown",
            length,
        )
        holding_line = _breakdown_line(
            result.holding_type_breakdown,
            asset.holding_type_id,
            holding_names.get(asset.holding_type_id, "Unknown"),
            length,
        )

        for t in range(length):
            if asset.is_liability:
                result.total_liability_value[t] += series.values[t]
            else:
                result.total_asset_value[t] += series.values[t]
            result.total_income[t] += series.income[t]
            result.total_expenses[t] += series.expenses[t]
            class_line.values[t] += sign * series.values[t]
            holding_line.values[t] += sign * series.values[t]

    if config.inflation_adjusted:
        _deflate(result, clamp_rate(config.inflation_rate))

    # Saturate runaway growth so every series stays finite
    for values in _monetary_series(result):
        values[:] = [_finite(v) for v in values]

    for t in range(length):
        result.net_worth[t] = _finite(
            result.total_asset_value[t] - result.total_liability_value[t]
        )
        result.net_cashflow[t] = _finite(
            result.total_income[t] - result.total_expenses[t]
        )

    return result


def _monetary_series(result: ProjectionResult) -> List[List[float]]:
    series = [
        result.total_asset_value,
        result.total_liability_value,
        result.total_income,
        result.total_expenses,
    ]
    series.extend(line.values for line in result.asset_class_breakdown.values())
    series.extend(line.values for line in result.holding_type_breakdown.values())
    return series


def _deflate(result: ProjectionResult, inflation_rate: float) -> None:
    """Restate every monetary series in start-date money."""
    if inflation_rate <= -1:
        return

    series = _monetary_series(result)
    for t in range(result.length):
        factor = max(
            _compound(inflation_rate, t / result.periods_per_year), sys.float_info.min
        )
        for values in series:
            values[t] = values[t] / factor


def generate_projections(
    assets: Sequence[AssetSnapshot],
    asset_classes: Optional[Mapping[str, AssetClassDefaults]] = None,
    holding_types: Optional[Mapping[str, str]] = None,
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """Convenience wrapper taking plain collections."""
    return generate_projection(
        ProjectionInput(
            assets=tuple(assets),
            config=config or ProjectionConfig(),
            asset_classes=tuple((asset_classes or {}).values()),
            holding_types=tuple((holding_types or {}).items()),
        )
    )
