"""
Time Value of Money

Compounding and discounting helpers used by the savings and goal screens.

Inputs outside a formula's domain raise ValueError.
"""

from assetplace.calculations.utils import safe_float


def _growth_factor(rate: float, periods: float) -> float:
    """
    (1 + rate) ** periods.

    Raises:
        ValueError: If the rate is below -100% or the result overflows
    """
    base = 1 + rate
    if base < 0:
        raise ValueError("Rate cannot be below -100% per period")
    if base == 0 and periods < 0:
        raise ValueError("Rate of -100% cannot be discounted")
    try:
        return base ** periods
    except OverflowError:
        raise ValueError("Result is too large to represent")


def calculate_future_value(
    present_value: float,
    rate: float,
    years: float,
    compounding_per_year: int = 1,
) -> float:
    """
    Future value of a lump sum: FV = PV * (1 + r/m)^(n*m).

    Args:
        present_value: Initial amount
        rate: Annual rate as decimal
        years: Number of years
        compounding_per_year: Compounding periods per year

    Raises:
        ValueError: If r/m is below -100% or the result overflows
    """
    m = compounding_per_year if compounding_per_year > 0 else 1
    return safe_float(present_value) * _growth_factor(
        safe_float(rate) / m, safe_float(years) * m
    )


def calculate_present_value(
    future_value: float,
    rate: float,
    years: float,
    compounding_per_year: int = 1,
) -> float:
    """Present value of a future amount: PV = FV / (1 + r/m)^(n*m)."""
    m = compounding_per_year if compounding_per_year > 0 else 1
    factor = _growth_factor(safe_float(rate) / m, safe_float(years) * m)
    if factor == 0:
        raise ValueError("Rate of -100% cannot be discounted")
    return safe_float(future_value) / factor


def calculate_cagr(initial_value: float, final_value: float, years: float) -> float:
    """
    Compound annual growth rate.

    Raises:
        ValueError: If initial value or years is not positive, or the final
            value is negative
    """
    if initial_value <= 0 or years <= 0:
        raise ValueError("Initial value and years must be positive numbers")
    if final_value < 0:
        raise ValueError("Final value cannot be negative")
    return _growth_factor(final_value / initial_value - 1, 1 / years) - 1


def calculate_inflation_adjusted_value(
    present_value: float, inflation_rate: float, years: float
) -> float:
    """Express a future nominal amount in today's money."""
    factor = _growth_factor(safe_float(inflation_rate), safe_float(years))
    if factor == 0:
        raise ValueError("Inflation of -100% cannot be discounted")
    return safe_float(present_value) / factor


def calculate_required_savings(
    future_goal: float,
    current_savings: float,
    years_to_goal: float,
    expected_return: float,
    contributions_per_year: int = 12,
) -> float:
    """
    Periodic contribution needed to reach ``future_goal``.

    Returns 0 when current savings already grow past the goal.
    """
    periods = safe_float(years_to_goal) * contributions_per_year
    if periods <= 0:
        return 0.0

    if expected_return == 0:
        return max(0.0, (future_goal - current_savings) / periods)

    periodic_rate = expected_return / contributions_per_year
    grown_savings = calculate_future_value(
        current_savings, expected_return, years_to_goal, contributions_per_year
    )
    shortfall = future_goal - grown_savings
    if shortfall <= 0:
        return 0.0

    annuity_factor = (_growth_factor(periodic_rate, periods) - 1) / periodic_rate
    return shortfall / annuity_factor
