"""
Income Annualisation

Rental and employment income entered at the cadence the user is paid,
converted to yearly figures for projections.
"""

from typing import Any, Optional

from assetplace.calculations.expenses import annualize
from assetplace.calculations.utils import non_negative, safe_float


def rental_annual_income(
    rent: Any, frequency: Any = "monthly", vacancy_rate: Any = 0.0
) -> float:
    """
    Annual rent after vacancy.

    Args:
        rent: Rent received per ``frequency``
        frequency: weekly, fortnightly, monthly, ...
        vacancy_rate: Share of the year the property sits empty (decimal)
    """
    annual = annualize(non_negative(rent), frequency)
    vacancy = min(max(safe_float(vacancy_rate), 0.0), 1.0)
    return annual * (1 - vacancy)


def employment_annual_income(
    base_salary: Any,
    frequency: Any = "annually",
    bonus_fixed: Optional[float] = None,
    bonus_percent: Optional[float] = None,
    bonus_likelihood: Optional[float] = None,
) -> float:
    """
    Annual salary plus expected bonus.

    ``bonus_percent`` and ``bonus_likelihood`` are decimals; a bonus with a
    likelihood below 1 is weighted by that likelihood.
    """
    salary = annualize(non_negative(base_salary), frequency)
    if salary == 0:
        return 0.0

    bonus = non_negative(bonus_fixed) + salary * non_negative(bonus_percent)

    likelihood = safe_float(bonus_likelihood, default=1.0)
    if bonus > 0 and 0 <= likelihood < 1:
        bonus *= likelihood

    return salary + bonus
