"""
Loan Amortization Calculations

Turns loan terms into a period-by-period payment schedule and answers the
questions the loan screens ask of it (balance today, totals paid).

The schedule is kept in full precision; rounding to cents only happens in
``schedule_to_rows`` when the schedule is formatted for display.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from assetplace.calculations.utils import safe_float

logger = logging.getLogger(__name__)

DEFAULT_PAYMENTS_PER_YEAR = 12


@dataclass(frozen=True)
class LoanTerms:
    """Immutable input to schedule generation."""

    principal: float
    annual_rate: float  # decimal, e.g. 0.065
    term_years: float
    payments_per_year: int = DEFAULT_PAYMENTS_PER_YEAR

    @classmethod
    def from_months(
        cls, principal: float, annual_rate: float, term_months: int
    ) -> "LoanTerms":
        """Build monthly terms from a term stored in months."""
        return cls(
            principal=safe_float(principal),
            annual_rate=safe_float(annual_rate),
            term_years=safe_float(term_months) / 12,
            payments_per_year=DEFAULT_PAYMENTS_PER_YEAR,
        )

    @property
    def total_periods(self) -> int:
        return _total_periods(self.term_years, self.payments_per_year)

    @property
    def periodic_rate(self) -> float:
        ppy = safe_float(self.payments_per_year)
        return safe_float(self.annual_rate) / ppy if ppy > 0 else 0.0


@dataclass(frozen=True)
class AmortizationEntry:
    """One row of an amortization schedule."""

    period: int
    payment: float
    principal: float
    interest: float
    balance: float


def _total_periods(term_years: float, payments_per_year: float) -> int:
    return int(round(safe_float(term_years) * safe_float(payments_per_year)))


def calculate_payment(
    principal: float,
    annual_rate: float,
    term_years: float,
    payments_per_year: int = DEFAULT_PAYMENTS_PER_YEAR,
) -> float:
    """
    Calculate the fixed periodic payment of a fully amortizing loan.

    Matches Excel's PMT() function (as a positive number).

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal (e.g., 0.05 for 5%)
        term_years: Loan term in years
        payments_per_year: Number of payments per year (default 12)

    Returns:
        Periodic payment, or 0.0 when the inputs cannot describe a loan
    """
    principal = safe_float(principal)
    rate = safe_float(annual_rate)
    ppy = safe_float(payments_per_year)
    periods = _total_periods(term_years, ppy)

    if principal <= 0 or rate < 0 or ppy <= 0 or periods <= 0:
        return 0.0

    periodic_rate = rate / ppy
    if periodic_rate == 0:
        return principal / periods

    return principal * periodic_rate / (1 - (1 + periodic_rate) ** -periods)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    term_years: float,
    payments_per_year: int = DEFAULT_PAYMENTS_PER_YEAR,
) -> List[AmortizationEntry]:
    """
    Generate a full amortization schedule.

    Callers are expected to guard against non-positive inputs; if they
    do not, the schedule is simply empty.

    Args:
        principal: Loan principal amount (> 0)
        annual_rate: Annual interest rate as decimal (>= 0)
        term_years: Loan term in years (> 0)
        payments_per_year: Number of payments per year (> 0)

    Returns:
        One entry per period, in increasing period order
    """
    principal = safe_float(principal)
    rate = safe_float(annual_rate)
    ppy = safe_float(payments_per_year)
    periods = _total_periods(term_years, ppy)

    if principal <= 0 or rate < 0 or ppy <= 0 or periods <= 0:
        logger.debug(
            f"Empty schedule for principal={principal}, rate={rate}, "
            f"term_years={term_years}, payments_per_year={payments_per_year}"
        )
        return []

    periodic_rate = rate / ppy
    payment = calculate_payment(principal, rate, term_years, ppy)

    schedule = []
    balance = principal

    for period in range(1, periods + 1):
        interest = balance * periodic_rate
        principal_pmt = payment - interest
        balance -= principal_pmt

        # Absorb floating-point drift on the last payment
        if period == periods:
            balance = 0.0

        schedule.append(
            AmortizationEntry(
                period=period,
                payment=payment,
                principal=principal_pmt,
                interest=interest,
                balance=balance,
            )
        )

    return schedule


@lru_cache(maxsize=256)
def schedule_for(terms: LoanTerms) -> Tuple[AmortizationEntry, ...]:
    """Cached schedule for a set of loan terms."""
    return tuple(
        generate_amortization_schedule(
            terms.principal,
            terms.annual_rate,
            terms.term_years,
            terms.payments_per_year,
        )
    )


def calculate_remaining_balance(
    principal: float,
    annual_rate: float,
    term_years: float,
    payments_completed: int,
    payments_per_year: int = DEFAULT_PAYMENTS_PER_YEAR,
) -> float:
    """Calculate remaining loan balance after N payments (closed form)."""
    principal = safe_float(principal)
    ppy = safe_float(payments_per_year)
    periods = _total_periods(term_years, ppy)
    payment = calculate_payment(principal, annual_rate, term_years, ppy)

    if payment == 0:
        return max(0.0, principal)

    completed = min(max(int(payments_completed), 0), periods)
    periodic_rate = safe_float(annual_rate) / ppy

    if periodic_rate == 0:
        return max(0.0, principal - payment * completed)

    growth = (1 + periodic_rate) ** completed
    balance = principal * growth - payment * ((growth - 1) / periodic_rate)

    return max(0.0, balance)


def balance_at(
    schedule: Sequence[AmortizationEntry], principal: float, elapsed_periods: int
) -> float:
    """
    Balance after ``elapsed_periods`` payments.

    The offset is clamped to ``[0, len(schedule)]``: before the first
    payment the balance is the principal, after the last it is zero.
    """
    if not schedule:
        return max(0.0, safe_float(principal))

    elapsed = min(max(int(elapsed_periods), 0), len(schedule))
    if elapsed == 0:
        return max(0.0, safe_float(principal))
    return schedule[elapsed - 1].balance


def months_elapsed(start_date: date, as_of: date) -> int:
    """Whole months from ``start_date`` to ``as_of`` (negative if before)."""
    delta = relativedelta(as_of, start_date)
    return delta.years * 12 + delta.months


def balance_on(
    schedule: Sequence[AmortizationEntry],
    principal: float,
    start_date: date,
    as_of: Optional[date] = None,
) -> float:
    """Balance of a monthly schedule on a calendar date."""
    if as_of is None:
        as_of = date.today()
    return balance_at(schedule, principal, months_elapsed(start_date, as_of))


def total_principal_paid(schedule: Sequence[AmortizationEntry]) -> float:
    """Sum of the principal column."""
    return sum(entry.principal for entry in schedule)


def total_interest_paid(schedule: Sequence[AmortizationEntry]) -> float:
    """Sum of the interest column."""
    return sum(entry.interest for entry in schedule)


def summarize_schedule(schedule: Sequence[AmortizationEntry]) -> Dict[str, float]:
    """Headline numbers for a schedule."""
    principal = total_principal_paid(schedule)
    interest = total_interest_paid(schedule)
    return {
        "payment": schedule[0].payment if schedule else 0.0,
        "number_of_payments": len(schedule),
        "total_principal": principal,
        "total_interest": interest,
        "total_paid": principal + interest,
    }


def _payment_date(
    first_payment: date, period: int, payments_per_year: int
) -> date:
    payments_per_year = int(payments_per_year)
    if payments_per_year > 0 and 12 % payments_per_year == 0:
        return first_payment + relativedelta(
            months=(period - 1) * (12 // payments_per_year)
        )
    return first_payment + timedelta(days=round((period - 1) * 365 / payments_per_year))


def schedule_to_rows(
    schedule: Sequence[AmortizationEntry],
    first_payment_date: Optional[date] = None,
    payments_per_year: int = DEFAULT_PAYMENTS_PER_YEAR,
) -> List[Dict]:
    """
    Format a schedule for display.

    Args:
        schedule: Entries from ``generate_amortization_schedule``
        first_payment_date: Date of the first payment; rows carry no date if omitted
        payments_per_year: Spacing of payment dates

    Returns:
        List of dicts with values rounded to cents
    """
    rows = []
    for entry in schedule:
        row = {
            "period": entry.period,
            "payment": round(entry.payment, 2),
            "principal": round(entry.principal, 2),
            "interest": round(entry.interest, 2),
            "balance": round(entry.balance, 2),
        }
        if first_payment_date is not None:
            row["date"] = _payment_date(
                first_payment_date, entry.period, payments_per_year
            ).isoformat()
        rows.append(row)
    return rows
