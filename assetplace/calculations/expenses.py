"""
Recurring Expense Calculations

A single typed expense record, the frequency multipliers that annualise it,
and the summaries shown next to an asset (annual total, per-category split,
expense-to-value ratio).
"""

import enum
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from assetplace.calculations.utils import safe_float

logger = logging.getLogger(__name__)


class Frequency(str, enum.Enum):
    """How often a recurring amount is paid."""

    daily = "daily"
    weekly = "weekly"
    fortnightly = "fortnightly"
    monthly = "monthly"
    quarterly = "quarterly"
    semi_annual = "semi-annual"
    annually = "annually"


# Occurrences per year
FREQUENCY_MULTIPLIERS: Dict[str, int] = {
    Frequency.daily.value: 365,
    Frequency.weekly.value: 52,
    Frequency.fortnightly.value: 26,
    Frequency.monthly.value: 12,
    Frequency.quarterly.value: 4,
    Frequency.semi_annual.value: 2,
    Frequency.annually.value: 1,
}

UNCATEGORIZED = "uncategorized"


def frequency_multiplier(frequency: Any) -> int:
    """Occurrences per year; unrecognised frequencies count as monthly."""
    if isinstance(frequency, Frequency):
        frequency = frequency.value
    if isinstance(frequency, str):
        return FREQUENCY_MULTIPLIERS.get(frequency.strip().lower(), 12)
    return 12


def annualize(amount: Any, frequency: Any) -> float:
    """Convert an amount paid at ``frequency`` into a yearly total."""
    return safe_float(amount) * frequency_multiplier(frequency)


@dataclass(frozen=True)
class Expense:
    """A recurring expense attached to an asset."""

    category: str
    amount: float
    frequency: Frequency = Frequency.monthly
    name: str = ""
    id: str = ""
    notes: str = ""

    @property
    def annual_amount(self) -> float:
        return annual_amount(self)


def annual_amount(expense: Expense) -> float:
    """Annual total for a single expense."""
    return annualize(expense.amount, expense.frequency)


def per_period_amount(expense: Expense, periods_per_year: int) -> float:
    """Share of the annual total that falls in one projection period."""
    if periods_per_year <= 0:
        return 0.0
    return annual_amount(expense) / periods_per_year


def total_annual_expenses(expenses: Iterable[Expense]) -> float:
    return sum(annual_amount(expense) for expense in expenses)


def monthly_expense_average(expenses: Iterable[Expense]) -> float:
    """Average monthly outgoings across all frequencies."""
    return total_annual_expenses(expenses) / 12


def group_by_category(expenses: Iterable[Expense]) -> Dict[str, float]:
    """Annual totals keyed by category."""
    grouped: Dict[str, float] = {}
    for expense in expenses:
        grouped[expense.category] = grouped.get(expense.category, 0.0) + annual_amount(
            expense
        )
    return grouped


def expense_to_value_ratio(expenses: Iterable[Expense], asset_value: Any) -> float:
    """Annual expenses as a percentage of the asset's value."""
    value = safe_float(asset_value)
    if value == 0:
        return 0.0
    return total_annual_expenses(expenses) / value * 100


def _coerce_frequency(value: Any) -> Frequency:
    if isinstance(value, Frequency):
        return value
    if isinstance(value, str):
        try:
            return Frequency(value.strip().lower())
        except ValueError:
            pass
    return Frequency.monthly


def expense_id(
    category: str, name: str, amount: float, frequency: Frequency, position: int = 0
) -> str:
    """Stable id for an expense stored without one."""
    key = f"{category}|{name}|{amount!r}|{frequency.value}|{position}"
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"assetplace:expense:{key}"))


def standardize_expense(data: Any, position: int = 0) -> Expense:
    """
    Build an Expense from a loosely shaped mapping.

    Accepts the field spellings stored by older clients (``categoryId`` or
    ``category``, ``name`` or ``description``). Missing or non-numeric
    amounts become zero.

    Records without an id get one derived from their content and
    ``position`` in the list, so parsing the same data twice yields the
    same ids.
    """
    if isinstance(data, Expense):
        return data
    if not isinstance(data, Mapping):
        name = "Unknown Expense"
        return Expense(
            category=UNCATEGORIZED,
            amount=0.0,
            name=name,
            id=expense_id(UNCATEGORIZED, name, 0.0, Frequency.monthly, position),
        )

    category = str(data.get("category") or data.get("categoryId") or UNCATEGORIZED)
    amount = safe_float(data.get("amount"))
    frequency = _coerce_frequency(data.get("frequency"))
    name = str(data.get("name") or data.get("description") or "Untitled Expense")

    return Expense(
        category=category,
        amount=amount,
        frequency=frequency,
        name=name,
        id=str(data.get("id") or expense_id(category, name, amount, frequency, position)),
        notes=str(data.get("notes") or ""),
    )


def parse_expenses(data: Any) -> List[Expense]:
    """
    Parse stored expenses into Expense records.

    ``data`` may be a JSON string, a list of mappings, or a mapping of
    id -> mapping. Anything unreadable yields an empty list.
    """
    if not data:
        return []

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError as e:
            logger.warning(f"Could not parse expenses JSON: {str(e)}")
            return []

    if isinstance(data, Mapping):
        items = []
        for key, value in data.items():
            if isinstance(value, Mapping) and "id" not in value:
                value = {**value, "id": key}
            items.append(value)
    elif isinstance(data, (list, tuple)):
        items = list(data)
    else:
        logger.warning(f"Unsupported expenses payload type: {type(data).__name__}")
        return []

    return [
        standardize_expense(item, position)
        for position, item in enumerate(items)
        if isinstance(item, (Mapping, Expense))
    ]


def expense_to_dict(expense: Expense) -> Dict[str, Any]:
    """Storage form of an expense (JSON-safe)."""
    return {
        "id": expense.id,
        "category": expense.category,
        "name": expense.name,
        "amount": expense.amount,
        "frequency": expense.frequency.value,
        "notes": expense.notes,
    }
