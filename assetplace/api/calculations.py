"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results without touching
the database. The loan and projection screens call them on every form edit.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date

from assetplace.calculations import amortization, expenses, projection, timevalue
from assetplace.calculations.expenses import Expense, Frequency
from assetplace.calculations.projection import (
    MAX_ANNUAL_RATE,
    MIN_ANNUAL_RATE,
    AssetClassDefaults,
    AssetSnapshot,
    Granularity,
    GrowthScenario,
    ProjectionConfig,
    ProjectionInput,
)
from assetplace.config import get_settings

router = APIRouter()

# Longest loan the schedule endpoints will build
MAX_TERM_YEARS = 100
MAX_PAYMENTS_PER_YEAR = 365


def rate_field(default=None):
    return Field(default, ge=MIN_ANNUAL_RATE, le=MAX_ANNUAL_RATE)


class ExpenseInput(BaseModel):
    """A recurring expense."""

    id: Optional[str] = None
    category: str = expenses.UNCATEGORIZED
    name: str = ""
    amount: float = 0.0
    frequency: Frequency = Frequency.monthly
    notes: str = ""

    def to_expense(self, position: int = 0) -> Expense:
        return expenses.standardize_expense(self.model_dump(mode="json"), position)


class LoanInput(BaseModel):
    """Loan terms attached to a liability."""

    principal: float
    annual_rate: float = rate_field(...)
    term_months: int = Field(..., gt=0, le=MAX_TERM_YEARS * 12)
    payments_per_year: int = Field(12, gt=0, le=MAX_PAYMENTS_PER_YEAR)
    start_date: Optional[date] = None

    def to_terms(self) -> amortization.LoanTerms:
        return amortization.LoanTerms(
            principal=self.principal,
            annual_rate=self.annual_rate,
            term_years=self.term_months / 12,
            payments_per_year=self.payments_per_year,
        )


class AssetInput(BaseModel):
    """An asset or liability supplied inline."""

    id: Optional[str] = None
    name: str = ""
    asset_class_id: Optional[str] = None
    holding_type_id: Optional[str] = None
    value: float = 0.0
    growth_rate: Optional[float] = rate_field()
    income_yield: Optional[float] = rate_field()
    annual_income: Optional[float] = None
    is_liability: bool = False
    is_hidden: bool = False
    start_date: Optional[date] = None
    loan: Optional[LoanInput] = None
    payoff_years: Optional[float] = None
    expenses: List[ExpenseInput] = []

    def to_snapshot(self) -> AssetSnapshot:
        return AssetSnapshot(
            id=self.id,
            name=self.name,
            asset_class_id=self.asset_class_id,
            holding_type_id=self.holding_type_id,
            value=self.value,
            growth_rate=self.growth_rate,
            income_yield=self.income_yield,
            annual_income=self.annual_income,
            is_liability=self.is_liability,
            is_hidden=self.is_hidden,
            start_date=self.start_date,
            loan=self.loan.to_terms() if self.loan else None,
            loan_start_date=self.loan.start_date if self.loan else None,
            payoff_years=self.payoff_years,
            expenses=tuple(e.to_expense(i) for i, e in enumerate(self.expenses)),
        )


class AssetClassInput(BaseModel):
    """Asset class defaults supplied inline."""

    id: str
    name: str
    low_growth_rate: Optional[float] = rate_field()
    medium_growth_rate: Optional[float] = rate_field()
    high_growth_rate: Optional[float] = rate_field()
    income_yield: Optional[float] = rate_field()

    def to_defaults(self) -> AssetClassDefaults:
        return AssetClassDefaults(**self.model_dump())


class ProjectionOptions(BaseModel):
    """Projection settings chosen on the projections screen."""

    years: Optional[int] = Field(None, ge=0)
    period: Optional[str] = None  # "5-years", "retirement", ...
    current_age: Optional[int] = None
    retirement_age: Optional[int] = None
    granularity: Granularity = Granularity.auto
    start_date: Optional[date] = None
    growth_scenario: GrowthScenario = GrowthScenario.medium
    inflation_rate: Optional[float] = rate_field()
    inflation_adjusted: bool = False
    include_income: bool = True
    include_expenses: bool = True
    include_loan_payments: bool = True
    reinvest_income: bool = False
    include_hidden_assets: bool = False
    exclude_liabilities: bool = False
    enabled_asset_classes: List[str] = []
    enabled_holding_types: List[str] = []

    def to_config(
        self,
        default_years: int,
        default_inflation_rate: float,
        max_years: int,
    ) -> ProjectionConfig:
        """
        Resolve the options into an engine config.

        Raises:
            HTTPException: 400 if the horizon exceeds ``max_years``
        """
        if self.years is not None:
            years = self.years
        elif self.period:
            years = projection.map_period_to_years(
                self.period, self.retirement_age, self.current_age
            )
        else:
            years = default_years

        if years > max_years:
            raise HTTPException(
                status_code=400,
                detail=f"Projection horizon is limited to {max_years} years",
            )

        return ProjectionConfig(
            years=years,
            granularity=self.granularity,
            start_date=self.start_date,
            growth_scenario=self.growth_scenario,
            inflation_rate=(
                self.inflation_rate
                if self.inflation_rate is not None
                else default_inflation_rate
            ),
            inflation_adjusted=self.inflation_adjusted,
            include_income=self.include_income,
            include_expenses=self.include_expenses,
            include_loan_payments=self.include_loan_payments,
            reinvest_income=self.reinvest_income,
            include_hidden_assets=self.include_hidden_assets,
            exclude_liabilities=self.exclude_liabilities,
            enabled_asset_classes=tuple(self.enabled_asset_classes),
            enabled_holding_types=tuple(self.enabled_holding_types),
        )


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float = rate_field(...)
    term_years: Optional[float] = Field(None, gt=0, le=MAX_TERM_YEARS)
    term_months: Optional[int] = Field(None, gt=0, le=MAX_TERM_YEARS * 12)
    payments_per_year: int = Field(12, gt=0, le=MAX_PAYMENTS_PER_YEAR)
    first_payment_date: Optional[date] = None
    elapsed_periods: Optional[int] = None


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    if inputs.term_years is not None:
        term_years = inputs.term_years
    elif inputs.term_months is not None:
        term_years = inputs.term_months / 12
    else:
        raise HTTPException(status_code=400, detail="Loan term is required")

    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        term_years=term_years,
        payments_per_year=inputs.payments_per_year,
    )

    if not schedule:
        raise HTTPException(
            status_code=400,
            detail="Insufficient data to compute: loan amount, rate and term must be positive",
        )

    summary = amortization.summarize_schedule(schedule)
    response = {
        "schedule": amortization.schedule_to_rows(
            schedule, inputs.first_payment_date, inputs.payments_per_year
        ),
        "payment": round(summary["payment"], 2),
        "number_of_payments": summary["number_of_payments"],
        "total_principal": round(summary["total_principal"], 2),
        "total_interest": round(summary["total_interest"], 2),
        "total_paid": round(summary["total_paid"], 2),
    }

    if inputs.elapsed_periods is not None:
        response["current_balance"] = round(
            amortization.balance_at(schedule, inputs.principal, inputs.elapsed_periods),
            2,
        )

    return response


class ProjectionRequest(BaseModel):
    """Input for an inline projection."""

    assets: List[AssetInput] = []
    asset_classes: List[AssetClassInput] = []
    holding_types: Dict[str, str] = {}
    options: ProjectionOptions = ProjectionOptions()


@router.post("/projection")
async def calculate_projection(inputs: ProjectionRequest):
    """Project an inline asset snapshot."""
    settings = get_settings()
    config = inputs.options.to_config(
        default_years=settings.default_basic_mode_years,
        default_inflation_rate=0.0,
        max_years=settings.max_projection_years,
    )

    result = projection.generate_projection(
        ProjectionInput(
            assets=tuple(a.to_snapshot() for a in inputs.assets),
            config=config,
            asset_classes=tuple(c.to_defaults() for c in inputs.asset_classes),
            holding_types=tuple(inputs.holding_types.items()),
        )
    )

    return result.to_dict()


class ExpenseSummaryInput(BaseModel):
    """Input for expense summary calculation."""

    expenses: List[ExpenseInput] = []
    asset_value: float = 0.0


@router.post("/expenses")
async def calculate_expense_summary(inputs: ExpenseSummaryInput):
    """Annualise a list of expenses."""
    items = [e.to_expense(i) for i, e in enumerate(inputs.expenses)]

    return {
        "count": len(items),
        "annual_total": expenses.total_annual_expenses(items),
        "monthly_average": expenses.monthly_expense_average(items),
        "by_category": expenses.group_by_category(items),
        "expense_to_value_ratio": expenses.expense_to_value_ratio(
            items, inputs.asset_value
        ),
    }


class FutureValueInput(BaseModel):
    """Input for time value calculation."""

    present_value: float
    rate: float
    years: float
    compounding_per_year: int = Field(1, gt=0, le=MAX_PAYMENTS_PER_YEAR)
    inflation_rate: Optional[float] = None


@router.post("/future-value")
async def calculate_future_value(inputs: FutureValueInput):
    """Future value of a lump sum, optionally restated in today's money."""
    try:
        future_value = timevalue.calculate_future_value(
            inputs.present_value, inputs.rate, inputs.years, inputs.compounding_per_year
        )
        response = {"future_value": future_value}

        if inputs.inflation_rate is not None:
            response["real_value"] = timevalue.calculate_inflation_adjusted_value(
                future_value, inputs.inflation_rate, inputs.years
            )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return response


class CAGRInput(BaseModel):
    """Input for CAGR calculation."""

    initial_value: float
    final_value: float
    years: float


@router.post("/cagr")
async def calculate_cagr_endpoint(inputs: CAGRInput):
    """Compound annual growth rate between two values."""
    try:
        cagr = timevalue.calculate_cagr(
            inputs.initial_value, inputs.final_value, inputs.years
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"cagr": cagr}


class RequiredSavingsInput(BaseModel):
    """Input for savings goal calculation."""

    future_goal: float
    current_savings: float = 0.0
    years_to_goal: float
    expected_return: float
    contributions_per_year: int = Field(12, gt=0, le=MAX_PAYMENTS_PER_YEAR)


@router.post("/required-savings")
async def calculate_required_savings_endpoint(inputs: RequiredSavingsInput):
    """Periodic contribution needed to reach a savings goal."""
    try:
        contribution = timevalue.calculate_required_savings(
            inputs.future_goal,
            inputs.current_savings,
            inputs.years_to_goal,
            inputs.expected_return,
            inputs.contributions_per_year,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "contribution": contribution,
        "contributions_per_year": inputs.contributions_per_year,
    }
