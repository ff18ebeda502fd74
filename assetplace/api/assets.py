"""
Asset management API endpoints.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date
from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from assetplace.api.calculations import MAX_TERM_YEARS, ExpenseInput, rate_field
from assetplace.calculations import amortization, expenses
from assetplace.db.database import get_db
from assetplace.db.models import Asset, AssetClass, AssetHoldingType
from assetplace.services.snapshots import loan_terms, mortgage_terms

logger = logging.getLogger(__name__)

router = APIRouter()


class AssetBase(BaseModel):
    """Fields shared by create and response schemas."""

    description: Optional[str] = None
    holding_type_id: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    start_date: Optional[date] = None
    growth_rate: Optional[float] = rate_field()
    income_yield: Optional[float] = rate_field()
    is_hidden: bool = False
    is_liability: bool = False

    # Loan
    original_loan_amount: Optional[float] = None
    loan_interest_rate: Optional[float] = rate_field()
    loan_term_months: Optional[int] = Field(None, gt=0, le=MAX_TERM_YEARS * 12)
    loan_start_date: Optional[date] = None
    payoff_years: Optional[float] = None

    # Rental
    is_rental: bool = False
    rental_income: Optional[float] = None
    rental_frequency: Optional[str] = "monthly"
    vacancy_rate: Optional[float] = None

    # Mortgage
    has_mortgage: bool = False
    mortgage_amount: Optional[float] = None
    mortgage_interest_rate: Optional[float] = rate_field()
    mortgage_term_months: Optional[int] = Field(None, gt=0, le=MAX_TERM_YEARS * 12)
    mortgage_start_date: Optional[date] = None

    # Employment
    base_salary: Optional[float] = None
    salary_frequency: Optional[str] = "annually"
    bonus_fixed_amount: Optional[float] = None
    bonus_percentage: Optional[float] = None
    bonus_likelihood: Optional[float] = None


class AssetCreate(AssetBase):
    """Schema for creating an asset."""

    name: str
    asset_class_id: str
    value: float
    expenses: List[ExpenseInput] = []


class AssetUpdate(BaseModel):
    """Schema for updating an asset. Only provided fields change."""

    name: Optional[str] = None
    description: Optional[str] = None
    asset_class_id: Optional[str] = None
    holding_type_id: Optional[str] = None
    value: Optional[float] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    start_date: Optional[date] = None
    growth_rate: Optional[float] = rate_field()
    income_yield: Optional[float] = rate_field()
    is_hidden: Optional[bool] = None
    is_liability: Optional[bool] = None
    original_loan_amount: Optional[float] = None
    loan_interest_rate: Optional[float] = rate_field()
    loan_term_months: Optional[int] = Field(None, gt=0, le=MAX_TERM_YEARS * 12)
    loan_start_date: Optional[date] = None
    payoff_years: Optional[float] = None
    is_rental: Optional[bool] = None
    rental_income: Optional[float] = None
    rental_frequency: Optional[str] = None
    vacancy_rate: Optional[float] = None
    has_mortgage: Optional[bool] = None
    mortgage_amount: Optional[float] = None
    mortgage_interest_rate: Optional[float] = rate_field()
    mortgage_term_months: Optional[int] = Field(None, gt=0, le=MAX_TERM_YEARS * 12)
    mortgage_start_date: Optional[date] = None
    base_salary: Optional[float] = None
    salary_frequency: Optional[str] = None
    bonus_fixed_amount: Optional[float] = None
    bonus_percentage: Optional[float] = None
    bonus_likelihood: Optional[float] = None
    expenses: Optional[List[ExpenseInput]] = None


class AssetResponse(AssetBase):
    """Schema for asset response."""

    id: str
    name: str
    asset_class_id: str
    value: float
    # Stored rates and terms are returned without the input bounds
    growth_rate: Optional[float] = None
    income_yield: Optional[float] = None
    loan_interest_rate: Optional[float] = None
    loan_term_months: Optional[int] = None
    mortgage_interest_rate: Optional[float] = None
    mortgage_term_months: Optional[int] = None

    expenses: List[dict] = []
    annual_expenses: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AssetListResponse(BaseModel):
    """Response for listing assets."""

    assets: List[AssetResponse]
    total: int


def asset_to_response(asset: Asset) -> AssetResponse:
    """Convert Asset model to response schema."""
    parsed = expenses.parse_expenses(asset.expenses)
    fields = {
        name: getattr(asset, name)
        for name in AssetBase.model_fields
        if getattr(asset, name) is not None
    }
    return AssetResponse(
        id=asset.id,
        name=asset.name,
        asset_class_id=asset.asset_class_id,
        value=asset.value,
        expenses=[expenses.expense_to_dict(e) for e in parsed],
        annual_expenses=expenses.total_annual_expenses(parsed),
        created_at=asset.created_at.isoformat() if asset.created_at else None,
        updated_at=asset.updated_at.isoformat() if asset.updated_at else None,
        **fields,
    )


def _get_asset(db: Session, asset_id: str) -> Asset:
    asset = (
        db.query(Asset)
        .filter(Asset.id == asset_id, Asset.is_deleted == False)
        .first()
    )
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


def _check_references(
    db: Session, asset_class_id: Optional[str], holding_type_id: Optional[str]
) -> None:
    if asset_class_id is not None:
        exists = (
            db.query(AssetClass)
            .filter(AssetClass.id == asset_class_id, AssetClass.is_deleted == False)
            .first()
        )
        if not exists:
            raise HTTPException(status_code=400, detail="Asset class not found")
    if holding_type_id is not None:
        exists = (
            db.query(AssetHoldingType)
            .filter(
                AssetHoldingType.id == holding_type_id,
                AssetHoldingType.is_deleted == False,
            )
            .first()
        )
        if not exists:
            raise HTTPException(status_code=400, detail="Holding type not found")


def _stored_expenses(items: List[ExpenseInput]) -> List[dict]:
    return [expenses.expense_to_dict(item.to_expense(i)) for i, item in enumerate(items)]


@router.get("/", response_model=AssetListResponse)
async def list_assets(
    skip: int = 0,
    limit: int = 100,
    asset_class_id: Optional[str] = None,
    is_liability: Optional[bool] = None,
    include_hidden: bool = True,
    db: Session = Depends(get_db),
):
    """List assets with optional filtering."""
    query = db.query(Asset).filter(Asset.is_deleted == False)

    if asset_class_id:
        query = query.filter(Asset.asset_class_id == asset_class_id)
    if is_liability is not None:
        query = query.filter(Asset.is_liability == is_liability)
    if not include_hidden:
        query = query.filter(Asset.is_hidden == False)

    total = query.count()
    assets = query.order_by(Asset.name).offset(skip).limit(limit).all()

    return AssetListResponse(
        assets=[asset_to_response(a) for a in assets],
        total=total,
    )


@router.post("/", response_model=AssetResponse, status_code=201)
async def create_asset(
    asset_data: AssetCreate,
    db: Session = Depends(get_db),
):
    """Create a new asset."""
    _check_references(db, asset_data.asset_class_id, asset_data.holding_type_id)

    fields = asset_data.model_dump(exclude={"expenses"})
    asset = Asset(**fields, expenses=_stored_expenses(asset_data.expenses))

    db.add(asset)
    db.commit()
    db.refresh(asset)

    logger.info(f"Created asset {asset.name} ({asset.id})")
    return asset_to_response(asset)


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(asset_id: str, db: Session = Depends(get_db)):
    """Get an asset by ID."""
    return asset_to_response(_get_asset(db, asset_id))


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: str,
    asset_data: AssetUpdate,
    db: Session = Depends(get_db),
):
    """Update an asset."""
    asset = _get_asset(db, asset_id)

    update_data = asset_data.model_dump(exclude_unset=True, exclude={"expenses"})
    _check_references(
        db, update_data.get("asset_class_id"), update_data.get("holding_type_id")
    )

    for field, value in update_data.items():
        setattr(asset, field, value)

    if asset_data.expenses is not None:
        asset.expenses = _stored_expenses(asset_data.expenses)

    db.commit()
    db.refresh(asset)

    logger.info(f"Updated asset {asset.id}")
    return asset_to_response(asset)


@router.delete("/{asset_id}")
async def delete_asset(asset_id: str, db: Session = Depends(get_db)):
    """Soft delete an asset."""
    asset = _get_asset(db, asset_id)

    asset.is_deleted = True
    db.commit()

    logger.info(f"Deleted asset {asset_id}")
    return {"deleted": True, "id": asset_id}


@router.get("/{asset_id}/amortization")
async def get_asset_amortization(
    asset_id: str,
    as_of: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """Amortization schedule of a loan, or of the mortgage on a property."""
    asset = _get_asset(db, asset_id)

    if asset.is_liability:
        terms = loan_terms(asset)
        loan_start = asset.loan_start_date
    else:
        terms = mortgage_terms(asset)
        loan_start = asset.mortgage_start_date

    if terms is None:
        raise HTTPException(
            status_code=400,
            detail="Insufficient data to compute: loan amount, rate and term are required",
        )

    schedule = amortization.schedule_for(terms)
    summary = amortization.summarize_schedule(schedule)

    # First payment falls one month after the loan starts
    first_payment = None
    if loan_start is not None:
        first_payment = loan_start + relativedelta(months=1)

    current_balance = terms.principal
    if loan_start is not None:
        current_balance = amortization.balance_on(
            schedule, terms.principal, loan_start, as_of
        )

    return {
        "asset_id": asset.id,
        "principal": terms.principal,
        "annual_rate": terms.annual_rate,
        "term_months": terms.total_periods,
        "payment": round(summary["payment"], 2),
        "total_principal": round(summary["total_principal"], 2),
        "total_interest": round(summary["total_interest"], 2),
        "total_paid": round(summary["total_paid"], 2),
        "current_balance": round(current_balance, 2),
        "schedule": amortization.schedule_to_rows(schedule, first_payment),
    }


@router.get("/{asset_id}/expenses")
async def get_asset_expenses(asset_id: str, db: Session = Depends(get_db)):
    """Expense summary for an asset."""
    asset = _get_asset(db, asset_id)
    parsed = expenses.parse_expenses(asset.expenses)

    return {
        "asset_id": asset.id,
        "expenses": [expenses.expense_to_dict(e) for e in parsed],
        "annual_total": expenses.total_annual_expenses(parsed),
        "monthly_average": expenses.monthly_expense_average(parsed),
        "by_category": expenses.group_by_category(parsed),
        "expense_to_value_ratio": expenses.expense_to_value_ratio(parsed, asset.value),
    }
