"""
Asset class and holding type API endpoints.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from typing import Optional, List
from sqlalchemy.orm import Session

from assetplace.api.calculations import rate_field
from assetplace.db.database import get_db
from assetplace.db.models import AssetClass, AssetHoldingType

logger = logging.getLogger(__name__)

router = APIRouter()
holding_types_router = APIRouter()


class AssetClassCreate(BaseModel):
    """Schema for creating an asset class."""

    name: str
    description: Optional[str] = None
    is_liability: bool = False
    color: Optional[str] = None
    default_low_growth_rate: Optional[float] = rate_field()
    default_medium_growth_rate: Optional[float] = rate_field()
    default_high_growth_rate: Optional[float] = rate_field()
    default_income_yield: Optional[float] = rate_field()
    expense_categories: List[dict] = []


class AssetClassUpdate(BaseModel):
    """Schema for updating an asset class."""

    name: Optional[str] = None
    description: Optional[str] = None
    is_liability: Optional[bool] = None
    color: Optional[str] = None
    default_low_growth_rate: Optional[float] = rate_field()
    default_medium_growth_rate: Optional[float] = rate_field()
    default_high_growth_rate: Optional[float] = rate_field()
    default_income_yield: Optional[float] = rate_field()
    expense_categories: Optional[List[dict]] = None


class AssetClassResponse(BaseModel):
    """Schema for asset class response."""

    id: str
    name: str
    description: Optional[str]
    is_liability: bool
    color: Optional[str]
    default_low_growth_rate: Optional[float]
    default_medium_growth_rate: Optional[float]
    default_high_growth_rate: Optional[float]
    default_income_yield: Optional[float]
    expense_categories: List[dict] = []

    class Config:
        from_attributes = True


class HoldingTypeCreate(BaseModel):
    """Schema for creating a holding type."""

    name: str
    description: Optional[str] = None
    tax_settings: dict = {}


class HoldingTypeResponse(BaseModel):
    """Schema for holding type response."""

    id: str
    name: str
    description: Optional[str]
    tax_settings: Optional[dict] = None

    class Config:
        from_attributes = True


def _get_asset_class(db: Session, asset_class_id: str) -> AssetClass:
    asset_class = (
        db.query(AssetClass)
        .filter(AssetClass.id == asset_class_id, AssetClass.is_deleted == False)
        .first()
    )
    if not asset_class:
        raise HTTPException(status_code=404, detail="Asset class not found")
    return asset_class


@router.get("/", response_model=List[AssetClassResponse])
async def list_asset_classes(db: Session = Depends(get_db)):
    """List all asset classes."""
    return (
        db.query(AssetClass)
        .filter(AssetClass.is_deleted == False)
        .order_by(AssetClass.name)
        .all()
    )


@router.post("/", response_model=AssetClassResponse, status_code=201)
async def create_asset_class(
    asset_class_data: AssetClassCreate,
    db: Session = Depends(get_db),
):
    """Create a new asset class."""
    asset_class = AssetClass(**asset_class_data.model_dump())

    db.add(asset_class)
    db.commit()
    db.refresh(asset_class)

    logger.info(f"Created asset class {asset_class.name} ({asset_class.id})")
    return asset_class


@router.get("/{asset_class_id}", response_model=AssetClassResponse)
async def get_asset_class(asset_class_id: str, db: Session = Depends(get_db)):
    """Get an asset class by ID."""
    return _get_asset_class(db, asset_class_id)


@router.put("/{asset_class_id}", response_model=AssetClassResponse)
async def update_asset_class(
    asset_class_id: str,
    asset_class_data: AssetClassUpdate,
    db: Session = Depends(get_db),
):
    """Update an asset class."""
    asset_class = _get_asset_class(db, asset_class_id)

    # Update only provided fields
    update_data = asset_class_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(asset_class, field, value)

    db.commit()
    db.refresh(asset_class)

    logger.info(f"Updated asset class {asset_class.id}: {sorted(update_data)}")
    return asset_class


@router.delete("/{asset_class_id}")
async def delete_asset_class(asset_class_id: str, db: Session = Depends(get_db)):
    """Soft delete an asset class that no longer has assets."""
    asset_class = _get_asset_class(db, asset_class_id)

    if asset_class.assets.filter_by(is_deleted=False).count() > 0:
        raise HTTPException(
            status_code=400, detail="Asset class still has assets assigned"
        )

    asset_class.is_deleted = True
    db.commit()

    logger.info(f"Deleted asset class {asset_class_id}")
    return {"deleted": True, "id": asset_class_id}


@holding_types_router.get("/", response_model=List[HoldingTypeResponse])
async def list_holding_types(db: Session = Depends(get_db)):
    """List all holding types."""
    return (
        db.query(AssetHoldingType)
        .filter(AssetHoldingType.is_deleted == False)
        .order_by(AssetHoldingType.name)
        .all()
    )


@holding_types_router.post("/", response_model=HoldingTypeResponse, status_code=201)
async def create_holding_type(
    holding_type_data: HoldingTypeCreate,
    db: Session = Depends(get_db),
):
    """Create a new holding type."""
    holding_type = AssetHoldingType(**holding_type_data.model_dump())

    db.add(holding_type)
    db.commit()
    db.refresh(holding_type)

    logger.info(f"Created holding type {holding_type.name} ({holding_type.id})")
    return holding_type
