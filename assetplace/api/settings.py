"""
System settings API endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import Optional
from sqlalchemy.orm import Session

from assetplace.config import get_settings
from assetplace.db.database import get_db
from assetplace.db.models import SystemSettings

logger = logging.getLogger(__name__)

router = APIRouter()


class SystemSettingsUpdate(BaseModel):
    """Schema for updating system settings."""

    default_currency: Optional[str] = None
    default_basic_mode_years: Optional[int] = Field(None, ge=1)
    default_advanced_mode_years: Optional[int] = Field(None, ge=1)
    default_inflation_rate: Optional[float] = None
    max_projection_years: Optional[int] = Field(None, ge=1)


class SystemSettingsResponse(BaseModel):
    """Effective settings: stored values with application defaults filled in."""

    default_currency: str
    default_basic_mode_years: int
    default_advanced_mode_years: int
    default_inflation_rate: float
    max_projection_years: int


def get_system_settings(db: Session) -> SystemSettingsResponse:
    """Stored system settings, falling back to the application config."""
    settings = get_settings()
    row = db.query(SystemSettings).filter(SystemSettings.id == 1).first()

    def pick(field: str):
        stored = getattr(row, field) if row else None
        return stored if stored is not None else getattr(settings, field)

    return SystemSettingsResponse(
        default_currency=pick("default_currency"),
        default_basic_mode_years=pick("default_basic_mode_years"),
        default_advanced_mode_years=pick("default_advanced_mode_years"),
        default_inflation_rate=pick("default_inflation_rate"),
        max_projection_years=pick("max_projection_years"),
    )


@router.get("/", response_model=SystemSettingsResponse)
async def read_system_settings(db: Session = Depends(get_db)):
    """Get the effective system settings."""
    return get_system_settings(db)


@router.put("/", response_model=SystemSettingsResponse)
async def update_system_settings(
    settings_data: SystemSettingsUpdate,
    db: Session = Depends(get_db),
):
    """Update system settings (creates the settings row on first use)."""
    row = db.query(SystemSettings).filter(SystemSettings.id == 1).first()
    if row is None:
        row = SystemSettings(id=1)
        db.add(row)

    update_data = settings_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(row, field, value)

    db.commit()

    logger.info(f"Updated system settings: {sorted(update_data)}")
    return get_system_settings(db)
