"""
Projection API endpoints over the stored asset snapshot.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional
from sqlalchemy.orm import Session

from assetplace.api.calculations import ProjectionOptions
from assetplace.api.settings import get_system_settings
from assetplace.calculations.projection import generate_projection
from assetplace.db.database import get_db
from assetplace.services.snapshots import load_projection_input

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate")
async def generate_projections(
    options: Optional[ProjectionOptions] = None,
    db: Session = Depends(get_db),
):
    """Project every stored asset and liability."""
    if options is None:
        options = ProjectionOptions()

    system = get_system_settings(db)
    config = options.to_config(
        default_years=system.default_basic_mode_years,
        default_inflation_rate=system.default_inflation_rate,
        max_years=system.max_projection_years,
    )

    projection_input = load_projection_input(db, config)
    if not projection_input.assets:
        raise HTTPException(status_code=404, detail="No assets found")

    result = generate_projection(projection_input)
    logger.info(
        f"Generated {config.years}-year projection for "
        f"{len(projection_input.assets)} assets"
    )

    return result.to_dict()


@router.get("/config")
async def get_projection_config(
    mode: str = "basic",
    db: Session = Depends(get_db),
):
    """Default projection options for the basic or advanced interface."""
    if mode not in ("basic", "advanced"):
        raise HTTPException(status_code=400, detail="Mode must be basic or advanced")

    system = get_system_settings(db)
    if mode == "advanced":
        years, period = system.default_advanced_mode_years, "30-years"
    else:
        years, period = system.default_basic_mode_years, "10-years"

    options = ProjectionOptions(
        years=years,
        period=period,
        inflation_rate=system.default_inflation_rate,
    )

    return {
        "mode": mode,
        "max_projection_years": system.max_projection_years,
        **options.model_dump(mode="json"),
    }
