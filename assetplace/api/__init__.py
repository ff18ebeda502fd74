"""
API routes for the asset planner.
"""

from fastapi import APIRouter

from assetplace.api import asset_classes, assets, calculations, projections, settings

router = APIRouter()

# Include sub-routers
router.include_router(assets.router, prefix="/assets", tags=["assets"])
router.include_router(asset_classes.router, prefix="/asset-classes", tags=["asset-classes"])
router.include_router(
    asset_classes.holding_types_router, prefix="/holding-types", tags=["holding-types"]
)
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(projections.router, prefix="/projections", tags=["projections"])
router.include_router(settings.router, prefix="/system-settings", tags=["settings"])
