"""
Application services module.
"""

from assetplace.services.snapshots import (
    asset_snapshots,
    build_projection_input,
    load_projection_input,
)

__all__ = ["asset_snapshots", "build_projection_input", "load_projection_input"]
