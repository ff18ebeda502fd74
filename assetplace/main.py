"""
Main FastAPI application entry point.
"""

from fastapi import FastAPI

from assetplace.config import get_settings
from assetplace.api import router as api_router
from assetplace.db.database import init_db
from assetplace.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Personal wealth tracking and net worth projections",
    version="0.1.0",
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.on_event("startup")
def on_startup():
    """Create tables on first run."""
    init_db()


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}
