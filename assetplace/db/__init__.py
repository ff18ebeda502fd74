"""
Database configuration and models.
"""

from assetplace.db.database import engine, SessionLocal, get_db, init_db
from assetplace.db.models import Base

__all__ = ["engine", "SessionLocal", "get_db", "init_db", "Base"]
