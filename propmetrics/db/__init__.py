"""
Database configuration and models.
"""

from propmetrics.db.database import engine, SessionLocal, get_db
from propmetrics.db.models import Base

__all__ = ["engine", "SessionLocal", "get_db", "Base"]
