"""
FastAPI dependencies for the metrics routes.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from propmetrics.config import get_settings
from propmetrics.db.database import get_db
from propmetrics.db.repository import SqlAlchemyPropertyRepository
from propmetrics.services.recompute import MetricsOrchestrator


def get_orchestrator(db: Session = Depends(get_db)) -> MetricsOrchestrator:
    """Orchestrator bound to the request's database session."""
    return MetricsOrchestrator(SqlAlchemyPropertyRepository(db), get_settings())
