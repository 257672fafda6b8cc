"""
API routes for the metrics engine.
"""

from fastapi import APIRouter

from propmetrics.api import properties, entities

router = APIRouter()

# Include sub-routers
router.include_router(properties.router, prefix="/properties", tags=["properties"])
router.include_router(entities.router, prefix="/entities", tags=["entities"])
