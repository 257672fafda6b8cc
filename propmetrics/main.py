"""
Main FastAPI application entry point.
"""

import logging

from fastapi import FastAPI

from propmetrics import __version__
from propmetrics.config import get_settings
from propmetrics.api import router as api_router

settings = get_settings()


def configure_logging(level: str = settings.log_level):
    """Configure root logging for the app and scripts."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Property financial metrics engine and portfolio rollups",
    version=__version__,
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}
