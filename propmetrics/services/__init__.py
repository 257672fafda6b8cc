"""
Application services module.
"""

from propmetrics.services.recompute import MetricsOrchestrator

__all__ = ["MetricsOrchestrator"]
