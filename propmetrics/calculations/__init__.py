"""
Property Metrics Calculation Engine

Pure calculation modules: the fact gatherer resolves raw sources into
PropertyFinancialFacts, and the engine turns facts into CalculatedMetrics.
Nothing in this package touches storage.
"""

from propmetrics.calculations.engine import calculate_metrics
from propmetrics.calculations.gatherer import gather_facts
from propmetrics.calculations.models import CalculatedMetrics, PropertyFinancialFacts
from propmetrics.calculations.rollup import EntityRollup, aggregate_entity

__all__ = [
    "calculate_metrics",
    "gather_facts",
    "CalculatedMetrics",
    "PropertyFinancialFacts",
    "EntityRollup",
    "aggregate_entity",
]
