"""
Entity Rollup

Aggregates freshly computed metrics for every property an ownership entity
holds. Cap rate is weighted by ARV and cash-on-cash by invested capital.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from propmetrics.calculations.models import CalculatedMetrics


@dataclass(frozen=True)
class RollupMember:
    """One property's contribution to an entity rollup."""

    property_id: str
    unit_count: int
    metrics: CalculatedMetrics


@dataclass(frozen=True)
class EntityRollup:
    entity_name: str
    property_count: int = 0
    total_units: int = 0
    total_aum: float = 0.0
    total_equity: float = 0.0
    total_invested_capital: float = 0.0
    total_annual_cash_flow: float = 0.0
    weighted_cap_rate: float = 0.0
    weighted_cash_on_cash: float = 0.0
    property_ids: Tuple[str, ...] = ()
    errors: Tuple = field(default_factory=tuple)


def _weighted_average(pairs: List[Tuple[float, float]]) -> float:
    """Average of (value, weight) pairs; 0 when the weights do not sum above 0."""
    total_weight = sum(weight for _, weight in pairs)
    if total_weight <= 0:
        return 0.0
    return sum(value * weight for value, weight in pairs) / total_weight


def aggregate_entity(
    entity_name: str,
    members: Sequence[RollupMember],
    errors: Sequence = (),
) -> EntityRollup:
    """
    Aggregate member metrics into an EntityRollup.

    Args:
        entity_name: Ownership entity name
        members: Properties that were recomputed successfully
        errors: BatchItemError records for properties that failed

    Returns:
        EntityRollup
    """
    metrics = [member.metrics for member in members]

    return EntityRollup(
        entity_name=entity_name,
        property_count=len(members),
        total_units=sum(member.unit_count for member in members),
        total_aum=sum(m.current_arv for m in metrics),
        total_equity=sum(m.current_equity for m in metrics),
        total_invested_capital=sum(m.total_invested_capital for m in metrics),
        total_annual_cash_flow=sum(m.annual_cash_flow for m in metrics),
        weighted_cap_rate=_weighted_average(
            [(m.cap_rate, m.current_arv) for m in metrics]
        ),
        weighted_cash_on_cash=_weighted_average(
            [(m.cash_on_cash_return, m.total_invested_capital) for m in metrics]
        ),
        property_ids=tuple(member.property_id for member in members),
        errors=tuple(errors),
    )
