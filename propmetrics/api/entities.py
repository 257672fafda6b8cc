"""
Entity rollup API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from propmetrics.api.dependencies import get_orchestrator
from propmetrics.api.properties import BatchItemErrorResponse
from propmetrics.services.recompute import MetricsOrchestrator

router = APIRouter()


class EntityRollupResponse(BaseModel):
    """Portfolio totals for one ownership entity."""

    entity_name: str
    property_count: int
    total_units: int
    total_aum: float
    total_equity: float
    total_invested_capital: float
    total_annual_cash_flow: float
    weighted_cap_rate: float
    weighted_cash_on_cash: float
    property_ids: List[str]
    errors: List[BatchItemErrorResponse]


@router.get("/{entity_name}/rollup", response_model=EntityRollupResponse)
async def get_entity_rollup(
    entity_name: str,
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    """
    Recompute every property of an entity and return the aggregate.

    An entity with no properties returns zero totals.
    """
    rollup = await orchestrator.compute_entity_rollup(entity_name)
    return EntityRollupResponse(
        entity_name=rollup.entity_name,
        property_count=rollup.property_count,
        total_units=rollup.total_units,
        total_aum=rollup.total_aum,
        total_equity=rollup.total_equity,
        total_invested_capital=rollup.total_invested_capital,
        total_annual_cash_flow=rollup.total_annual_cash_flow,
        weighted_cap_rate=rollup.weighted_cap_rate,
        weighted_cash_on_cash=rollup.weighted_cash_on_cash,
        property_ids=list(rollup.property_ids),
        errors=[
            BatchItemErrorResponse(
                property_id=e.property_id, error_type=e.error_type, message=e.message
            )
            for e in rollup.errors
        ],
    )
