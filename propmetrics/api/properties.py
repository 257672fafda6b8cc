"""
Property metrics API endpoints.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from propmetrics.api.dependencies import get_orchestrator
from propmetrics.errors import PersistenceError, PropertyNotFoundError, StorageError
from propmetrics.services.recompute import MetricsOrchestrator

router = APIRouter()


class RecomputeResponse(BaseModel):
    """Metrics produced by a single-property recompute."""

    property_id: str
    metrics: Dict[str, Any]


class BatchItemErrorResponse(BaseModel):
    property_id: str
    error_type: str
    message: str


class BatchRecomputeResponse(BaseModel):
    """Summary of a recompute over every property."""

    total: int
    succeeded: List[str]
    errors: List[BatchItemErrorResponse]


class SnapshotResponse(BaseModel):
    calculation_date: date
    gross_rent: Optional[float]
    net_operating_income: Optional[float]
    cash_flow: Optional[float]
    cap_rate: Optional[float]
    cash_on_cash_return: Optional[float]
    dscr: Optional[float]
    current_arv: Optional[float]
    current_equity: Optional[float]
    metrics: Dict[str, Any]


class HistoryResponse(BaseModel):
    property_id: str
    months: int
    snapshots: List[SnapshotResponse]


@router.post("/recompute", response_model=BatchRecomputeResponse)
async def recompute_all_properties(
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    """Recompute every property; failures are reported per property."""
    result = await orchestrator.recompute_all()
    return BatchRecomputeResponse(
        total=result.total,
        succeeded=list(result.succeeded),
        errors=[
            BatchItemErrorResponse(
                property_id=e.property_id, error_type=e.error_type, message=e.message
            )
            for e in result.errors
        ],
    )


@router.post("/{property_id}/recompute", response_model=RecomputeResponse)
async def recompute_property(
    property_id: str,
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    """Recompute one property and persist the result."""
    try:
        metrics = await orchestrator.recompute_property(property_id)
    except PropertyNotFoundError:
        raise HTTPException(status_code=404, detail="Property not found")
    except PersistenceError as e:
        raise HTTPException(
            status_code=503,
            detail={"message": str(e), "metrics": e.metrics.to_dict()},
        )
    except StorageError as e:
        raise HTTPException(status_code=503, detail={"message": str(e)})

    return RecomputeResponse(property_id=property_id, metrics=metrics.to_dict())


@router.get("/{property_id}/history", response_model=HistoryResponse)
async def get_metric_history(
    property_id: str,
    months: int = Query(12, ge=1, le=120),
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    """Stored metric snapshots for the trailing window."""
    try:
        snapshots = await orchestrator.metric_history(property_id, months=months)
    except PropertyNotFoundError:
        raise HTTPException(status_code=404, detail="Property not found")
    except StorageError as e:
        raise HTTPException(status_code=503, detail={"message": str(e)})

    return HistoryResponse(
        property_id=property_id,
        months=months,
        snapshots=[
            SnapshotResponse(
                calculation_date=s["calculation_date"],
                gross_rent=s.get("gross_rent"),
                net_operating_income=s.get("net_operating_income"),
                cash_flow=s.get("cash_flow"),
                cap_rate=s.get("cap_rate"),
                cash_on_cash_return=s.get("cash_on_cash_return"),
                dscr=s.get("dscr"),
                current_arv=s.get("current_arv"),
                current_equity=s.get("current_equity"),
                metrics=s.get("metrics") or {},
            )
            for s in snapshots
        ],
    )
