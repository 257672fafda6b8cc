# propmetrics/db/repository.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from propmetrics.calculations.sources import (
    PropertySources,
    PropertyUpdate,
    SnapshotRecord,
)
from propmetrics.db.models import Property, PropertyMetricSnapshot
from propmetrics.errors import PropertyNotFoundError, StorageError

logger = logging.getLogger(__name__)


# ----------------------------
# Storage boundary
# ----------------------------

class PropertyRepository(Protocol):
    async def get_property_sources(self, property_id: str) -> PropertySources | None:
        ...

    async def list_property_ids(self) -> list[str]:
        ...

    async def list_entity_property_ids(self, entity_name: str) -> list[str]:
        ...

    async def save_recompute(
        self,
        property_id: str,
        update: PropertyUpdate,
        snapshot: SnapshotRecord,
    ) -> None:
        ...

    async def list_snapshots(
        self, property_id: str, since: date | None = None
    ) -> list[SnapshotRecord]:
        ...


# ----------------------------
# SQLAlchemy implementation
# ----------------------------

_PROPERTY_FIELDS = (
    "id", "name", "entity_name", "status", "unit_count",
    "purchase_price", "rehab_cost", "arv", "sale_price",
    "total_profit", "initial_capital", "deal_analyzer_data",
)
_ASSUMPTION_FIELDS = (
    "vacancy_rate", "expense_ratio", "management_fee", "loan_percentage",
    "interest_rate", "loan_term_years", "market_cap_rate", "exit_cap_rate",
    "refinance_ltv", "refinance_interest_rate",
)
_RENT_ROLL_FIELDS = (
    "unit", "current_rent", "pro_forma_rent", "tenant_name", "lease_start", "lease_end",
)
_UNIT_TYPE_FIELDS = ("name", "units", "market_rent")
_EXPENSE_FIELDS = ("category", "annual_amount", "monthly_amount", "percentage")
_INCOME_FIELDS = ("category", "annual_amount", "monthly_amount")
_LOAN_FIELDS = (
    "name", "amount", "current_balance", "principal_balance", "interest_rate",
    "term_years", "monthly_payment", "payment_type", "is_active",
)
_COST_FIELDS = ("category", "amount")
_SNAPSHOT_FIELDS = (
    "property_id", "calculation_date", "gross_rent", "net_operating_income",
    "cash_flow", "cap_rate", "cash_on_cash_return", "dscr",
    "current_arv", "current_equity", "metrics",
)


def _row(obj: Any, fields: Iterable[str]) -> dict[str, Any]:
    return {name: getattr(obj, name) for name in fields}


def _rows(objs: Iterable[Any], fields: Iterable[str]) -> list[dict[str, Any]]:
    fields = tuple(fields)
    return [_row(obj, fields) for obj in objs if not obj.is_deleted]


class SqlAlchemyPropertyRepository:
    """
    PropertyRepository over the SQLAlchemy schema.

    Works on one session; each write commits its own transaction and rolls
    back on failure. Database errors surface as StorageError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_property(self, property_id: str) -> Property | None:
        prop = self.db.get(Property, property_id)
        if prop is None or prop.is_deleted:
            return None
        return prop

    async def get_property_sources(self, property_id: str) -> PropertySources | None:
        try:
            prop = self._get_property(property_id)
            if prop is None:
                return None

            assumptions = prop.assumptions
            if assumptions is not None and assumptions.is_deleted:
                assumptions = None

            return PropertySources(
                property=_row(prop, _PROPERTY_FIELDS),
                assumptions=(
                    _row(assumptions, _ASSUMPTION_FIELDS) if assumptions is not None else None
                ),
                rent_roll=_rows(prop.rent_roll, _RENT_ROLL_FIELDS),
                unit_types=_rows(prop.unit_types, _UNIT_TYPE_FIELDS),
                expenses=_rows(prop.expenses, _EXPENSE_FIELDS),
                other_income=_rows(prop.income, _INCOME_FIELDS),
                loans=_rows(prop.loans, _LOAN_FIELDS),
                closing_costs=_rows(prop.closing_costs, _COST_FIELDS),
                holding_costs=_rows(prop.holding_costs, _COST_FIELDS),
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load property {property_id}: {e}") from e

    async def list_property_ids(self) -> list[str]:
        stmt = (
            select(Property.id)
            .where(Property.is_deleted == False)  # noqa: E712
            .order_by(Property.created_at, Property.id)
        )
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list properties: {e}") from e

    async def list_entity_property_ids(self, entity_name: str) -> list[str]:
        stmt = (
            select(Property.id)
            .where(Property.entity_name == entity_name, Property.is_deleted == False)  # noqa: E712
            .order_by(Property.created_at, Property.id)
        )
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list properties for {entity_name}: {e}") from e

    async def save_recompute(
        self,
        property_id: str,
        update: PropertyUpdate,
        snapshot: SnapshotRecord,
    ) -> None:
        """Write back property fields and append a snapshot in one transaction."""
        try:
            prop = self._get_property(property_id)
            if prop is None:
                raise PropertyNotFoundError(property_id)

            for name, value in update.items():
                setattr(prop, name, value)
            prop.metrics_updated_at = datetime.utcnow()

            self.db.add(PropertyMetricSnapshot(**snapshot))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Rolled back recompute write for property {property_id}: {e}")
            raise StorageError(f"Failed to save metrics for {property_id}: {e}") from e

    async def list_snapshots(
        self, property_id: str, since: date | None = None
    ) -> list[SnapshotRecord]:
        try:
            if self._get_property(property_id) is None:
                raise PropertyNotFoundError(property_id)

            stmt = select(PropertyMetricSnapshot).where(
                PropertyMetricSnapshot.property_id == property_id,
                PropertyMetricSnapshot.is_deleted == False,  # noqa: E712
            )
            if since is not None:
                stmt = stmt.where(PropertyMetricSnapshot.calculation_date >= since)
            stmt = stmt.order_by(
                PropertyMetricSnapshot.calculation_date, PropertyMetricSnapshot.created_at
            )
            return [_row(s, _SNAPSHOT_FIELDS) for s in self.db.scalars(stmt)]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load snapshots for {property_id}: {e}") from e
