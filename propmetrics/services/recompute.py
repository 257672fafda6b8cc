"""
Metrics recompute service.

The only place that runs the calculation engine against stored data. Every
caller (HTTP routes, scripts, sync jobs) goes through MetricsOrchestrator so
write-back and snapshots always reflect one complete calculation.
"""

import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from propmetrics.calculations.engine import calculate_metrics
from propmetrics.calculations.gatherer import gather_facts
from propmetrics.calculations.models import CalculatedMetrics, PropertyFinancialFacts
from propmetrics.calculations.rollup import EntityRollup, RollupMember, aggregate_entity
from propmetrics.calculations.sources import PropertyUpdate, SnapshotRecord
from propmetrics.config import Settings, get_settings
from propmetrics.db.repository import PropertyRepository
from propmetrics.errors import (
    BatchItemError,
    BatchResult,
    PersistenceError,
    PropertyNotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


def build_property_update(
    facts: PropertyFinancialFacts, metrics: CalculatedMetrics
) -> PropertyUpdate:
    """
    Property fields written back after a recompute.

    Return ratios are stored as percentages for display. Total profit is
    only touched for sold properties.
    """
    update: PropertyUpdate = {
        "arv": metrics.current_arv,
        "initial_capital": metrics.total_invested_capital,
        "annual_cash_flow": metrics.annual_cash_flow,
        "cash_on_cash_return": metrics.cash_on_cash_return * 100,
        # Single-year holding view: no multi-period projection
        "annualized_return": metrics.cash_on_cash_return * 100,
    }
    if facts.is_sold:
        update["total_profit"] = facts.total_profit
    return update


def build_snapshot(
    property_id: str, metrics: CalculatedMetrics, calculation_date: date
) -> SnapshotRecord:
    return {
        "property_id": property_id,
        "calculation_date": calculation_date,
        "gross_rent": metrics.annual_gross_rent,
        "net_operating_income": metrics.annual_noi,
        "cash_flow": metrics.annual_cash_flow,
        "cap_rate": metrics.cap_rate,
        "cash_on_cash_return": metrics.cash_on_cash_return,
        "dscr": metrics.dscr,
        "current_arv": metrics.current_arv,
        "current_equity": metrics.current_equity,
        "metrics": metrics.to_dict(),
    }


class MetricsOrchestrator:
    """Recompute, persist and aggregate property metrics."""

    def __init__(
        self,
        repository: PropertyRepository,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.settings = settings or get_settings()
        self.today = today

    async def _recompute(
        self, property_id: str
    ) -> Tuple[PropertyFinancialFacts, CalculatedMetrics]:
        sources = await self.repository.get_property_sources(property_id)
        if sources is None:
            raise PropertyNotFoundError(property_id)

        facts = gather_facts(sources, self.settings)
        for warning in facts.warnings:
            logger.warning(f"Property {property_id}: {warning}")

        metrics = calculate_metrics(facts)

        try:
            await self.repository.save_recompute(
                property_id,
                build_property_update(facts, metrics),
                build_snapshot(property_id, metrics, self.today()),
            )
        except StorageError as e:
            logger.error(f"Metrics for property {property_id} computed but not saved: {e}")
            raise PersistenceError(property_id, metrics, str(e), facts=facts) from e

        logger.info(
            f"Recomputed property {property_id}: "
            f"NOI {metrics.annual_noi:.2f}, cash flow {metrics.annual_cash_flow:.2f}, "
            f"cap rate {metrics.cap_rate:.4f}"
        )
        return facts, metrics

    async def recompute_property(self, property_id: str) -> CalculatedMetrics:
        """
        Recompute one property, write back its fields and append a snapshot.

        Args:
            property_id: Property ID

        Returns:
            CalculatedMetrics

        Raises:
            PropertyNotFoundError: The property does not exist
            PersistenceError: The write failed; ``error.metrics`` holds the result
            StorageError: The property could not be read
        """
        _, metrics = await self._recompute(property_id)
        return metrics

    async def recompute_all(self) -> BatchResult:
        """
        Recompute every property, one at a time.

        A failure on one property is logged and recorded; it never stops the
        rest of the batch.
        """
        property_ids = await self.repository.list_property_ids()
        succeeded: List[str] = []
        errors: List[BatchItemError] = []

        for property_id in property_ids:
            try:
                await self._recompute(property_id)
            except Exception as e:
                logger.exception(f"Recompute failed for property {property_id}")
                errors.append(BatchItemError.from_exception(property_id, e))
            else:
                succeeded.append(property_id)

        logger.info(
            f"Batch recompute finished: {len(succeeded)} succeeded, {len(errors)} failed"
        )
        return BatchResult(succeeded=tuple(succeeded), errors=tuple(errors))

    async def compute_entity_rollup(self, entity_name: str) -> EntityRollup:
        """
        Recompute every property held by an entity and aggregate the results.

        A property whose write-back failed still contributes its computed
        metrics and is also reported in ``errors``. Any other failure leaves
        the property out of the totals.
        """
        property_ids = await self.repository.list_entity_property_ids(entity_name)
        members: List[RollupMember] = []
        errors: List[BatchItemError] = []

        for property_id in property_ids:
            try:
                facts, metrics = await self._recompute(property_id)
            except PersistenceError as e:
                errors.append(BatchItemError.from_exception(property_id, e))
                unit_count = e.facts.unit_count if e.facts is not None else 0
                members.append(RollupMember(property_id, unit_count, e.metrics))
            except Exception as e:
                logger.exception(f"Rollup recompute failed for property {property_id}")
                errors.append(BatchItemError.from_exception(property_id, e))
            else:
                members.append(RollupMember(property_id, facts.unit_count, metrics))

        return aggregate_entity(entity_name, members, errors)

    async def metric_history(
        self, property_id: str, months: int = 12
    ) -> List[SnapshotRecord]:
        """Snapshots from the last ``months`` months, oldest first. Read-only."""
        since = self.today() - relativedelta(months=months)
        return await self.repository.list_snapshots(property_id, since=since)
