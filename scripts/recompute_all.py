"""
Recompute metrics for every property.

Usage:
    python scripts/recompute_all.py
    python scripts/recompute_all.py --entity "Demo Holdings LLC"
"""
import sys
import os
import argparse
import asyncio

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from propmetrics.db.database import get_db_context, init_db
from propmetrics.db.repository import SqlAlchemyPropertyRepository
from propmetrics.main import configure_logging
from propmetrics.services.recompute import MetricsOrchestrator


async def run(entity_name=None):
    with get_db_context() as db:
        orchestrator = MetricsOrchestrator(SqlAlchemyPropertyRepository(db))

        if entity_name:
            rollup = await orchestrator.compute_entity_rollup(entity_name)
            print(f"{rollup.entity_name}: {rollup.property_count} properties, {rollup.total_units} units")
            print(f"  AUM:               ${rollup.total_aum:,.0f}")
            print(f"  Equity:            ${rollup.total_equity:,.0f}")
            print(f"  Annual cash flow:  ${rollup.total_annual_cash_flow:,.0f}")
            print(f"  Cap rate:          {rollup.weighted_cap_rate:.2%}")
            print(f"  Cash-on-cash:      {rollup.weighted_cash_on_cash:.2%}")
            errors = rollup.errors
        else:
            result = await orchestrator.recompute_all()
            print(f"Recomputed {len(result.succeeded)} of {result.total} properties")
            errors = result.errors

        for error in errors:
            print(f"  FAILED {error.property_id}: {error.error_type}: {error.message}")

    return 1 if errors else 0


def main():
    parser = argparse.ArgumentParser(description="Recompute property metrics")
    parser.add_argument("--entity", help="Recompute one entity and print its rollup")
    args = parser.parse_args()

    configure_logging()
    init_db()
    sys.exit(asyncio.run(run(args.entity)))


if __name__ == "__main__":
    main()
