"""
Seed the database with a small demo portfolio.

Three properties under one entity, each described by a different source so
every branch of the fact gatherer is exercised: a live rent roll with a loan,
a unit mix with assumptions stored as percentages, and a legacy deal blob.
"""
import sys
import os
import json
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from propmetrics.db.database import get_db_context, init_db
from propmetrics.db.models import (
    Property,
    PropertyAssumptions,
    PropertyExpense,
    PropertyLoan,
    RentRollUnit,
    UnitType,
)
from propmetrics.main import configure_logging

ENTITY_NAME = "Demo Holdings LLC"


def build_fourplex():
    prop = Property(
        name="412 Elm St Fourplex",
        entity_name=ENTITY_NAME,
        address_street="412 Elm St",
        address_city="Hartford",
        address_state="CT",
        address_zip="06106",
        status="Cashflowing",
        unit_count=4,
        acquisition_date=date(2023, 6, 1),
        purchase_price=150000,
        rehab_cost=20000,
    )
    prop.rent_roll = [
        RentRollUnit(
            unit=f"Unit {n}",
            current_rent=1100,
            tenant_name=f"Tenant {n}",
            lease_start=date(2024, 1, 1),
            lease_end=date(2024, 12, 31),
        )
        for n in range(1, 5)
    ]
    prop.expenses = [
        PropertyExpense(category="Property Taxes", annual_amount=5000),
        PropertyExpense(category="Insurance", annual_amount=2400),
        PropertyExpense(category="Repairs & Maintenance", annual_amount=4600),
    ]
    prop.loans = [
        PropertyLoan(
            name="Acquisition loan",
            lender="First Community Bank",
            amount=120000,
            current_balance=120000,
            interest_rate=6.5,
            term_years=30,
            payment_type="amortizing",
            is_active=True,
        )
    ]
    return prop


def build_garden_apartments():
    prop = Property(
        name="Maple Court Apartments",
        entity_name=ENTITY_NAME,
        address_city="Springfield",
        address_state="MA",
        status="Rehabbing",
        purchase_price=900000,
        rehab_cost=150000,
    )
    prop.unit_types = [
        UnitType(name="1BR", units=8, bedrooms=1, bathrooms=1, market_rent=950),
        UnitType(name="2BR", units=4, bedrooms=2, bathrooms=1, market_rent=1250),
    ]
    # Stored as percentages; the engine normalizes them
    prop.assumptions = PropertyAssumptions(
        vacancy_rate=7,
        expense_ratio=40,
        management_fee=6,
        loan_percentage=70,
        interest_rate=7.25,
        loan_term_years=25,
        market_cap_rate=6,
    )
    return prop


def build_legacy_duplex():
    deal = {
        "version": 1,
        "assumptions": {"vacancyRate": 0.05, "interestRate": 0.065, "marketCapRate": 0.06},
        "rentRoll": [
            {"unit": "A", "currentRent": "$1,350"},
            {"unit": "B", "currentRent": "$1,275"},
        ],
        "expenses": {"Taxes": 300, "Insurance": 120, "Water/Sewer": 80},
        "closingCosts": {"Title": 2200, "Lender fees": 1800},
    }
    return Property(
        name="88 Birch Ave Duplex",
        entity_name=ENTITY_NAME,
        status="Sold",
        unit_count=2,
        purchase_price=210000,
        rehab_cost=15000,
        sale_price=285000,
        sale_date=date(2025, 3, 15),
        total_profit=48000,
        initial_capital=60000,
        deal_analyzer_data=json.dumps(deal),
    )


def main():
    configure_logging()
    init_db()

    with get_db_context() as db:
        existing = db.query(Property).filter(Property.entity_name == ENTITY_NAME).count()
        if existing:
            print(f"Entity '{ENTITY_NAME}' already has {existing} properties")
            return

        for prop in (build_fourplex(), build_garden_apartments(), build_legacy_duplex()):
            db.add(prop)
            db.flush()
            print(f"Created property: {prop.name} (ID: {prop.id})")

    print("\nDemo portfolio created. Run scripts/recompute_all.py to calculate metrics.")


if __name__ == "__main__":
    main()
