"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from propmetrics.main import app
from propmetrics.config import Settings
from propmetrics.db.database import get_db
from propmetrics.db.repository import SqlAlchemyPropertyRepository
# Import all models to ensure all tables are created
from propmetrics.db.models import (
    Base, Property, PropertyAssumptions, UnitType, RentRollUnit,
    PropertyExpense, PropertyIncome, PropertyLoan, ClosingCost, HoldingCost,
    PropertyMetricSnapshot,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


# Create a shared test database engine
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency globally for all tests
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop after."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Create database session for test setup."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def settings():
    """Engine settings with the stock defaults."""
    return Settings(_env_file=None)


@pytest.fixture
def fourplex(db_session):
    """
    4 units at $1,100 with tenants, $12,000/yr flat expenses and a
    $120,000 loan at 6.5% over 30 years.
    """
    prop = Property(
        name="412 Elm St",
        entity_name="Elm Holdings",
        status="Cashflowing",
        unit_count=4,
        purchase_price=150000,
    )
    prop.rent_roll = [
        RentRollUnit(unit=f"{n}", current_rent=1100, tenant_name=f"Tenant {n}")
        for n in range(1, 5)
    ]
    prop.expenses = [
        PropertyExpense(category="Property Taxes", annual_amount=5000),
        PropertyExpense(category="Insurance", annual_amount=3000),
        PropertyExpense(category="Repairs", annual_amount=4000),
    ]
    prop.loans = [
        PropertyLoan(
            name="Acquisition",
            amount=120000,
            current_balance=120000,
            interest_rate=0.065,
            term_years=30,
            is_active=True,
        )
    ]
    prop.closing_costs = [ClosingCost(category="Title", amount=3000)]
    prop.holding_costs = [HoldingCost(category="Utilities", amount=1500)]
    db_session.add(prop)
    db_session.commit()
    db_session.refresh(prop)
    return prop


@pytest.fixture
def repository():
    """Repository on its own session, as a route or script would hold it."""
    db = TestingSessionLocal()
    try:
        yield SqlAlchemyPropertyRepository(db)
    finally:
        db.close()
