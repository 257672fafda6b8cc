"""
SQLAlchemy ORM models for property financial data.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
import uuid

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)


class Property(AuditMixin, Base):
    """Property model representing a real estate asset."""

    __tablename__ = "properties"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)

    # Ownership entity (LLC, fund, ...)
    entity_name = Column(String(255), index=True)

    # Address
    address_street = Column(String(255))
    address_city = Column(String(100))
    address_state = Column(String(50))
    address_zip = Column(String(20))

    # Lifecycle: Under Contract, Rehabbing, Cashflowing, Sold
    status = Column(String(50), default="Under Contract")
    unit_count = Column(Integer)
    acquisition_date = Column(Date)

    # Purchase info
    purchase_price = Column(Float)
    rehab_cost = Column(Float)

    # Sale info
    sale_price = Column(Float)
    sale_date = Column(Date)

    # Written back by the metrics engine
    arv = Column(Float)
    initial_capital = Column(Float)
    annual_cash_flow = Column(Float)
    total_profit = Column(Float)
    cash_on_cash_return = Column(Float)  # percentage, 9.5 = 9.5%
    annualized_return = Column(Float)  # percentage
    metrics_updated_at = Column(DateTime)

    # Legacy free-form underwriting (JSON text)
    deal_analyzer_data = Column(Text)

    # Relationships
    assumptions = relationship(
        "PropertyAssumptions",
        back_populates="property",
        uselist=False,
        cascade="all, delete-orphan",
    )
    unit_types = relationship(
        "UnitType", back_populates="property", cascade="all, delete-orphan"
    )
    rent_roll = relationship(
        "RentRollUnit", back_populates="property", cascade="all, delete-orphan"
    )
    expenses = relationship(
        "PropertyExpense", back_populates="property", cascade="all, delete-orphan"
    )
    income = relationship(
        "PropertyIncome", back_populates="property", cascade="all, delete-orphan"
    )
    loans = relationship(
        "PropertyLoan", back_populates="property", cascade="all, delete-orphan"
    )
    closing_costs = relationship(
        "ClosingCost", back_populates="property", cascade="all, delete-orphan"
    )
    holding_costs = relationship(
        "HoldingCost", back_populates="property", cascade="all, delete-orphan"
    )
    snapshots = relationship(
        "PropertyMetricSnapshot",
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )


class PropertyAssumptions(AuditMixin, Base):
    """Underwriting assumptions. Rates may be stored as 0.05 or 5."""

    __tablename__ = "property_assumptions"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(
        String, ForeignKey("properties.id"), nullable=False, unique=True
    )

    vacancy_rate = Column(Float)
    expense_ratio = Column(Float)
    management_fee = Column(Float)
    loan_percentage = Column(Float)
    interest_rate = Column(Float)
    loan_term_years = Column(Integer)
    market_cap_rate = Column(Float)
    exit_cap_rate = Column(Float)
    refinance_ltv = Column(Float)
    refinance_interest_rate = Column(Float)

    property = relationship("Property", back_populates="assumptions")


class UnitType(AuditMixin, Base):
    """Unit mix line: a count of units at a market rent."""

    __tablename__ = "unit_types"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)

    name = Column(String(100))
    units = Column(Integer)
    bedrooms = Column(Float)
    bathrooms = Column(Float)
    market_rent = Column(Float)

    property = relationship("Property", back_populates="unit_types")


class RentRollUnit(AuditMixin, Base):
    """Per-unit rent roll entry."""

    __tablename__ = "rent_roll"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)

    unit = Column(String(50))
    current_rent = Column(Float)
    pro_forma_rent = Column(Float)

    # Tenant info
    tenant_name = Column(String(255))
    lease_start = Column(Date)
    lease_end = Column(Date)

    property = relationship("Property", back_populates="rent_roll")


class PropertyExpense(AuditMixin, Base):
    """Itemized operating expense."""

    __tablename__ = "property_expenses"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)

    category = Column(String(100), nullable=False)
    annual_amount = Column(Float)
    monthly_amount = Column(Float)
    percentage = Column(Float)  # of effective gross income, when no amount

    property = relationship("Property", back_populates="expenses")


class PropertyIncome(AuditMixin, Base):
    """Other income (laundry, parking, fees)."""

    __tablename__ = "property_income"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)

    category = Column(String(100), nullable=False)
    annual_amount = Column(Float)
    monthly_amount = Column(Float)

    property = relationship("Property", back_populates="income")


class PropertyLoan(AuditMixin, Base):
    """Loan on a property."""

    __tablename__ = "property_loans"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)

    name = Column(String(255))
    lender = Column(String(255))

    # Amount
    amount = Column(Float)
    current_balance = Column(Float)
    principal_balance = Column(Float)

    # Terms
    interest_rate = Column(Float)
    term_years = Column(Integer)
    payment_type = Column(String(20), default="amortizing")
    monthly_payment = Column(Float)
    maturity_date = Column(Date)

    is_active = Column(Boolean, default=False)

    property = relationship("Property", back_populates="loans")


class ClosingCost(AuditMixin, Base):
    __tablename__ = "closing_costs"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    category = Column(String(100))
    amount = Column(Float)

    property = relationship("Property", back_populates="closing_costs")


class HoldingCost(AuditMixin, Base):
    __tablename__ = "holding_costs"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    category = Column(String(100))
    amount = Column(Float)

    property = relationship("Property", back_populates="holding_costs")


class PropertyMetricSnapshot(AuditMixin, Base):
    """Append-only history of calculated metrics, one row per recompute."""

    __tablename__ = "property_metric_snapshots"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    calculation_date = Column(Date, nullable=False, index=True)

    # Headline figures
    gross_rent = Column(Float, default=0)
    net_operating_income = Column(Float, default=0)
    cash_flow = Column(Float, default=0)
    cap_rate = Column(Float, default=0)
    cash_on_cash_return = Column(Float, default=0)
    dscr = Column(Float, default=0)
    current_arv = Column(Float, default=0)
    current_equity = Column(Float, default=0)

    # Full CalculatedMetrics payload
    metrics = Column(JSON, default=dict)

    property = relationship("Property", back_populates="snapshots")
