# propmetrics/calculations/sources.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, TypedDict


# ----------------------------
# Raw rows, as read from storage
# ----------------------------
# Values stay untyped (float, Decimal, currency string or None); the gatherer
# parses every one of them.

class PropertyRow(TypedDict, total=False):
    id: str
    name: str
    entity_name: str | None
    status: str | None
    unit_count: Any
    purchase_price: Any
    rehab_cost: Any
    arv: Any
    sale_price: Any
    total_profit: Any
    initial_capital: Any
    deal_analyzer_data: Any


class AssumptionsRow(TypedDict, total=False):
    vacancy_rate: Any
    expense_ratio: Any
    management_fee: Any
    loan_percentage: Any
    interest_rate: Any
    loan_term_years: Any
    market_cap_rate: Any
    exit_cap_rate: Any
    refinance_ltv: Any
    refinance_interest_rate: Any


class RentRollRow(TypedDict, total=False):
    unit: str
    current_rent: Any
    pro_forma_rent: Any
    tenant_name: str | None
    lease_start: Any
    lease_end: Any


class UnitTypeRow(TypedDict, total=False):
    name: str
    units: Any
    market_rent: Any


class ExpenseRow(TypedDict, total=False):
    category: str
    annual_amount: Any
    monthly_amount: Any
    percentage: Any


class IncomeRow(TypedDict, total=False):
    category: str
    annual_amount: Any
    monthly_amount: Any


class LoanRow(TypedDict, total=False):
    name: str
    amount: Any
    current_balance: Any
    principal_balance: Any
    interest_rate: Any
    term_years: Any
    monthly_payment: Any
    payment_type: str | None
    is_active: Any


class CostRow(TypedDict, total=False):
    category: str
    amount: Any


# ----------------------------
# Everything known about one property
# ----------------------------

@dataclass(frozen=True)
class PropertySources:
    property: PropertyRow
    assumptions: AssumptionsRow | None = None
    rent_roll: list[RentRollRow] = field(default_factory=list)
    unit_types: list[UnitTypeRow] = field(default_factory=list)
    expenses: list[ExpenseRow] = field(default_factory=list)
    other_income: list[IncomeRow] = field(default_factory=list)
    loans: list[LoanRow] = field(default_factory=list)
    closing_costs: list[CostRow] = field(default_factory=list)
    holding_costs: list[CostRow] = field(default_factory=list)


# ----------------------------
# Written back after a recompute
# ----------------------------

class PropertyUpdate(TypedDict, total=False):
    arv: float
    initial_capital: float
    annual_cash_flow: float
    total_profit: float
    cash_on_cash_return: float  # percentage
    annualized_return: float  # percentage


class SnapshotRecord(TypedDict, total=False):
    property_id: str
    calculation_date: date
    gross_rent: float
    net_operating_income: float
    cash_flow: float
    cap_rate: float
    cash_on_cash_return: float
    dscr: float
    current_arv: float
    current_equity: float
    metrics: dict[str, Any]
