"""
Valuation Calculations

ARV, invested capital, equity and equity multiple. This is the only step that
looks at the property status: a sold property is valued at its sale price and
its equity multiple comes from realized profit.
"""

from dataclasses import dataclass

from propmetrics.calculations.debt import DebtServiceResult
from propmetrics.calculations.income import NOIResult
from propmetrics.calculations.models import PropertyFinancialFacts


@dataclass(frozen=True)
class ValuationResult:
    current_arv: float
    total_invested_capital: float
    current_debt: float
    current_equity: float
    equity_multiple: float
    all_in_cost: float


def calculate_invested_capital(facts: PropertyFinancialFacts) -> float:
    """
    Total cash invested in the property.

    Uses the recorded figure when there is one; otherwise down payment
    (purchase price less loan amount) plus closing costs. Recorded closing
    costs take precedence; only a property with none recorded (in its own
    records or the legacy blob) falls back to the fact gatherer's estimate
    (2% of purchase price by default).
    """
    if facts.recorded_invested_capital > 0:
        return facts.recorded_invested_capital

    down_payment = facts.purchase_price - facts.loan.amount
    return down_payment + facts.closing_cost


def calculate_all_in_cost(facts: PropertyFinancialFacts) -> float:
    """Purchase price plus rehab, closing and holding costs."""
    return (
        facts.purchase_price
        + facts.rehab_cost
        + facts.closing_cost
        + facts.holding_cost
    )


def resolve_arv(facts: PropertyFinancialFacts, annual_noi: float) -> float:
    """
    Resolve the current after-repair / market value.

    Precedence, first nonzero wins:
        1. Sale price of a sold property
        2. Recorded ARV
        3. Annual NOI capitalized at the market cap rate (positive NOI only)
        4. Purchase price
    """
    if facts.is_sold and facts.sale_price > 0:
        return facts.sale_price

    if facts.recorded_arv > 0:
        return facts.recorded_arv

    if annual_noi > 0 and facts.market_cap_rate > 0:
        return annual_noi / facts.market_cap_rate

    return facts.purchase_price


def calculate_valuation(
    facts: PropertyFinancialFacts,
    noi: NOIResult,
    debt: DebtServiceResult,
) -> ValuationResult:
    """
    Calculate ARV, equity and equity multiple.

    Args:
        facts: Normalized property facts
        noi: NOI from the NOI calculator
        debt: Debt service result (for outstanding principal)

    Returns:
        ValuationResult
    """
    current_arv = resolve_arv(facts, noi.annual_noi)
    invested_capital = calculate_invested_capital(facts)
    all_in_cost = calculate_all_in_cost(facts)
    current_equity = current_arv - debt.current_debt

    if invested_capital <= 0:
        equity_multiple = 0.0
    elif facts.is_sold:
        equity_multiple = facts.total_profit / invested_capital
    else:
        equity_multiple = max(0.0, current_arv - all_in_cost) / invested_capital

    return ValuationResult(
        current_arv=current_arv,
        total_invested_capital=invested_capital,
        current_debt=debt.current_debt,
        current_equity=current_equity,
        equity_multiple=equity_multiple,
        all_in_cost=all_in_cost,
    )
