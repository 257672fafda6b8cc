"""
Calculation Engine

Runs the calculators in their fixed order over one set of facts:

    income -> expenses -> NOI -> debt service -> cash flow -> returns -> valuation

and adds the risk ratios that need results from more than one step. The
engine is a pure function of its facts; it reads no storage and no clock.
"""

from propmetrics.calculations.debt import calculate_debt_service
from propmetrics.calculations.expenses import calculate_expenses
from propmetrics.calculations.income import calculate_income, calculate_noi
from propmetrics.calculations.models import CalculatedMetrics, PropertyFinancialFacts
from propmetrics.calculations.returns import calculate_cash_flow, calculate_returns
from propmetrics.calculations.valuation import calculate_valuation


def calculate_break_even_occupancy(
    annual_operating_expenses: float,
    annual_debt_service: float,
    annual_gross_rent: float,
) -> float:
    """Share of gross rent needed to cover expenses and debt service."""
    if annual_gross_rent <= 0:
        return 0.0
    return (annual_operating_expenses + annual_debt_service) / annual_gross_rent


def calculate_operating_expense_ratio(
    annual_operating_expenses: float, effective_gross_income: float
) -> float:
    if effective_gross_income <= 0:
        return 0.0
    return annual_operating_expenses / effective_gross_income


def calculate_loan_to_value(current_debt: float, current_value: float) -> float:
    if current_debt <= 0 or current_value <= 0:
        return 0.0
    return current_debt / current_value


def calculate_metrics(facts: PropertyFinancialFacts) -> CalculatedMetrics:
    """
    Calculate every metric for one property.

    Args:
        facts: Normalized facts from the fact gatherer

    Returns:
        CalculatedMetrics
    """
    income = calculate_income(facts)
    expenses = calculate_expenses(facts, income.effective_gross_income)
    noi = calculate_noi(income, expenses)
    debt = calculate_debt_service(facts.loan)
    cash_flow = calculate_cash_flow(noi, debt)
    valuation = calculate_valuation(facts, noi, debt)
    returns = calculate_returns(
        facts.purchase_price,
        valuation.total_invested_capital,
        noi,
        cash_flow,
        debt,
    )

    return CalculatedMetrics(
        monthly_gross_rent=income.monthly_gross_rent,
        annual_gross_rent=income.annual_gross_rent,
        vacancy_loss=income.vacancy_loss,
        other_income=income.other_income,
        effective_gross_income=income.effective_gross_income,
        monthly_operating_expenses=expenses.monthly_operating_expenses,
        annual_operating_expenses=expenses.annual_operating_expenses,
        management_fee=expenses.management_fee,
        expense_breakdown=expenses.breakdown,
        monthly_noi=noi.monthly_noi,
        annual_noi=noi.annual_noi,
        monthly_debt_service=debt.monthly_debt_service,
        annual_debt_service=debt.annual_debt_service,
        monthly_cash_flow=cash_flow.monthly_cash_flow,
        annual_cash_flow=cash_flow.annual_cash_flow,
        cap_rate=returns.cap_rate,
        cash_on_cash_return=returns.cash_on_cash_return,
        dscr=returns.dscr,
        current_arv=valuation.current_arv,
        total_invested_capital=valuation.total_invested_capital,
        current_debt=valuation.current_debt,
        current_equity=valuation.current_equity,
        equity_multiple=valuation.equity_multiple,
        all_in_cost=valuation.all_in_cost,
        break_even_occupancy=calculate_break_even_occupancy(
            expenses.annual_operating_expenses,
            debt.annual_debt_service,
            income.annual_gross_rent,
        ),
        operating_expense_ratio=calculate_operating_expense_ratio(
            expenses.annual_operating_expenses, income.effective_gross_income
        ),
        loan_to_value=calculate_loan_to_value(
            valuation.current_debt, valuation.current_arv
        ),
    )
