"""
Income and NOI Calculations
"""

from dataclasses import dataclass

from propmetrics.calculations.expenses import ExpenseResult
from propmetrics.calculations.models import PropertyFinancialFacts


@dataclass(frozen=True)
class IncomeResult:
    monthly_gross_rent: float
    annual_gross_rent: float
    vacancy_loss: float
    other_income: float
    effective_gross_income: float


@dataclass(frozen=True)
class NOIResult:
    monthly_noi: float
    annual_noi: float


def calculate_income(facts: PropertyFinancialFacts) -> IncomeResult:
    """
    Calculate effective gross income.

    Negative or zero rent is passed through unchanged so underwater
    properties are represented as they are.

    Args:
        facts: Normalized property facts

    Returns:
        IncomeResult with gross rent, vacancy loss and EGI (annual figures)
    """
    annual_gross_rent = facts.monthly_gross_rent * 12
    vacancy_loss = annual_gross_rent * facts.vacancy_rate
    effective_gross_income = annual_gross_rent - vacancy_loss + facts.other_income

    return IncomeResult(
        monthly_gross_rent=facts.monthly_gross_rent,
        annual_gross_rent=annual_gross_rent,
        vacancy_loss=vacancy_loss,
        other_income=facts.other_income,
        effective_gross_income=effective_gross_income,
    )


def calculate_noi(income: IncomeResult, expenses: ExpenseResult) -> NOIResult:
    """Calculate NOI as EGI less operating expenses; negative NOI is valid."""
    annual_noi = income.effective_gross_income - expenses.annual_operating_expenses
    return NOIResult(monthly_noi=annual_noi / 12, annual_noi=annual_noi)
