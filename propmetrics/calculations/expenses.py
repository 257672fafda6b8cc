"""
Operating Expense Calculations

Turns itemized expense lines, legacy monthly expenses or a plain expense ratio
into annual operating expenses and a six-category breakdown, adding a
management fee when no management line was itemized.
"""

from dataclasses import dataclass
from typing import Dict

from propmetrics.calculations.models import (
    EXPENSE_CATEGORIES,
    ExpenseBreakdown,
    PropertyFinancialFacts,
)

# Share of a ratio-based expense total assigned to each category
DEFAULT_EXPENSE_SPLIT: Dict[str, float] = {
    "taxes": 0.25,
    "insurance": 0.15,
    "utilities": 0.15,
    "maintenance": 0.25,
    "management": 0.08,
    "other": 0.12,
}

_CATEGORY_KEYWORDS = (
    ("taxes", ("tax",)),
    ("insurance", ("insurance",)),
    ("utilities", ("utilit", "water", "electric", "gas", "sewer", "trash")),
    ("maintenance", ("maintenance", "repair")),
    ("management", ("management", "mgmt")),
)


@dataclass(frozen=True)
class ExpenseResult:
    annual_operating_expenses: float
    monthly_operating_expenses: float
    management_fee: float
    breakdown: ExpenseBreakdown


def categorize_expense(name: str) -> str:
    """
    Map a free-text expense name onto one of the breakdown categories.

    Args:
        name: Expense name or type, e.g. "Property Taxes", "Water/Sewer"

    Returns:
        One of taxes, insurance, utilities, maintenance, management, other
    """
    lowered = (name or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "other"


def calculate_expenses(
    facts: PropertyFinancialFacts, effective_gross_income: float
) -> ExpenseResult:
    """
    Calculate annual operating expenses.

    Itemized lines are summed by category; lines that carry only a percentage
    are charged against effective gross income. With no itemized data the
    expense ratio is applied to effective gross income and split across the
    default categories. A management fee is added only when the management
    category is still empty, so an itemized management line is never counted
    twice.

    Args:
        facts: Normalized property facts
        effective_gross_income: Annual EGI from the income calculator

    Returns:
        ExpenseResult with annual/monthly totals, fee and breakdown
    """
    totals = dict.fromkeys(EXPENSE_CATEGORIES, 0.0)
    annual_operating_expenses = 0.0

    if facts.expense_source == "ratio":
        annual_operating_expenses = effective_gross_income * facts.expense_ratio
        for category, share in DEFAULT_EXPENSE_SPLIT.items():
            totals[category] = annual_operating_expenses * share
    else:
        for line in facts.expense_lines:
            if line.annual_amount:
                amount = line.annual_amount
            else:
                amount = effective_gross_income * line.percent_of_income
            category = line.category if line.category in totals else "other"
            totals[category] += amount
            annual_operating_expenses += amount

    management_fee = effective_gross_income * facts.management_rate
    if totals["management"] == 0:
        annual_operating_expenses += management_fee
        totals["management"] = management_fee

    return ExpenseResult(
        annual_operating_expenses=annual_operating_expenses,
        monthly_operating_expenses=annual_operating_expenses / 12,
        management_fee=management_fee,
        breakdown=ExpenseBreakdown(**totals),
    )
