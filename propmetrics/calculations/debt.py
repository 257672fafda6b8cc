"""
Debt Service Calculations
"""

from dataclasses import dataclass

from propmetrics.calculations.amortization import calculate_monthly_payment
from propmetrics.calculations.models import PAYMENT_INTEREST_ONLY, LoanTerms


@dataclass(frozen=True)
class DebtServiceResult:
    monthly_debt_service: float
    annual_debt_service: float
    current_debt: float


def calculate_debt_service(loan: LoanTerms) -> DebtServiceResult:
    """
    Resolve monthly debt service and outstanding principal.

    A live loan with a stored payment is used as recorded. Otherwise the
    payment is derived from the loan's own amount, rate and term (the
    synthesized acquisition loan always takes this path).

    Args:
        loan: Loan terms from the fact gatherer

    Returns:
        DebtServiceResult with monthly/annual payments and current debt
    """
    if loan.is_live and loan.monthly_payment:
        monthly = loan.monthly_payment
    else:
        if loan.payment_type == PAYMENT_INTEREST_ONLY:
            principal = loan.balance or loan.amount
        else:
            principal = loan.amount or loan.balance
        monthly = calculate_monthly_payment(
            principal, loan.annual_rate, loan.term_years, loan.payment_type
        )

    current_debt = loan.balance or loan.amount

    return DebtServiceResult(
        monthly_debt_service=monthly,
        annual_debt_service=monthly * 12,
        current_debt=current_debt,
    )
