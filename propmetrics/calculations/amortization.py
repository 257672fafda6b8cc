"""
Loan Amortization Calculations

Monthly payment math shared by every loan the engine prices: live loan records
without a stored payment and the synthesized acquisition loan.
"""

from propmetrics.calculations.models import PAYMENT_INTEREST_ONLY


def calculate_payment(
    principal: float, annual_rate: float, amortization_months: int
) -> float:
    """
    Calculate monthly loan payment.

    Matches Excel's PMT() function.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal (e.g., 0.05 for 5%)
        amortization_months: Total amortization period in months

    Returns:
        Monthly payment amount (positive number)
    """
    if principal <= 0:
        return 0.0
    if amortization_months <= 0:
        return 0.0

    monthly_rate = annual_rate / 12

    if monthly_rate == 0:
        return principal / amortization_months

    try:
        growth = (1 + monthly_rate) ** amortization_months
    except OverflowError:
        # Interest-only in the limit of an endless amortization.
        return principal * monthly_rate

    if growth == 1:
        return principal / amortization_months

    payment = principal * (monthly_rate * growth) / (growth - 1)

    return payment


def calculate_interest_only_payment(principal: float, annual_rate: float) -> float:
    """Calculate the monthly interest on an interest-only loan."""
    if principal <= 0:
        return 0.0
    return principal * (annual_rate / 12)


def calculate_monthly_payment(
    principal: float,
    annual_rate: float,
    term_years: float,
    payment_type: str = "amortizing",
) -> float:
    """
    Calculate the monthly payment for a loan described in years.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal
        term_years: Amortization term in years
        payment_type: "amortizing" or "interest_only"

    Returns:
        Monthly payment amount
    """
    if payment_type == PAYMENT_INTEREST_ONLY:
        return calculate_interest_only_payment(principal, annual_rate)
    try:
        months = int(round(term_years * 12))
    except (OverflowError, ValueError):
        return 0.0
    return calculate_payment(principal, annual_rate, months)
