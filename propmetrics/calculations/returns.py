"""
Cash Flow and Return Calculations

All ratios are returned as decimals (0.09 for 9%). Every division is guarded
so zero inputs give 0 rather than NaN or infinity.
"""

from dataclasses import dataclass

from propmetrics.calculations.debt import DebtServiceResult
from propmetrics.calculations.income import NOIResult


@dataclass(frozen=True)
class CashFlowResult:
    monthly_cash_flow: float
    annual_cash_flow: float


@dataclass(frozen=True)
class ReturnsResult:
    cap_rate: float
    cash_on_cash_return: float
    dscr: float


def calculate_cash_flow(noi: NOIResult, debt: DebtServiceResult) -> CashFlowResult:
    """Cash flow after debt service; negative values are valid."""
    return CashFlowResult(
        monthly_cash_flow=noi.monthly_noi - debt.monthly_debt_service,
        annual_cash_flow=noi.annual_noi - debt.annual_debt_service,
    )


def calculate_cap_rate(annual_noi: float, purchase_price: float) -> float:
    """Cap rate = NOI / purchase price."""
    if purchase_price <= 0:
        return 0.0
    return annual_noi / purchase_price


def calculate_cash_on_cash(annual_cash_flow: float, invested_capital: float) -> float:
    """Cash-on-cash return = annual cash flow / invested capital."""
    if invested_capital <= 0:
        return 0.0
    return annual_cash_flow / invested_capital


def calculate_dscr(annual_noi: float, annual_debt_service: float) -> float:
    """
    Calculate Debt Service Coverage Ratio (DSCR).

    Returns 0 when there is no debt service rather than infinity, so the
    value can be stored and averaged.
    """
    if annual_debt_service <= 0:
        return 0.0
    return annual_noi / annual_debt_service


def calculate_returns(
    purchase_price: float,
    invested_capital: float,
    noi: NOIResult,
    cash_flow: CashFlowResult,
    debt: DebtServiceResult,
) -> ReturnsResult:
    """
    Calculate cap rate, cash-on-cash return and DSCR.

    Args:
        purchase_price: Acquisition price
        invested_capital: Total cash invested
        noi: NOI result
        cash_flow: Cash flow result
        debt: Debt service result

    Returns:
        ReturnsResult
    """
    return ReturnsResult(
        cap_rate=calculate_cap_rate(noi.annual_noi, purchase_price),
        cash_on_cash_return=calculate_cash_on_cash(
            cash_flow.annual_cash_flow, invested_capital
        ),
        dscr=calculate_dscr(noi.annual_noi, debt.annual_debt_service),
    )
