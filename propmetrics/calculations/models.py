"""
Calculation Inputs and Outputs

PropertyFinancialFacts is the single normalized input every calculator reads;
CalculatedMetrics is the single output of a calculation run. Both are frozen.
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, Tuple

STATUS_UNDER_CONTRACT = "Under Contract"
STATUS_REHABBING = "Rehabbing"
STATUS_CASHFLOWING = "Cashflowing"
STATUS_SOLD = "Sold"

PROPERTY_STATUSES = (
    STATUS_UNDER_CONTRACT,
    STATUS_REHABBING,
    STATUS_CASHFLOWING,
    STATUS_SOLD,
)

EXPENSE_CATEGORIES = (
    "taxes",
    "insurance",
    "utilities",
    "maintenance",
    "management",
    "other",
)

PAYMENT_AMORTIZING = "amortizing"
PAYMENT_INTEREST_ONLY = "interest_only"


@dataclass(frozen=True)
class ExpenseLine:
    """One itemized operating expense, already annualized."""

    category: str
    annual_amount: float = 0.0
    percent_of_income: float = 0.0  # decimal share of EGI, used when no amount


@dataclass(frozen=True)
class LoanTerms:
    """Loan the debt calculator works from (a live record or a synthesized one)."""

    amount: float = 0.0
    balance: float = 0.0
    annual_rate: float = 0.0
    term_years: float = 0.0
    payment_type: str = PAYMENT_AMORTIZING
    monthly_payment: float = 0.0
    is_live: bool = False


@dataclass(frozen=True)
class PropertyFinancialFacts:
    """Fully populated financial facts for one property."""

    property_id: str
    status: str = STATUS_CASHFLOWING
    unit_count: int = 0

    # Acquisition
    purchase_price: float = 0.0
    rehab_cost: float = 0.0
    closing_cost: float = 0.0
    holding_cost: float = 0.0

    # Income
    monthly_gross_rent: float = 0.0
    vacancy_rate: float = 0.0
    other_income: float = 0.0  # annual

    # Expenses
    expense_lines: Tuple[ExpenseLine, ...] = ()
    expense_ratio: float = 0.0
    management_rate: float = 0.0

    # Debt
    loan: LoanTerms = field(default_factory=LoanTerms)

    # Market assumptions
    market_cap_rate: float = 0.0
    exit_cap_rate: float = 0.0
    refinance_ltv: float = 0.0
    refinance_rate: float = 0.0

    # Values recorded on the property
    recorded_arv: float = 0.0
    sale_price: float = 0.0
    total_profit: float = 0.0
    recorded_invested_capital: float = 0.0

    # Provenance
    income_source: str = "none"
    expense_source: str = "ratio"
    debt_source: str = "synthesized"
    warnings: Tuple[str, ...] = ()

    @property
    def is_sold(self) -> bool:
        return self.status == STATUS_SOLD


@dataclass(frozen=True)
class ExpenseBreakdown:
    """Annual operating expenses by category."""

    taxes: float = 0.0
    insurance: float = 0.0
    utilities: float = 0.0
    maintenance: float = 0.0
    management: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.taxes
            + self.insurance
            + self.utilities
            + self.maintenance
            + self.management
            + self.other
        )


@dataclass(frozen=True)
class CalculatedMetrics:
    """
    Every metric produced by one calculation run.

    Ratios (cap rate, cash-on-cash, DSCR, LTV, ...) are decimals: 0.09 is 9%.
    """

    # Income
    monthly_gross_rent: float
    annual_gross_rent: float
    vacancy_loss: float
    other_income: float
    effective_gross_income: float

    # Expenses
    monthly_operating_expenses: float
    annual_operating_expenses: float
    management_fee: float
    expense_breakdown: ExpenseBreakdown

    # NOI
    monthly_noi: float
    annual_noi: float

    # Debt service
    monthly_debt_service: float
    annual_debt_service: float

    # Cash flow
    monthly_cash_flow: float
    annual_cash_flow: float

    # Returns
    cap_rate: float
    cash_on_cash_return: float
    dscr: float

    # Valuation
    current_arv: float
    total_invested_capital: float
    current_debt: float
    current_equity: float
    equity_multiple: float
    all_in_cost: float

    # Risk
    break_even_occupancy: float
    operating_expense_ratio: float
    loan_to_value: float

    def to_dict(self) -> Dict:
        return asdict(self)
