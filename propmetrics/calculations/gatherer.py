"""
Financial Fact Gatherer

Reads every raw source that may describe a property (normalized tables, the
assumptions row, the legacy deal blob) and resolves them into one fully
populated PropertyFinancialFacts. All "which source wins" decisions live here;
the calculators downstream only ever see the normalized facts.

Precedence, first non-empty source wins:
    Income:   rent roll -> unit types -> legacy rent roll -> legacy unit types
    Expenses: itemized records -> legacy monthly expenses -> expense ratio
    Debt:     active/first loan record -> legacy loan -> synthesized loan
    Rates:    assumptions row -> legacy assumptions -> configured default
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from propmetrics.calculations.expenses import categorize_expense
from propmetrics.calculations.legacy import (
    DealAnalyzerData,
    LegacyAssumptions,
    parse_deal_blob,
)
from propmetrics.calculations.models import (
    PAYMENT_AMORTIZING,
    PAYMENT_INTEREST_ONLY,
    PROPERTY_STATUSES,
    STATUS_UNDER_CONTRACT,
    ExpenseLine,
    LoanTerms,
    PropertyFinancialFacts,
)
from propmetrics.calculations.parsing import (
    first_present,
    normalize_rate,
    parse_flag,
    parse_number,
)
from propmetrics.calculations.sources import (
    CostRow,
    LoanRow,
    PropertySources,
    RentRollRow,
)
from propmetrics.config import Settings, get_settings

logger = logging.getLogger(__name__)

_INTEREST_ONLY_NAMES = {"interest_only", "interest-only", "interest only", "io"}
MAX_LOAN_TERM_YEARS = 100


def normalize_payment_type(value: Any) -> str:
    """Map stored payment type spellings onto amortizing / interest_only."""
    if value is None:
        return PAYMENT_AMORTIZING
    if str(value).strip().lower() in _INTEREST_ONLY_NAMES:
        return PAYMENT_INTEREST_ONLY
    return PAYMENT_AMORTIZING


def normalize_status(value: Any) -> str:
    """Match a stored status case-insensitively; unknown or empty is Under Contract."""
    if value:
        lowered = str(value).strip().lower()
        for status in PROPERTY_STATUSES:
            if status.lower() == lowered:
                return status
    return STATUS_UNDER_CONTRACT


def _rent_roll_is_live(rent_roll: List[RentRollRow]) -> bool:
    for unit in rent_roll:
        if unit.get("tenant_name") or unit.get("lease_start") or unit.get("lease_end"):
            return True
        if parse_number(unit.get("current_rent")) > 0:
            return True
    return False


def _unit_type_count(value: Any) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 1.0
    return parse_number(value)


def _resolve_monthly_rent(
    sources: PropertySources, blob: Optional[DealAnalyzerData]
) -> Tuple[float, str]:
    if sources.rent_roll and _rent_roll_is_live(sources.rent_roll):
        total = sum(parse_number(unit.get("current_rent")) for unit in sources.rent_roll)
        if total:
            return total, "rent_roll"

    if sources.unit_types:
        total = sum(
            _unit_type_count(unit_type.get("units"))
            * parse_number(unit_type.get("market_rent"))
            for unit_type in sources.unit_types
        )
        if total:
            return total, "unit_types"

    if blob is not None:
        total = sum(unit.monthly_rent for unit in blob.rent_roll)
        if total:
            return total, "legacy_rent_roll"
        total = sum(unit_type.monthly_rent for unit_type in blob.unit_types)
        if total:
            return total, "legacy_unit_types"

    return 0.0, "none"


def _resolve_expense_lines(
    sources: PropertySources, blob: Optional[DealAnalyzerData]
) -> Tuple[Tuple[ExpenseLine, ...], str]:
    if sources.expenses:
        lines = []
        for row in sources.expenses:
            annual = parse_number(row.get("annual_amount"))
            if not annual:
                annual = parse_number(row.get("monthly_amount")) * 12
            percent = 0.0 if annual else normalize_rate(row.get("percentage"))
            lines.append(
                ExpenseLine(
                    category=categorize_expense(row.get("category", "")),
                    annual_amount=annual,
                    percent_of_income=percent,
                )
            )
        return tuple(lines), "itemized"

    if blob is not None and blob.expenses:
        lines = [
            ExpenseLine(category=categorize_expense(name), annual_amount=monthly * 12)
            for name, monthly in blob.expenses.items()
        ]
        return tuple(lines), "legacy"

    return (), "ratio"


def _resolve_other_income(
    sources: PropertySources, blob: Optional[DealAnalyzerData]
) -> float:
    if sources.other_income:
        total = 0.0
        for row in sources.other_income:
            annual = parse_number(row.get("annual_amount"))
            if not annual:
                annual = parse_number(row.get("monthly_amount")) * 12
            total += annual
        return total

    if blob is not None and blob.other_income:
        return sum(blob.other_income.values())

    return 0.0


def _loan_rate(value: Any) -> float:
    """Normalized loan rate; negative rates are read as 0."""
    return max(0.0, normalize_rate(value))


def _loan_term(value: Any, default: float) -> float:
    """Loan term in years; missing, non-positive or implausible terms use the default."""
    term = parse_number(value)
    if term <= 0 or term > MAX_LOAN_TERM_YEARS:
        return default
    return term


def _select_loan(loans: Iterable[Any], is_active) -> Optional[Any]:
    loans = list(loans)
    for loan in loans:
        if is_active(loan):
            return loan
    return loans[0] if loans else None


def _sum_costs(
    rows: List[CostRow], legacy: Optional[dict], estimate: float
) -> float:
    if rows:
        return sum(parse_number(row.get("amount")) for row in rows)
    if legacy:
        return sum(legacy.values())
    return estimate


def gather_facts(
    sources: PropertySources, settings: Optional[Settings] = None
) -> PropertyFinancialFacts:
    """
    Resolve raw property sources into PropertyFinancialFacts.

    Never raises on missing or malformed data: absent sources fall back to
    configured defaults and are reported in ``facts.warnings``.

    Args:
        sources: Everything the storage layer holds for one property
        settings: Engine defaults (defaults to application settings)

    Returns:
        PropertyFinancialFacts with every rate in decimal form
    """
    settings = settings or get_settings()
    prop = sources.property
    blob = parse_deal_blob(prop.get("deal_analyzer_data"))
    legacy = blob.assumptions if blob is not None else LegacyAssumptions()
    assumptions = sources.assumptions or {}
    warnings: List[str] = []

    if sources.assumptions is None and blob is None:
        warnings.append("No assumptions recorded; using default rates")

    def rate(key: str, legacy_value: Optional[float], default: float) -> float:
        return normalize_rate(first_present(assumptions.get(key), legacy_value, default))

    purchase_price = parse_number(
        first_present(prop.get("purchase_price"), legacy.purchase_price)
    )

    # Income
    monthly_gross_rent, income_source = _resolve_monthly_rent(sources, blob)
    if income_source == "none":
        warnings.append("No rent roll, unit types or legacy rents; gross rent is 0")

    # Expenses
    expense_lines, expense_source = _resolve_expense_lines(sources, blob)
    if expense_source == "ratio":
        warnings.append("No itemized expenses; applying expense ratio")

    # Debt
    interest_rate = max(
        0.0, rate("interest_rate", legacy.interest_rate, settings.default_interest_rate)
    )
    term_years = _loan_term(
        first_present(
            assumptions.get("loan_term_years"),
            legacy.loan_term_years,
            settings.default_loan_term_years,
        ),
        settings.default_loan_term_years,
    )
    loan_percentage = rate(
        "loan_percentage", legacy.loan_percentage, settings.default_loan_percentage
    )

    record: Optional[LoanRow] = _select_loan(
        sources.loans, lambda row: parse_flag(row.get("is_active"))
    )
    legacy_loan = (
        _select_loan(blob.loans, lambda loan: loan.is_active) if blob is not None else None
    )

    if record is not None:
        amount = parse_number(record.get("amount"))
        balance = parse_number(
            first_present(
                record.get("current_balance"),
                record.get("principal_balance"),
                record.get("amount"),
            )
        )
        record_rate = first_present(record.get("interest_rate"))
        loan = LoanTerms(
            amount=amount or balance,
            balance=balance,
            annual_rate=(
                _loan_rate(record_rate) if record_rate is not None else interest_rate
            ),
            term_years=_loan_term(record.get("term_years"), term_years),
            payment_type=normalize_payment_type(record.get("payment_type")),
            monthly_payment=parse_number(record.get("monthly_payment")),
            is_live=True,
        )
        debt_source = "loan_record"
    elif legacy_loan is not None:
        loan = LoanTerms(
            amount=legacy_loan.amount or legacy_loan.current_balance,
            balance=legacy_loan.current_balance or legacy_loan.amount,
            annual_rate=(
                _loan_rate(legacy_loan.interest_rate)
                if legacy_loan.interest_rate is not None
                else interest_rate
            ),
            term_years=_loan_term(legacy_loan.term_years, term_years),
            payment_type=normalize_payment_type(legacy_loan.payment_type),
            monthly_payment=legacy_loan.monthly_payment,
            is_live=True,
        )
        debt_source = "legacy_loan"
    else:
        principal = purchase_price * loan_percentage
        loan = LoanTerms(
            amount=principal,
            balance=principal,
            annual_rate=interest_rate,
            term_years=term_years,
        )
        debt_source = "synthesized"
        warnings.append("No loan recorded; synthesizing acquisition loan")

    closing_cost = _sum_costs(
        sources.closing_costs,
        blob.closing_costs if blob is not None else None,
        purchase_price * settings.closing_cost_estimate_rate,
    )
    holding_cost = _sum_costs(
        sources.holding_costs,
        blob.holding_costs if blob is not None else None,
        purchase_price * settings.holding_cost_estimate_rate,
    )

    unit_count = int(parse_number(prop.get("unit_count")))
    if unit_count <= 0:
        if sources.rent_roll:
            unit_count = len(sources.rent_roll)
        else:
            unit_count = int(
                sum(_unit_type_count(ut.get("units")) for ut in sources.unit_types)
            )

    logger.debug(
        f"Gathered facts for property {prop.get('id')}: income={income_source}, "
        f"expenses={expense_source}, debt={debt_source}, legacy_blob={blob is not None}"
    )

    return PropertyFinancialFacts(
        property_id=str(prop.get("id")),
        status=normalize_status(prop.get("status")),
        unit_count=unit_count,
        purchase_price=purchase_price,
        rehab_cost=parse_number(prop.get("rehab_cost")),
        closing_cost=closing_cost,
        holding_cost=holding_cost,
        monthly_gross_rent=monthly_gross_rent,
        vacancy_rate=rate("vacancy_rate", legacy.vacancy_rate, settings.default_vacancy_rate),
        other_income=_resolve_other_income(sources, blob),
        expense_lines=expense_lines,
        expense_ratio=rate(
            "expense_ratio", legacy.expense_ratio, settings.default_expense_ratio
        ),
        management_rate=rate(
            "management_fee", legacy.management_fee, settings.default_management_rate
        ),
        loan=loan,
        market_cap_rate=rate(
            "market_cap_rate", legacy.market_cap_rate, settings.default_market_cap_rate
        ),
        exit_cap_rate=rate(
            "exit_cap_rate", legacy.exit_cap_rate, settings.default_market_cap_rate
        ),
        refinance_ltv=rate(
            "refinance_ltv", legacy.refinance_ltv, settings.default_refinance_ltv
        ),
        refinance_rate=rate(
            "refinance_interest_rate",
            legacy.refinance_interest_rate,
            settings.default_refinance_rate,
        ),
        recorded_arv=parse_number(prop.get("arv")),
        sale_price=parse_number(prop.get("sale_price")),
        total_profit=parse_number(prop.get("total_profit")),
        recorded_invested_capital=parse_number(prop.get("initial_capital")),
        income_source=income_source,
        expense_source=expense_source,
        debt_source=debt_source,
        warnings=tuple(warnings),
    )
