"""
Tests for the financial calculation engine.
"""

import math

import pytest

from propmetrics.calculations.amortization import (
    calculate_interest_only_payment,
    calculate_monthly_payment,
    calculate_payment,
)
from propmetrics.calculations.debt import calculate_debt_service
from propmetrics.calculations.engine import calculate_metrics
from propmetrics.calculations.expenses import calculate_expenses, categorize_expense
from propmetrics.calculations.models import (
    PAYMENT_INTEREST_ONLY,
    STATUS_CASHFLOWING,
    STATUS_SOLD,
    CalculatedMetrics,
    ExpenseBreakdown,
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
from propmetrics.calculations.rollup import RollupMember, aggregate_entity
from propmetrics.errors import BatchItemError


def make_facts(**overrides):
    """Fourplex: 4 x $1,100, 5% vacancy, $12,000 flat expenses, $120k loan."""
    values = dict(
        property_id="p1",
        status=STATUS_CASHFLOWING,
        unit_count=4,
        purchase_price=150000,
        closing_cost=3000,
        holding_cost=1500,
        monthly_gross_rent=4400,
        vacancy_rate=0.05,
        expense_lines=(ExpenseLine(category="other", annual_amount=12000),),
        expense_source="itemized",
        expense_ratio=0.45,
        management_rate=0.08,
        loan=LoanTerms(
            amount=120000,
            balance=120000,
            annual_rate=0.065,
            term_years=30,
            is_live=True,
        ),
        market_cap_rate=0.055,
    )
    values.update(overrides)
    return PropertyFinancialFacts(**values)


def make_metrics(**overrides):
    fields = CalculatedMetrics.__dataclass_fields__
    values = {name: 0.0 for name in fields}
    values["expense_breakdown"] = ExpenseBreakdown()
    values.update(overrides)
    return CalculatedMetrics(**values)


def _flatten(payload):
    for value in payload.values():
        if isinstance(value, dict):
            yield from _flatten(value)
        else:
            yield value


class TestParsing:
    """Numeric parsing never raises."""

    def test_parse_currency_string(self):
        assert parse_number("$1,250.50") == 1250.50

    def test_parse_percent_string(self):
        assert parse_number("6.5%") == 6.5

    def test_parse_negative(self):
        assert parse_number("-$300") == -300

    def test_parse_scientific_notation(self):
        assert parse_number("1.5e3") == 1500.0
        assert parse_number("1e5") == 100000.0
        assert parse_number(" 2.5E-2 ") == pytest.approx(0.025)

    def test_parse_accounting_negative(self):
        assert parse_number("(1,200)") == -1200.0
        assert parse_number("($300.50)") == -300.50

    @pytest.mark.parametrize("value", [None, "", "abc", "1.2.3", float("nan"), float("inf"), [], True])
    def test_unparseable_values_are_zero(self, value):
        assert parse_number(value) == 0.0

    def test_normalize_percentage(self):
        assert normalize_rate(5) == pytest.approx(0.05)
        assert normalize_rate("6.5%") == pytest.approx(0.065)

    def test_normalize_decimal_unchanged(self):
        assert normalize_rate(0.05) == 0.05

    def test_normalize_boundary_exactly_one(self):
        """1.0 is read as 100%, not 1%."""
        assert normalize_rate(1.0) == 1.0
        assert normalize_rate(1.01) == pytest.approx(0.0101)

    def test_first_present_keeps_zero(self):
        assert first_present(None, "", 0, 5) == 0
        assert first_present(None, "  ") is None

    def test_parse_flag(self):
        assert parse_flag("Active") is True
        assert parse_flag("no") is False
        assert parse_flag(1) is True
        assert parse_flag(None) is False


class TestAmortization:
    """Test loan payment math."""

    def test_standard_payment(self):
        """$120,000 at 6.5% over 30 years."""
        assert calculate_payment(120000, 0.065, 360) == pytest.approx(758.48, abs=0.01)

    def test_zero_rate(self):
        assert calculate_payment(120000, 0.0, 360) == pytest.approx(333.3333, abs=0.001)

    def test_zero_principal_or_term(self):
        assert calculate_payment(0, 0.065, 360) == 0.0
        assert calculate_payment(120000, 0.065, 0) == 0.0

    def test_endless_term_is_interest_only(self):
        payment = calculate_payment(120000, 0.065, 10**7)
        assert payment == pytest.approx(120000 * 0.065 / 12)
        assert calculate_monthly_payment(120000, 0.065, 99999) == pytest.approx(650.0)

    def test_zero_growth_falls_back_to_straight_line(self):
        """A monthly rate of -200% leaves (1 + r) ** n == 1 for even n."""
        assert calculate_payment(120000, -24, 360) == pytest.approx(120000 / 360)

    def test_unbounded_term_years(self):
        assert calculate_monthly_payment(120000, 0.065, float("inf")) == 0.0

    def test_interest_only(self):
        assert calculate_interest_only_payment(100000, 0.06) == pytest.approx(500.0)
        assert calculate_monthly_payment(
            100000, 0.06, 30, PAYMENT_INTEREST_ONLY
        ) == pytest.approx(500.0)


class TestExpenses:
    """Test expense categorization and the management fee rule."""

    @pytest.mark.parametrize(
        "name,category",
        [
            ("Property Taxes", "taxes"),
            ("Hazard Insurance", "insurance"),
            ("Water/Sewer", "utilities"),
            ("Repairs & Maintenance", "maintenance"),
            ("Property Mgmt", "management"),
            ("Landscaping", "other"),
            ("", "other"),
        ],
    )
    def test_categorize(self, name, category):
        assert categorize_expense(name) == category

    def test_management_fee_added_when_not_itemized(self):
        result = calculate_expenses(make_facts(), 50160)
        assert result.management_fee == pytest.approx(4012.8)
        assert result.annual_operating_expenses == pytest.approx(16012.8)
        assert result.breakdown.management == pytest.approx(4012.8)

    def test_itemized_management_not_doubled(self):
        facts = make_facts(
            expense_lines=(
                ExpenseLine(category="other", annual_amount=12000),
                ExpenseLine(category="management", annual_amount=3000),
            )
        )
        result = calculate_expenses(facts, 50160)
        assert result.annual_operating_expenses == pytest.approx(15000)
        assert result.management_fee == pytest.approx(4012.8)
        assert result.breakdown.management == pytest.approx(3000)

    def test_percent_of_income_line(self):
        facts = make_facts(
            expense_lines=(ExpenseLine(category="maintenance", percent_of_income=0.10),)
        )
        result = calculate_expenses(facts, 50000)
        assert result.breakdown.maintenance == pytest.approx(5000)

    def test_ratio_fallback_split(self):
        facts = make_facts(expense_lines=(), expense_source="ratio")
        result = calculate_expenses(facts, 100000)
        assert result.annual_operating_expenses == pytest.approx(45000)
        assert result.breakdown.taxes == pytest.approx(11250)
        assert result.breakdown.insurance == pytest.approx(6750)
        assert result.breakdown.utilities == pytest.approx(6750)
        assert result.breakdown.maintenance == pytest.approx(11250)
        assert result.breakdown.management == pytest.approx(3600)
        assert result.breakdown.other == pytest.approx(5400)
        assert result.breakdown.total == pytest.approx(result.annual_operating_expenses)


class TestDebtService:
    def test_stored_payment_used_for_live_loan(self):
        loan = LoanTerms(amount=200000, balance=180000, annual_rate=0.05,
                         term_years=30, monthly_payment=1500, is_live=True)
        result = calculate_debt_service(loan)
        assert result.monthly_debt_service == 1500
        assert result.annual_debt_service == 18000
        assert result.current_debt == 180000

    def test_interest_only_payment_on_balance(self):
        loan = LoanTerms(amount=120000, balance=100000, annual_rate=0.06,
                         term_years=5, payment_type=PAYMENT_INTEREST_ONLY, is_live=True)
        assert calculate_debt_service(loan).monthly_debt_service == pytest.approx(500.0)

    def test_synthesized_loan_amortized(self):
        loan = LoanTerms(amount=150000, balance=150000, annual_rate=0.07, term_years=30)
        result = calculate_debt_service(loan)
        assert result.monthly_debt_service == pytest.approx(997.95, abs=0.01)
        assert result.current_debt == 150000


class TestCalculateMetrics:
    """End-to-end engine scenarios."""

    def test_fourplex_scenario(self):
        m = calculate_metrics(make_facts())

        assert m.annual_gross_rent == pytest.approx(52800)
        assert m.vacancy_loss == pytest.approx(2640)
        assert m.effective_gross_income == pytest.approx(50160)
        assert m.management_fee == pytest.approx(4012.8)
        assert m.annual_noi == pytest.approx(50160 - 12000 - 4012.8)
        assert m.monthly_debt_service == pytest.approx(758.48, abs=0.01)
        assert m.cap_rate == pytest.approx(m.annual_noi / 150000)

    def test_noi_and_cash_flow_identities_are_exact(self):
        m = calculate_metrics(make_facts())
        assert m.annual_noi == m.effective_gross_income - m.annual_operating_expenses
        assert m.annual_cash_flow == m.annual_noi - m.annual_debt_service
        assert m.monthly_cash_flow == m.monthly_noi - m.monthly_debt_service

    def test_zero_rent_scenario(self):
        m = calculate_metrics(make_facts(monthly_gross_rent=0))

        assert m.annual_gross_rent == 0
        assert m.effective_gross_income == 0
        assert m.annual_noi == pytest.approx(-12000)
        assert m.cap_rate == pytest.approx(-0.08)
        assert m.break_even_occupancy == 0.0

    def test_sold_property_equity_multiple(self):
        facts = make_facts(
            status=STATUS_SOLD,
            sale_price=500000,
            total_profit=120000,
            recorded_invested_capital=100000,
        )
        m = calculate_metrics(facts)
        assert m.current_arv == 500000
        assert m.equity_multiple == 1.2

    def test_arv_from_cap_rate(self):
        m = calculate_metrics(make_facts())
        assert m.current_arv == pytest.approx(m.annual_noi / 0.055)

    def test_recorded_arv_wins_over_cap_rate(self):
        m = calculate_metrics(make_facts(recorded_arv=210000))
        assert m.current_arv == 210000
        assert m.current_equity == pytest.approx(90000)
        assert m.loan_to_value == pytest.approx(120000 / 210000)

    def test_arv_falls_back_to_purchase_price(self):
        m = calculate_metrics(make_facts(monthly_gross_rent=0))
        assert m.current_arv == 150000

    def test_sold_without_sale_price_uses_recorded_arv(self):
        m = calculate_metrics(make_facts(status=STATUS_SOLD, recorded_arv=175000))
        assert m.current_arv == 175000

    def test_invested_capital_from_down_payment(self):
        m = calculate_metrics(make_facts())
        # (150,000 - 120,000) + 3,000 closing
        assert m.total_invested_capital == pytest.approx(33000)
        assert m.cash_on_cash_return == pytest.approx(m.annual_cash_flow / 33000)

    def test_unrealized_equity_multiple(self):
        m = calculate_metrics(make_facts(recorded_arv=200000, rehab_cost=10000))
        all_in = 150000 + 10000 + 3000 + 1500
        assert m.all_in_cost == pytest.approx(all_in)
        assert m.equity_multiple == pytest.approx((200000 - all_in) / 33000)

    def test_equity_multiple_not_negative(self):
        m = calculate_metrics(make_facts(recorded_arv=100000))
        assert m.equity_multiple == 0.0

    def test_risk_ratios(self):
        m = calculate_metrics(make_facts())
        assert m.break_even_occupancy == pytest.approx(
            (m.annual_operating_expenses + m.annual_debt_service) / 52800
        )
        assert m.operating_expense_ratio == pytest.approx(
            m.annual_operating_expenses / m.effective_gross_income
        )

    def test_dscr(self):
        m = calculate_metrics(make_facts())
        assert m.dscr == pytest.approx(m.annual_noi / m.annual_debt_service)

    def test_all_zero_facts_produce_no_nan(self):
        m = calculate_metrics(PropertyFinancialFacts(property_id="empty"))
        for value in _flatten(m.to_dict()):
            assert math.isfinite(value)
        assert m.cap_rate == 0.0
        assert m.cash_on_cash_return == 0.0
        assert m.dscr == 0.0
        assert m.equity_multiple == 0.0

    def test_repeat_calculation_is_identical(self):
        assert calculate_metrics(make_facts()) == calculate_metrics(make_facts())


class TestMonotonicity:
    def test_higher_rent_never_lowers_returns(self):
        low = calculate_metrics(make_facts(monthly_gross_rent=4400))
        high = calculate_metrics(make_facts(monthly_gross_rent=4500))

        assert high.effective_gross_income >= low.effective_gross_income
        assert high.annual_noi >= low.annual_noi
        assert high.cap_rate >= low.cap_rate
        assert high.cash_on_cash_return >= low.cash_on_cash_return

    def test_higher_fixed_expense_never_raises_noi(self):
        low = calculate_metrics(make_facts())
        high = calculate_metrics(
            make_facts(expense_lines=(ExpenseLine(category="taxes", annual_amount=13000),))
        )
        assert high.annual_noi <= low.annual_noi
        assert high.cap_rate <= low.cap_rate


class TestEntityRollup:
    def test_weighted_cap_rate(self):
        members = [
            RollupMember("a", 4, make_metrics(cap_rate=0.06, current_arv=200000)),
            RollupMember("b", 2, make_metrics(cap_rate=0.10, current_arv=100000)),
        ]
        rollup = aggregate_entity("Elm Holdings", members)

        assert rollup.weighted_cap_rate == pytest.approx(0.073333, abs=1e-6)
        assert rollup.total_aum == 300000
        assert rollup.total_units == 6
        assert rollup.property_count == 2
        assert rollup.property_ids == ("a", "b")

    def test_cash_on_cash_weighted_by_invested_capital(self):
        members = [
            RollupMember("a", 1, make_metrics(cash_on_cash_return=0.10, total_invested_capital=30000)),
            RollupMember("b", 1, make_metrics(cash_on_cash_return=0.04, total_invested_capital=10000)),
        ]
        rollup = aggregate_entity("Elm Holdings", members)
        assert rollup.weighted_cash_on_cash == pytest.approx(0.085)
        assert rollup.total_invested_capital == 40000

    def test_sums(self):
        members = [
            RollupMember("a", 1, make_metrics(current_equity=50000, annual_cash_flow=6000)),
            RollupMember("b", 1, make_metrics(current_equity=-5000, annual_cash_flow=-1200)),
        ]
        rollup = aggregate_entity("Elm Holdings", members)
        assert rollup.total_equity == 45000
        assert rollup.total_annual_cash_flow == pytest.approx(4800)

    def test_empty_entity(self):
        rollup = aggregate_entity("Nobody LLC", [])
        assert rollup.property_count == 0
        assert rollup.weighted_cap_rate == 0.0
        assert rollup.weighted_cash_on_cash == 0.0

    def test_errors_carried(self):
        error = BatchItemError("c", "StorageError", "disk full")
        rollup = aggregate_entity("Elm Holdings", [], [error])
        assert rollup.errors == (error,)
