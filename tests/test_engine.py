"""
Tests for the amortization engine.

Covers payment sizing, the installment loop with its final-installment payoff,
the maturity date and the summary figures derived from a schedule.
"""

from datetime import date
from decimal import Decimal

import pytest

from loan_schedule.data_models import AmortizationSchedule, LoanTerms, PaymentFrequency
from loan_schedule.engine import (
    build_schedule,
    calculate_monthly_payment,
    calculate_payment_amount,
    compute_schedule,
    maturity_date,
    summarize,
)
from loan_schedule.periods import number_of_installments

EPSILON = Decimal("0.000001")


def make_terms(principal="100000", rate="0.06", term=360, frequency=PaymentFrequency.MONTHLY, start=date(2024, 1, 15)):
    return LoanTerms(
        principal=Decimal(principal),
        annual_interest_rate=Decimal(rate),
        term_months=term,
        frequency=frequency,
        start_date=start,
    )


SCENARIOS = [
    make_terms(),
    make_terms("250000", "0.065", 180, PaymentFrequency.QUARTERLY),
    make_terms("50000", "0.08", 30, PaymentFrequency.ANNUALLY),
    make_terms("12345.67", "0.1199", 37, PaymentFrequency.MONTHLY),
    make_terms("9000", "0.045", 13, PaymentFrequency.QUARTERLY),
    make_terms("18000", "0", 20, PaymentFrequency.ANNUALLY),
    make_terms("1000", "0.05", 1, PaymentFrequency.ANNUALLY),
]


class TestPaymentSizing:
    def test_standard_thirty_year_payment(self):
        payment = calculate_monthly_payment(Decimal("100000"), Decimal("0.06"), 360)
        assert float(payment) == pytest.approx(599.55, abs=0.01)

    def test_zero_rate_is_straight_line(self):
        assert calculate_monthly_payment(Decimal("12000"), Decimal("0"), 12) == Decimal("1000")

    @pytest.mark.parametrize("rate", ["1E-30", "1E-26", "1E-20"])
    def test_vanishing_rate_falls_back_to_straight_line(self, rate):
        payment = calculate_monthly_payment(Decimal("12000"), Decimal(rate), 12)
        assert payment == pytest.approx(Decimal("1000"))

    def test_vanishing_rate_schedule_pays_off(self):
        schedule = build_schedule(make_terms("12000", "1E-30", 12))
        assert len(schedule.installments) == 12
        assert schedule.installments[-1].remaining_balance == 0
        assert abs(schedule.total_principal - Decimal("12000")) < EPSILON

    def test_degenerate_inputs_give_zero(self):
        assert calculate_monthly_payment(Decimal("0"), Decimal("0.05"), 12) == 0
        assert calculate_monthly_payment(Decimal("1000"), Decimal("0.05"), 0) == 0
        assert calculate_monthly_payment(Decimal("-5"), Decimal("0.05"), 12) == 0

    def test_frequency_scales_monthly_payment(self):
        principal, rate, term = Decimal("80000"), Decimal("0.07"), 120
        monthly = calculate_payment_amount(principal, rate, term, PaymentFrequency.MONTHLY)
        quarterly = calculate_payment_amount(principal, rate, term, PaymentFrequency.QUARTERLY)
        annually = calculate_payment_amount(principal, rate, term, PaymentFrequency.ANNUALLY)
        assert quarterly == pytest.approx(monthly * 3)
        assert annually == pytest.approx(monthly * 12)

    def test_schedule_uses_scaled_payment(self):
        monthly = build_schedule(make_terms(frequency=PaymentFrequency.MONTHLY))
        quarterly = build_schedule(make_terms(frequency=PaymentFrequency.QUARTERLY))
        assert quarterly.recurring_payment_amount == pytest.approx(monthly.recurring_payment_amount * 3)


class TestScheduleInvariants:
    @pytest.mark.parametrize("terms", SCENARIOS)
    def test_principal_is_conserved(self, terms):
        schedule = build_schedule(terms)
        total = sum(i.principal_amount for i in schedule.installments)
        assert abs(total - terms.principal) < EPSILON
        assert abs(schedule.total_principal - terms.principal) < EPSILON

    @pytest.mark.parametrize("terms", SCENARIOS)
    def test_final_balance_is_exactly_zero(self, terms):
        schedule = build_schedule(terms)
        assert schedule.installments[-1].remaining_balance == Decimal("0")

    @pytest.mark.parametrize("terms", SCENARIOS)
    def test_balance_never_increases(self, terms):
        balances = [i.remaining_balance for i in build_schedule(terms).installments]
        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
        assert all(b >= 0 for b in balances)

    @pytest.mark.parametrize("terms", SCENARIOS)
    def test_payment_numbers_are_contiguous(self, terms):
        schedule = build_schedule(terms)
        expected = number_of_installments(terms.term_months, terms.frequency)
        assert [i.payment_number for i in schedule.installments] == list(range(1, expected + 1))
        assert schedule.total_payments == expected

    @pytest.mark.parametrize("terms", SCENARIOS)
    def test_totals_match_columns(self, terms):
        schedule = build_schedule(terms)
        assert schedule.total_interest == sum(i.interest_amount for i in schedule.installments)

    @pytest.mark.parametrize("terms", SCENARIOS)
    def test_final_amount_due_is_principal_plus_interest(self, terms):
        last = build_schedule(terms).installments[-1]
        assert last.amount_due == last.principal_amount + last.interest_amount

    def test_non_final_installments_pay_the_level_amount(self):
        schedule = build_schedule(make_terms())
        for installment in schedule.installments[:-1]:
            assert installment.amount_due == schedule.recurring_payment_amount
            assert installment.principal_amount + installment.interest_amount == pytest.approx(
                installment.amount_due
            )


class TestScheduleScenarios:
    def test_standard_thirty_year_mortgage(self):
        schedule = build_schedule(make_terms())
        first = schedule.installments[0]
        assert len(schedule.installments) == 360
        assert float(schedule.recurring_payment_amount) == pytest.approx(599.55, abs=0.01)
        assert float(first.interest_amount) == pytest.approx(500.00, abs=0.01)
        assert float(first.principal_amount) == pytest.approx(99.55, abs=0.01)
        assert float(schedule.installments[-1].amount_due) == pytest.approx(599.55, abs=0.01)

    def test_zero_rate_straight_line(self):
        schedule = build_schedule(make_terms("12000", "0", 12))
        assert len(schedule.installments) == 12
        for installment in schedule.installments:
            assert installment.interest_amount == 0
            assert installment.principal_amount == Decimal("1000")
        assert schedule.total_interest == 0

    def test_interest_accrues_over_the_whole_period(self):
        schedule = build_schedule(make_terms("120000", "0.12", 60, PaymentFrequency.QUARTERLY))
        # 1 % a month for three months on the opening balance
        assert schedule.installments[0].interest_amount == Decimal("3600")

    def test_interest_is_charged_on_declining_balance(self):
        schedule = build_schedule(make_terms())
        second = schedule.installments[1]
        opening = schedule.installments[0].remaining_balance
        assert second.interest_amount == opening * Decimal("0.005")

    def test_short_final_period_still_pays_off(self):
        schedule = build_schedule(make_terms("50000", "0.08", 30, PaymentFrequency.ANNUALLY))
        assert len(schedule.installments) == 3
        assert schedule.installments[-1].remaining_balance == 0

    def test_single_installment_loan(self):
        schedule = build_schedule(make_terms("1000", "0.05", 1, PaymentFrequency.ANNUALLY))
        (only,) = schedule.installments
        assert only.principal_amount == Decimal("1000")
        assert only.amount_due == only.principal_amount + only.interest_amount

    @pytest.mark.parametrize(
        "principal, term",
        [("0", 12), ("1000", 0), ("-100", 12), ("1000", -3)],
    )
    def test_degenerate_terms_give_empty_schedule(self, principal, term):
        schedule = build_schedule(make_terms(principal, "0.05", term))
        assert schedule == AmortizationSchedule()
        assert schedule.installments == ()
        assert schedule.total_payments == 0
        assert schedule.recurring_payment_amount == 0
        assert schedule.total_interest == 0
        assert schedule.total_principal == 0


class TestDates:
    def test_first_installment_falls_on_start_date(self):
        schedule = build_schedule(make_terms(start=date(2025, 3, 1)))
        assert schedule.installments[0].due_date == date(2025, 3, 1)

    def test_scheduled_and_due_dates_match(self):
        for installment in build_schedule(make_terms(term=24)).installments:
            assert installment.scheduled_date == installment.due_date

    def test_quarterly_dates_step_three_months_with_month_end_clamp(self):
        schedule = build_schedule(make_terms("10000", "0.05", 12, PaymentFrequency.QUARTERLY, date(2024, 1, 31)))
        assert [i.due_date for i in schedule.installments] == [
            date(2024, 1, 31),
            date(2024, 4, 30),
            date(2024, 7, 31),
            date(2024, 10, 31),
        ]

    def test_annual_dates(self):
        schedule = build_schedule(make_terms("10000", "0.05", 36, PaymentFrequency.ANNUALLY, date(2024, 2, 29)))
        assert [i.due_date for i in schedule.installments] == [
            date(2024, 2, 29),
            date(2025, 2, 28),
            date(2026, 2, 28),
        ]

    def test_maturity_date_adds_term(self):
        assert maturity_date(date(2024, 1, 15), 360) == date(2054, 1, 15)
        assert maturity_date(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_maturity_date_ignores_frequency(self):
        terms = make_terms("10000", "0.05", 13, PaymentFrequency.ANNUALLY, date(2024, 6, 1))
        _, summary = compute_schedule(terms)
        assert summary["maturity_date"] == "2025-07-01"
        assert summary["final_payment_date"] == "2025-06-01"


class TestSummary:
    def test_summary_figures(self):
        terms = make_terms()
        schedule = build_schedule(terms)
        summary = summarize(terms, schedule)
        assert summary["total_payments"] == 360
        assert summary["frequency"] == "monthly"
        assert summary["recurring_payment"] == pytest.approx(599.55, abs=0.01)
        assert summary["total_principal"] == pytest.approx(100000.0)
        assert summary["total_cost"] == pytest.approx(100000.0 + summary["total_interest"])
        assert summary["first_payment_date"] == "2024-01-15"
        assert summary["final_payment_date"] == "2053-12-15"
        assert summary["maturity_date"] == "2054-01-15"

    def test_summary_of_empty_schedule(self):
        terms = make_terms("0")
        schedule, summary = compute_schedule(terms)
        assert schedule.total_payments == 0
        assert summary["total_payments"] == 0
        assert summary["total_interest"] == 0.0
        assert summary["final_payment"] == 0.0
        assert summary["first_payment_date"] is None
        assert summary["maturity_date"] is None

    def test_schedule_to_dict_is_json_ready(self):
        schedule = build_schedule(make_terms("12000", "0", 12))
        data = schedule.to_dict()
        assert data["total_payments"] == 12
        assert data["recurring_payment_amount"] == 1000.0
        assert data["payments"][0] == {
            "payment_number": 1,
            "scheduled_date": "2024-01-15",
            "due_date": "2024-01-15",
            "amount_due": 1000.0,
            "principal_amount": 1000.0,
            "interest_amount": 0.0,
            "remaining_balance": 11000.0,
        }
