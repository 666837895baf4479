"""Core calculation engine for loan amortization.

This module turns a set of ``LoanTerms`` into an ``AmortizationSchedule``: it
sizes the level payment with the annuity formula, walks the installments
splitting every payment into interest and principal on the declining balance,
and forces the final installment to retire whatever balance is left. It also
derives the maturity date and the summary figures shown next to a loan.

Everything here is a pure function of its arguments.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, getcontext
from typing import Any, Dict, List, Tuple

from .data_models import AmortizationSchedule, Installment, LoanTerms, PaymentFrequency
from .periods import months_between_installments, number_of_installments
from .utils import add_months

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
NEGLIGIBLE_RATE = Decimal("1E-12")


def calculate_monthly_payment(principal: Decimal, annual_rate: Decimal, term_months: int) -> Decimal:
    """Return the level monthly payment for a loan.

    The formula is:

        payment = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` the monthly rate (``annual_rate / 12``)
    and ``n`` the term in months. A zero rate degenerates to straight-line
    repayment ``P / n``, and so does a rate too small to register at the
    context precision. Non-positive principal or term yield zero.
    """
    if principal <= 0 or term_months <= 0:
        return ZERO
    if annual_rate == 0:
        return principal / Decimal(term_months)
    monthly_rate = annual_rate / Decimal(12)
    if monthly_rate * term_months < NEGLIGIBLE_RATE:
        # P / n is within a relative 1e-12 of the annuity payment here.
        return principal / Decimal(term_months)
    factor = (1 + monthly_rate) ** term_months
    return principal * (monthly_rate * factor) / (factor - 1)


def calculate_payment_amount(
    principal: Decimal,
    annual_rate: Decimal,
    term_months: int,
    frequency: PaymentFrequency,
) -> Decimal:
    """Return the recurring payment for the given frequency.

    The monthly payment is multiplied by the number of months an installment
    covers (3 for quarterly, 12 for annually). This is not a true annuity at a
    compounded quarterly or annual rate; amounts must match the monthly
    scaling, so keep it that way.
    """
    monthly_payment = calculate_monthly_payment(principal, annual_rate, term_months)
    return monthly_payment * months_between_installments(frequency)


def maturity_date(start_date: date, term_months: int) -> date:
    """Return the date the loan term ends: ``start_date`` plus ``term_months``."""
    return add_months(start_date, term_months)


def build_schedule(terms: LoanTerms) -> AmortizationSchedule:
    """Build the full amortization schedule for ``terms``.

    Parameters
    ----------
    terms: LoanTerms
        The loan to amortize. Degenerate terms (non-positive principal or
        term) produce an empty schedule.

    Returns
    -------
    AmortizationSchedule
        Installments numbered from 1, the first one due on
        ``terms.start_date``. The last installment always leaves a balance of
        exactly zero.

    Due dates are anchored on ``terms.start_date`` (installment *i* falls
    ``(i - 1) * step`` months after it), so a month-end start date does not
    drift after a short month.
    """
    if terms.is_degenerate:
        logger.debug(
            "Degenerate loan terms (principal=%s, term=%s); returning empty schedule",
            terms.principal,
            terms.term_months,
        )
        return AmortizationSchedule()

    monthly_rate = terms.annual_interest_rate / Decimal(12)
    step = months_between_installments(terms.frequency)
    count = number_of_installments(terms.term_months, terms.frequency)
    payment = calculate_payment_amount(
        terms.principal, terms.annual_interest_rate, terms.term_months, terms.frequency
    )

    installments: List[Installment] = []
    remaining_balance = terms.principal
    for number in range(1, count + 1):
        current_date = add_months(terms.start_date, (number - 1) * step)
        interest_amount = remaining_balance * monthly_rate * step
        principal_amount = payment - interest_amount

        if number == count:
            # Last installment pays off whatever is left, absorbing any drift.
            principal_amount = remaining_balance
            amount_due = principal_amount + interest_amount
            remaining_balance = ZERO
        else:
            if principal_amount > remaining_balance:
                principal_amount = remaining_balance
            remaining_balance -= principal_amount
            amount_due = payment

        installments.append(
            Installment(
                payment_number=number,
                scheduled_date=current_date,
                due_date=current_date,
                amount_due=amount_due,
                principal_amount=principal_amount,
                interest_amount=interest_amount,
                remaining_balance=remaining_balance,
            )
        )

    total_interest = sum((i.interest_amount for i in installments), ZERO)
    total_principal = sum((i.principal_amount for i in installments), ZERO)
    logger.debug(
        "Built schedule: %d %s installments of %s, total interest %s",
        count,
        terms.frequency.value,
        payment,
        total_interest,
    )
    return AmortizationSchedule(
        installments=tuple(installments),
        total_payments=count,
        recurring_payment_amount=payment,
        total_interest=total_interest,
        total_principal=total_principal,
    )


def summarize(terms: LoanTerms, schedule: AmortizationSchedule) -> Dict[str, Any]:
    """Return the headline figures of a loan and its schedule.

    Amounts are floats and dates ISO strings so the result can be dumped to
    JSON directly. Date fields are ``None`` for an empty schedule.
    """
    installments = schedule.installments
    first = installments[0] if installments else None
    last = schedule.final_installment
    return {
        "principal": float(terms.principal),
        "annual_interest_rate": float(terms.annual_interest_rate),
        "term_months": terms.term_months,
        "frequency": terms.frequency.value,
        "recurring_payment": float(schedule.recurring_payment_amount),
        "final_payment": float(last.amount_due) if last else 0.0,
        "total_payments": schedule.total_payments,
        "total_interest": float(schedule.total_interest),
        "total_principal": float(schedule.total_principal),
        "total_cost": float(schedule.total_principal + schedule.total_interest),
        "first_payment_date": first.due_date.isoformat() if first else None,
        "final_payment_date": last.due_date.isoformat() if last else None,
        "maturity_date": (
            maturity_date(terms.start_date, terms.term_months).isoformat()
            if not terms.is_degenerate
            else None
        ),
    }


def compute_schedule(terms: LoanTerms) -> Tuple[AmortizationSchedule, Dict[str, Any]]:
    """Build the schedule for ``terms`` and return it together with its summary."""
    schedule = build_schedule(terms)
    return schedule, summarize(terms, schedule)
