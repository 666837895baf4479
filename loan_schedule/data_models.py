"""Data models for the amortization engine.

This module defines the dataclasses exchanged with the engine: the loan terms
supplied by the caller, the individual installments of a schedule and the
schedule itself. All of them are frozen; the engine builds fresh instances on
every call and never mutates them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class PaymentFrequency(Enum):
    """How often an installment falls due."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


@dataclass(frozen=True)
class LoanTerms:
    """Terms of a loan as supplied by the caller.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed.
    annual_interest_rate: Decimal
        Nominal annual rate as a fraction, e.g. ``Decimal("0.065")`` for 6.5 %.
        Zero is a valid rate.
    term_months: int
        Length of the loan in calendar months.
    frequency: PaymentFrequency
        Installment frequency.
    start_date: date
        Date of the first installment.
    """

    principal: Decimal
    annual_interest_rate: Decimal
    term_months: int
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    start_date: date = field(default_factory=date.today)

    @property
    def is_degenerate(self) -> bool:
        """True when the terms cannot produce any installment."""
        return self.principal <= 0 or self.term_months <= 0


@dataclass(frozen=True)
class Installment:
    """One row of an amortization schedule.

    ``scheduled_date`` and ``due_date`` are always the same date; both are
    kept because downstream consumers store them separately.
    """

    payment_number: int
    scheduled_date: date
    due_date: date
    amount_due: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    remaining_balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payment_number": self.payment_number,
            "scheduled_date": self.scheduled_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "amount_due": float(self.amount_due),
            "principal_amount": float(self.principal_amount),
            "interest_amount": float(self.interest_amount),
            "remaining_balance": float(self.remaining_balance),
        }


@dataclass(frozen=True)
class AmortizationSchedule:
    """A complete schedule together with its aggregate totals."""

    installments: Tuple[Installment, ...] = ()
    total_payments: int = 0
    recurring_payment_amount: Decimal = Decimal("0")
    total_interest: Decimal = Decimal("0")
    total_principal: Decimal = Decimal("0")

    @property
    def final_installment(self) -> Optional[Installment]:
        return self.installments[-1] if self.installments else None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the schedule."""
        return {
            "payments": [i.to_dict() for i in self.installments],
            "total_payments": self.total_payments,
            "recurring_payment_amount": float(self.recurring_payment_amount),
            "total_interest": float(self.total_interest),
            "total_principal": float(self.total_principal),
        }
