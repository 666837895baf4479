"""Calendar semantics of the supported payment frequencies."""

from __future__ import annotations

import math
from typing import Dict

from .data_models import PaymentFrequency

MONTHS_BETWEEN_INSTALLMENTS: Dict[PaymentFrequency, int] = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.QUARTERLY: 3,
    PaymentFrequency.ANNUALLY: 12,
}


def months_between_installments(frequency: PaymentFrequency) -> int:
    """Return the number of calendar months covered by one installment."""
    return MONTHS_BETWEEN_INSTALLMENTS[frequency]


def number_of_installments(term_months: int, frequency: PaymentFrequency) -> int:
    """Return how many installments are needed to cover ``term_months``.

    The count is rounded up, so a term that is not a multiple of the period
    length still gets a (shorter) final installment.
    """
    if term_months <= 0:
        return 0
    step = months_between_installments(frequency)
    return math.ceil(term_months / step)
