"""
terms.py - Lease term validation and late fee calculation

Pure functions, no ContractView:
    validate_terms(duration, monthly_payment, security_deposit) -> bool
    compute_late_fee(payment_amount, days_late) -> int

All arithmetic is integer arithmetic on the smallest currency unit.
"""

from __future__ import annotations

from .core import (
    LATE_FEE_RATE, MIN_LEASE_DURATION, MAX_LEASE_DURATION,
)


def validate_terms(duration: int, monthly_payment: int, security_deposit: int) -> bool:
    """
    Check a candidate lease's terms.

    Accepts only if:
        MIN_LEASE_DURATION <= duration <= MAX_LEASE_DURATION
        monthly_payment > 0
        security_deposit >= monthly_payment

    Callers map a False result to InvalidTerms.
    """
    return (
        MIN_LEASE_DURATION <= duration <= MAX_LEASE_DURATION
        and monthly_payment > 0
        and security_deposit >= monthly_payment
    )


def compute_late_fee(payment_amount: int, days_late: int) -> int:
    """
    Late fee for one payment.

    Fee = floor(payment_amount * LATE_FEE_RATE / 100) * days_late

    The per-day fee is floored before multiplying, so a payment of 19 units
    carries no late fee at a 5% rate.

    Example:
        100000 units, 3 days late
        Fee = 5000 * 3 = 15000
    """
    if days_late <= 0:
        return 0
    return (payment_amount * LATE_FEE_RATE // 100) * days_late
