"""
registry.py - Lease Registry and Payment Processing

This module computes every lease state transition:
1. compute_lease_creation() - validate terms, allocate an id, open the lease
2. compute_payment() - apply one full payment, record lateness and late fee
3. compute_partial_payment() - validate and acknowledge a partial amount
4. compute_termination() - close a lease early
5. is_overdue() / calculate_total_owed() - read-only projections

Pattern:
    Each compute_* function reads through a ContractView and either raises a
    LeaseError (nothing is written) or returns a PendingTransaction whose
    changes the contract applies atomically.

    Creation:
        leases[id]      None   -> LeaseRecord(ACTIVE)
        state           next_lease_id + 1, total_active_leases + 1
        lessors[owner]  active_leases + 1, total_leases_created + 1

    Payment:
        payments[(id, n)]  None -> PaymentRecord
        leases[id]         payments_made + 1, due + 30 days, maybe COMPLETED
        state              total_active_leases - 1 (only on completion)
"""

from __future__ import annotations
from dataclasses import replace
from typing import List, Optional

from .clock import days_to_height, height_to_days
from .core import (
    ContractView, LeaseRecord, LeaseStatus, PaymentRecord,
    PendingTransaction, PaymentReceipt, PartialPaymentReceipt,
    TerminationReceipt, Role, StateChange,
    InvalidTerms, InsufficientPayment, LeaseExpired, LeaseNotFound,
    LeaseTerminated, Unauthorized,
    GRACE_PERIOD_DAYS, MAX_DESCRIPTION_LENGTH, PAYMENT_PERIOD_DAYS,
    STATE_KEY, TABLE_LEASES, TABLE_PAYMENTS, TABLE_STATE,
    build_transaction, has_any_role, require_account, require_text, require_uint,
)
from .lessors import compute_lessor_counters
from .terms import compute_late_fee, validate_terms


# Roles allowed to terminate a lease.
TERMINATION_ROLES = frozenset({Role.OWNER, Role.RENTER, Role.ADMINISTRATOR})

# Roles allowed to pay a lease.
PAYMENT_ROLES = frozenset({Role.RENTER})


# =============================================================================
# HELPERS
# =============================================================================

def _require_lease(view: ContractView, lease_id: int) -> LeaseRecord:
    lease = view.get_lease(lease_id)
    if lease is None:
        raise LeaseNotFound(f"Lease {lease_id} not found")
    return lease


def _require_payable(view: ContractView, caller: str, lease_id: int) -> LeaseRecord:
    """Shared guards for full and partial payments, in error-priority order."""
    lease = _require_lease(view, lease_id)
    if not has_any_role(caller, lease, view.administrator, PAYMENT_ROLES):
        raise Unauthorized(f"{caller} is not the renter of lease {lease_id}")
    if lease.status != LeaseStatus.ACTIVE:
        raise LeaseTerminated(f"Lease {lease_id} is {lease.status.name}")
    return lease


def _active_count_change(view: ContractView, delta: int) -> StateChange:
    old = view.get_state()
    new = replace(old, total_active_leases=old.total_active_leases + delta)
    return StateChange(TABLE_STATE, STATE_KEY, old, new)


# =============================================================================
# CREATION
# =============================================================================

def compute_lease_creation(
    view: ContractView,
    caller: str,
    renter: str,
    asset_description: str,
    monthly_payment: int,
    duration: int,
    security_deposit: int,
) -> PendingTransaction:
    """
    Open a new lease owned by the caller.

    Args:
        view: Read-only contract access
        caller: Owner creating the lease
        renter: Account that will make the payments
        asset_description: Free text, at most MAX_DESCRIPTION_LENGTH characters
        monthly_payment: Amount due each 30-day period
        duration: Lease length in days
        security_deposit: Deposit, at least monthly_payment

    Returns:
        PendingTransaction whose receipt is the new lease id

    Raises:
        Unauthorized: If the contract is paused
        InvalidTerms: If the terms fail validation or renter == caller
        ValueError: If an argument is outside its type domain

    Example:
        pending = compute_lease_creation(
            contract, "alice", "bob", "2023 Toyota Camry",
            monthly_payment=100000, duration=365, security_deposit=200000,
        )
        contract.execute(pending)   # pending.receipt == 1
    """
    require_account("caller", caller)
    require_account("renter", renter)
    require_text("asset_description", asset_description, MAX_DESCRIPTION_LENGTH)
    require_uint("monthly_payment", monthly_payment)
    require_uint("duration", duration)
    require_uint("security_deposit", security_deposit)

    state = view.get_state()
    if state.paused:
        raise Unauthorized("Contract is paused")
    if not validate_terms(duration, monthly_payment, security_deposit):
        raise InvalidTerms(
            f"Invalid terms: duration={duration}, monthly_payment={monthly_payment}, "
            f"security_deposit={security_deposit}"
        )
    if renter == caller:
        raise InvalidTerms("Owner cannot lease to themselves")

    now = view.current_height
    lease_id = state.next_lease_id
    lease = LeaseRecord(
        lease_id=lease_id,
        owner=caller,
        renter=renter,
        asset_description=asset_description,
        monthly_payment=monthly_payment,
        start_height=now,
        duration_days=duration,
        total_payments=duration // PAYMENT_PERIOD_DAYS,
        payments_made=0,
        status=LeaseStatus.ACTIVE,
        security_deposit=security_deposit,
        accumulated_late_fees=0,
        next_payment_due=now + days_to_height(PAYMENT_PERIOD_DAYS),
    )
    new_state = replace(
        state,
        next_lease_id=lease_id + 1,
        total_active_leases=state.total_active_leases + 1,
    )

    changes = [
        StateChange(TABLE_LEASES, lease_id, None, lease),
        StateChange(TABLE_STATE, STATE_KEY, state, new_state),
        compute_lessor_counters(view, caller),
    ]
    return build_transaction(view, "create_lease", caller, changes, receipt=lease_id)


# =============================================================================
# PAYMENTS
# =============================================================================

def compute_payment(view: ContractView, caller: str, lease_id: int) -> PendingTransaction:
    """
    Apply one full monthly payment.

    Lateness is measured against next_payment_due with no grace period:
        is_late   = now > next_payment_due
        days_late = height_to_days(now - next_payment_due) if is_late else 0
        late_fee  = compute_late_fee(monthly_payment, days_late)

    Lateness is recorded, never rejected. The final payment marks the lease
    COMPLETED and releases it from the active count.

    Returns:
        PendingTransaction whose receipt is a PaymentReceipt

    Raises:
        LeaseNotFound: Unknown lease id
        Unauthorized: Caller is not the renter
        LeaseTerminated: Lease is not ACTIVE
        LeaseExpired: All payments already made
    """
    lease = _require_payable(view, caller, lease_id)
    if lease.payments_made >= lease.total_payments:
        raise LeaseExpired(f"Lease {lease_id} has no payments outstanding")

    now = view.current_height
    is_late = now > lease.next_payment_due
    days_late = height_to_days(now - lease.next_payment_due) if is_late else 0
    late_fee = compute_late_fee(lease.monthly_payment, days_late)

    payment_number = lease.payments_made + 1
    completed = payment_number >= lease.total_payments

    payment = PaymentRecord(
        lease_id=lease_id,
        payment_number=payment_number,
        amount=lease.monthly_payment,
        paid_at_height=now,
        late_fee=late_fee,
        is_late=is_late,
    )
    new_lease = replace(
        lease,
        payments_made=payment_number,
        accumulated_late_fees=lease.accumulated_late_fees + late_fee,
        next_payment_due=lease.next_payment_due + days_to_height(PAYMENT_PERIOD_DAYS),
        status=LeaseStatus.COMPLETED if completed else LeaseStatus.ACTIVE,
    )

    changes = [
        StateChange(TABLE_PAYMENTS, (lease_id, payment_number), None, payment),
        StateChange(TABLE_LEASES, lease_id, lease, new_lease),
    ]
    if completed:
        changes.append(_active_count_change(view, -1))

    receipt = PaymentReceipt(
        lease_id=lease_id,
        payment_number=payment_number,
        amount=lease.monthly_payment,
        late_fee=late_fee,
        is_late=is_late,
    )
    return build_transaction(view, "make_payment", caller, changes, receipt=receipt)


def compute_partial_payment(
    view: ContractView,
    caller: str,
    lease_id: int,
    amount: int,
) -> PendingTransaction:
    """
    Validate and acknowledge a payment smaller than the monthly amount.

    Only validates: the lease balance, payment count and payment history are
    left untouched, so the returned transaction carries no changes.

    Raises:
        LeaseNotFound, Unauthorized, LeaseTerminated: As for compute_payment
        InsufficientPayment: If amount is zero
    """
    require_uint("amount", amount)
    _require_payable(view, caller, lease_id)
    if amount == 0:
        raise InsufficientPayment("Payment amount must be greater than zero")

    receipt = PartialPaymentReceipt(lease_id=lease_id, amount=amount)
    return build_transaction(view, "make_partial_payment", caller, receipt=receipt)


# =============================================================================
# TERMINATION
# =============================================================================

def compute_termination(
    view: ContractView,
    caller: str,
    lease_id: int,
    reason: str,
) -> PendingTransaction:
    """
    Terminate a lease early.

    The owner, the renter or the contract administrator may terminate. Only
    an already TERMINATED lease blocks re-termination; a COMPLETED lease can
    still be moved to TERMINATED, but it no longer counts as active, so the
    active count is left alone in that case.

    Raises:
        LeaseNotFound: Unknown lease id
        Unauthorized: Caller holds none of the termination roles
        LeaseTerminated: Lease already TERMINATED
    """
    require_text("reason", reason, MAX_DESCRIPTION_LENGTH)
    lease = _require_lease(view, lease_id)
    if not has_any_role(caller, lease, view.administrator, TERMINATION_ROLES):
        raise Unauthorized(f"{caller} may not terminate lease {lease_id}")
    if lease.status == LeaseStatus.TERMINATED:
        raise LeaseTerminated(f"Lease {lease_id} already terminated")

    changes = [
        StateChange(TABLE_LEASES, lease_id, lease, replace(lease, status=LeaseStatus.TERMINATED)),
    ]
    if lease.status in (LeaseStatus.ACTIVE, LeaseStatus.LATE):
        changes.append(_active_count_change(view, -1))

    receipt = TerminationReceipt(lease_id=lease_id, terminated_by=caller, reason=reason)
    return build_transaction(view, "terminate_lease", caller, changes, receipt=receipt)


# =============================================================================
# QUERIES
# =============================================================================

def is_overdue(view: ContractView, lease_id: int) -> bool:
    """
    True only if the lease is ACTIVE and past its due date plus the grace period.

    False for unknown ids and for any non-ACTIVE lease, however much time
    has passed.
    """
    lease = view.get_lease(lease_id)
    if lease is None or lease.status != LeaseStatus.ACTIVE:
        return False
    return view.current_height > lease.next_payment_due + days_to_height(GRACE_PERIOD_DAYS)


def calculate_total_owed(view: ContractView, lease_id: int) -> Optional[int]:
    """
    Everything still owed on a lease.

    total = remaining_payments * monthly_payment
            + accumulated_late_fees
            + current late fee (only while overdue, on days since the due date)

    Returns None for unknown ids.

    Example:
        12 payments of 100000, 2 made, 10 days past due (overdue)
        total = 10 * 100000 + 0 + 5000 * 10 = 1050000
    """
    lease = view.get_lease(lease_id)
    if lease is None:
        return None

    base = lease.remaining_payments * lease.monthly_payment
    current_fee = 0
    if is_overdue(view, lease_id):
        days_late = height_to_days(view.current_height - lease.next_payment_due)
        current_fee = compute_late_fee(lease.monthly_payment, days_late)
    return base + lease.accumulated_late_fees + current_fee


def get_leases_by_renter(view: ContractView, renter: str) -> List[LeaseRecord]:
    """Declared lookup by renter. No renter index exists, so this is always empty."""
    return []
