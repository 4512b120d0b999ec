"""
fake_view.py - Test Helper for ContractView

Provides a minimal ContractView implementation for testing compute functions
without requiring a full LeaseContract instance.
"""

from __future__ import annotations
from typing import Dict, Optional, Tuple

from leaselock.clock import days_to_height
from leaselock.core import (
    ContractState, LeaseError, LeaseRecord, LeaseStatus, LessorProfile, PaymentRecord,
    PAYMENT_PERIOD_DAYS,
)


class FakeView:
    """
    Minimal ContractView implementation for testing compute functions.

    Example:
        view = FakeView(
            leases={1: make_lease(1, owner="alice", renter="bob")},
            height=5000,
        )

        is_overdue(view, 1)
        # Returns: False (due at 4320, grace runs to 5328)
    """

    def __init__(
        self,
        leases: Optional[Dict[int, LeaseRecord]] = None,
        payments: Optional[Dict[Tuple[int, int], PaymentRecord]] = None,
        profiles: Optional[Dict[str, LessorProfile]] = None,
        state: Optional[ContractState] = None,
        height: int = 0,
        administrator: str = "deployer",
    ):
        self._leases = leases or {}
        self._payments = payments or {}
        self._profiles = profiles or {}
        self._state = state or ContractState(next_lease_id=len(self._leases) + 1)
        self._height = height
        self._administrator = administrator

    @property
    def current_height(self) -> int:
        return self._height

    @property
    def administrator(self) -> str:
        return self._administrator

    def get_state(self) -> ContractState:
        return self._state

    def get_lease(self, lease_id: int) -> Optional[LeaseRecord]:
        return self._leases.get(lease_id)

    def get_payment(self, lease_id: int, payment_number: int) -> Optional[PaymentRecord]:
        return self._payments.get((lease_id, payment_number))

    def get_profile(self, owner: str) -> Optional[LessorProfile]:
        return self._profiles.get(owner)


def make_lease(
    lease_id: int = 1,
    owner: str = "alice",
    renter: str = "bob",
    monthly_payment: int = 100000,
    duration_days: int = 365,
    security_deposit: int = 200000,
    start_height: int = 0,
    payments_made: int = 0,
    status: LeaseStatus = LeaseStatus.ACTIVE,
    accumulated_late_fees: int = 0,
    next_payment_due: Optional[int] = None,
) -> LeaseRecord:
    """Build a LeaseRecord the way create_lease would at start_height."""
    if next_payment_due is None:
        next_payment_due = start_height + days_to_height(PAYMENT_PERIOD_DAYS) * (payments_made + 1)
    return LeaseRecord(
        lease_id=lease_id,
        owner=owner,
        renter=renter,
        asset_description=f"Test asset {lease_id}",
        monthly_payment=monthly_payment,
        start_height=start_height,
        duration_days=duration_days,
        total_payments=duration_days // PAYMENT_PERIOD_DAYS,
        payments_made=payments_made,
        status=status,
        security_deposit=security_deposit,
        accumulated_late_fees=accumulated_late_fees,
        next_payment_due=next_payment_due,
    )


# =============================================================================
# ACCOUNTS AND CONTRACT HELPERS
# =============================================================================

ADMIN = "deployer"
OWNER = "wallet_1"
RENTER = "wallet_2"
STRANGER = "wallet_3"


def advance_days(contract, days: int) -> int:
    """Advance the contract height by whole days and return the new height."""
    return contract.mine_blocks(days_to_height(days))


def create_standard_lease(contract, owner: str = OWNER, renter: str = RENTER) -> int:
    """One-year lease: 12 payments of 100000, deposit 200000."""
    return contract.create_lease(
        owner, renter, "2023 Toyota Camry - VIN: 1234567890",
        100000, 365, 200000,
    )


# =============================================================================
# RANDOM OPERATION DRIVER (conformance tests)
# =============================================================================

ACCOUNTS = (ADMIN, OWNER, RENTER, STRANGER)


def run_operation(contract, op) -> bool:
    """
    Apply one (kind, caller, lease_id, amount) tuple to a contract.

    Returns True if the call succeeded, False if it raised a LeaseError.
    Input-domain errors are never generated, so any other exception fails
    the test.
    """
    kind, caller, lease_id, amount = op
    try:
        if kind == "create":
            other = RENTER if caller != RENTER else OWNER
            contract.create_lease(caller, other, "Fleet vehicle", 1000, 30 * (amount % 13 + 1), 2000)
        elif kind == "pay":
            contract.make_payment(caller, lease_id)
        elif kind == "partial":
            contract.make_partial_payment(caller, lease_id, amount)
        elif kind == "terminate":
            contract.terminate_lease(caller, lease_id, "Random termination")
        elif kind == "pause":
            contract.pause_contract(caller)
        elif kind == "resume":
            contract.resume_contract(caller)
        elif kind == "profile":
            contract.update_lessor_profile(caller, f"Lessor {amount}")
        elif kind == "wait":
            contract.mine_blocks(amount * 37)
        else:
            raise ValueError(f"unknown operation kind: {kind}")
    except LeaseError:
        return False
    return True
