"""
Core types and pure helpers for the lease contract.

This module provides the foundational data structures and protocols:
1. Protocols: ContractView for read-only contract access
2. Immutable records: LeaseRecord, PaymentRecord, LessorProfile, ContractState
3. Exceptions: LeaseError and one subclass per stable error code
4. Transactions: StateChange, PendingTransaction, Transaction
5. Authorization: Role and the permission predicate over a lease

All functions in this module are pure and operate on read-only views.
No function can mutate contract state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import (
    Dict, List, Optional, Any, Protocol, Tuple, FrozenSet, runtime_checkable
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Host height increments per day. All day/height conversions go through this.
BLOCKS_PER_DAY = 144

# Fixed payment period approximation (no calendar months).
PAYMENT_PERIOD_DAYS = 30

# Days after a due date before a lease counts as overdue.
GRACE_PERIOD_DAYS = 7

# Late fee, percent of the monthly payment charged per day late.
LATE_FEE_RATE = 5

# Lease duration bounds, in days.
MIN_LEASE_DURATION = 30
MAX_LEASE_DURATION = 36500

# Text field bounds.
MAX_DESCRIPTION_LENGTH = 256
MAX_NAME_LENGTH = 64

# Reputation placeholder assigned to every new lessor profile.
DEFAULT_REPUTATION_SCORE = 50

# Upper bound on ids accepted by the bulk lease lookup.
MAX_BULK_LOOKUP = 10

# Table names used in StateChange records.
TABLE_LEASES = "leases"
TABLE_PAYMENTS = "payments"
TABLE_LESSORS = "lessors"
TABLE_STATE = "state"

# Key of the singleton contract state row.
STATE_KEY = "contract"


# ============================================================================
# ENUMS
# ============================================================================

class LeaseStatus(int, Enum):
    """Lifecycle status of a lease record."""
    ACTIVE = 1
    LATE = 2          # Reserved; no operation currently assigns it
    TERMINATED = 3
    COMPLETED = 4


class ErrorCode(int, Enum):
    """Stable numeric error codes returned to callers."""
    UNAUTHORIZED = 100
    LEASE_NOT_FOUND = 101
    LEASE_ALREADY_EXISTS = 102
    PAYMENT_LATE = 103
    INSUFFICIENT_PAYMENT = 104
    LEASE_EXPIRED = 105
    INVALID_TERMS = 106
    LEASE_TERMINATED = 107


class ExecuteResult(Enum):
    """
    Outcome of a transaction execution attempt.

    APPLIED: Every change was validated and written.
    REJECTED: At least one change was stale; nothing was written.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class Role(Enum):
    """Closed set of roles a caller can hold with respect to a lease."""
    OWNER = "owner"
    RENTER = "renter"
    ADMINISTRATOR = "administrator"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LeaseError(Exception):
    """Base exception for all contract errors. Subclasses carry a stable code."""
    code: Optional[ErrorCode] = None

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)


class Unauthorized(LeaseError):
    """Raised when the caller lacks the role an operation requires, or the contract is paused."""
    code = ErrorCode.UNAUTHORIZED


class LeaseNotFound(LeaseError):
    """Raised when the lease id does not exist."""
    code = ErrorCode.LEASE_NOT_FOUND


class LeaseAlreadyExists(LeaseError):
    """Reserved code; lease ids are allocated by the contract so this is never raised."""
    code = ErrorCode.LEASE_ALREADY_EXISTS


class PaymentLate(LeaseError):
    """Reserved code; lateness is recorded on the payment, never rejected."""
    code = ErrorCode.PAYMENT_LATE


class InsufficientPayment(LeaseError):
    """Raised when a payment amount is zero."""
    code = ErrorCode.INSUFFICIENT_PAYMENT


class LeaseExpired(LeaseError):
    """Raised when every required payment has already been made."""
    code = ErrorCode.LEASE_EXPIRED


class InvalidTerms(LeaseError):
    """Raised when lease terms fail validation or the renter is the owner."""
    code = ErrorCode.INVALID_TERMS


class LeaseTerminated(LeaseError):
    """Raised when the lease is no longer active."""
    code = ErrorCode.LEASE_TERMINATED


ERRORS_BY_CODE: Dict[ErrorCode, type] = {
    cls.code: cls for cls in (
        Unauthorized, LeaseNotFound, LeaseAlreadyExists, PaymentLate,
        InsufficientPayment, LeaseExpired, InvalidTerms, LeaseTerminated,
    )
}


# ============================================================================
# INPUT DOMAIN CHECKS
# ============================================================================

def require_uint(name: str, value: int) -> int:
    """Reject anything that is not a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def require_text(name: str, value: str, max_length: int) -> str:
    """Reject non-strings and strings longer than max_length."""
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    if len(value) > max_length:
        raise ValueError(f"{name} exceeds {max_length} characters ({len(value)})")
    return value


def require_account(name: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} cannot be empty")
    return value


# ============================================================================
# RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class LeaseRecord:
    """
    A lease agreement between an owner and a renter.

    Attributes:
        lease_id: Sequential identifier, starting at 1
        owner: Account that created the lease and owns the asset
        renter: Account obligated to make the payments
        asset_description: Free text, at most MAX_DESCRIPTION_LENGTH characters
        monthly_payment: Amount due each period, in the smallest currency unit
        start_height: Host height at creation
        duration_days: Lease length in days
        total_payments: Required payment count (duration_days // PAYMENT_PERIOD_DAYS)
        payments_made: Payments applied so far
        status: Current LeaseStatus
        security_deposit: Deposit amount, never below monthly_payment
        accumulated_late_fees: Sum of late fees charged on past payments
        next_payment_due: Height at which the next payment falls due
    """
    lease_id: int
    owner: str
    renter: str
    asset_description: str
    monthly_payment: int
    start_height: int
    duration_days: int
    total_payments: int
    payments_made: int
    status: LeaseStatus
    security_deposit: int
    accumulated_late_fees: int
    next_payment_due: int

    def __post_init__(self):
        if self.payments_made > self.total_payments:
            raise ValueError(
                f"payments_made {self.payments_made} exceeds total_payments {self.total_payments}"
            )
        if self.security_deposit < self.monthly_payment:
            raise ValueError("security_deposit must be at least monthly_payment")

    @property
    def remaining_payments(self) -> int:
        return self.total_payments - self.payments_made

    @property
    def is_closed(self) -> bool:
        """True once the lease can no longer accept payments or termination."""
        return self.status in (LeaseStatus.TERMINATED, LeaseStatus.COMPLETED)


@dataclass(frozen=True, slots=True)
class PaymentRecord:
    """One applied payment. Written once, never overwritten."""
    lease_id: int
    payment_number: int
    amount: int
    paid_at_height: int
    late_fee: int
    is_late: bool


@dataclass(frozen=True, slots=True)
class LessorProfile:
    """
    Per-owner profile and aggregate statistics.

    active_leases is incremented on creation and never decremented; the
    global ContractState.total_active_leases is the authoritative count.
    """
    owner: str
    name: str = ""
    active_leases: int = 0
    total_leases_created: int = 0
    reputation_score: int = DEFAULT_REPUTATION_SCORE


@dataclass(frozen=True, slots=True)
class ContractState:
    """Singleton counters and the administrative pause flag."""
    next_lease_id: int = 1
    total_active_leases: int = 0
    paused: bool = False


@dataclass(frozen=True, slots=True)
class ContractStats:
    """Read-only projection returned by get_contract_stats()."""
    total_leases_created: int
    total_active_leases: int
    paused: bool
    administrator: str


# ============================================================================
# RECEIPTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class PaymentReceipt:
    lease_id: int
    payment_number: int
    amount: int
    late_fee: int
    is_late: bool


@dataclass(frozen=True, slots=True)
class PartialPaymentReceipt:
    lease_id: int
    amount: int


@dataclass(frozen=True, slots=True)
class TerminationReceipt:
    lease_id: int
    terminated_by: str
    reason: str


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class ContractView(Protocol):
    """
    Read-only interface to contract state.

    Compute functions accept a ContractView to declare that they never write.
    LeaseContract implements this protocol; tests use FakeView.
    """

    @property
    def current_height(self) -> int:
        """Return the current host height."""
        ...

    @property
    def administrator(self) -> str:
        """Return the administrator account fixed at deployment."""
        ...

    def get_state(self) -> ContractState:
        """Return the singleton contract state."""
        ...

    def get_lease(self, lease_id: int) -> Optional[LeaseRecord]:
        """Return the lease record, or None if the id is unknown."""
        ...

    def get_payment(self, lease_id: int, payment_number: int) -> Optional[PaymentRecord]:
        """Return a payment record, or None."""
        ...

    def get_profile(self, owner: str) -> Optional[LessorProfile]:
        """Return the stored lessor profile, or None."""
        ...


# ============================================================================
# AUTHORIZATION
# ============================================================================

def roles_of(caller: str, lease: LeaseRecord, administrator: str) -> FrozenSet[Role]:
    """Return every role the caller holds with respect to a lease."""
    roles = set()
    if caller == lease.owner:
        roles.add(Role.OWNER)
    if caller == lease.renter:
        roles.add(Role.RENTER)
    if caller == administrator:
        roles.add(Role.ADMINISTRATOR)
    return frozenset(roles)


def has_any_role(
    caller: str,
    lease: LeaseRecord,
    administrator: str,
    allowed: FrozenSet[Role],
) -> bool:
    return bool(roles_of(caller, lease, administrator) & allowed)


# ============================================================================
# TRANSACTIONS
# ============================================================================

@dataclass(frozen=True, slots=True)
class StateChange:
    """
    One row change in one table.

    old is None for inserts. Records are immutable, so old/new are shared
    rather than copied.

    Attributes:
        table: One of TABLE_LEASES, TABLE_PAYMENTS, TABLE_LESSORS, TABLE_STATE
        key: Row key (lease id, (lease id, payment number), owner, STATE_KEY)
        old: Row value expected before the change
        new: Row value after the change
    """
    table: str
    key: Any
    old: Any
    new: Any

    def changed_fields(self) -> Dict[str, Tuple[Any, Any]]:
        """Fields that differ between old and new (all fields for inserts)."""
        new_fields = _record_fields(self.new)
        old_fields = _record_fields(self.old)
        return {
            name: (old_fields.get(name), value)
            for name, value in new_fields.items()
            if old_fields.get(name) != value
        }


def _record_fields(record: Any) -> Dict[str, Any]:
    if record is None:
        return {}
    return {name: getattr(record, name) for name in record.__dataclass_fields__}


@dataclass(frozen=True, slots=True)
class PendingTransaction:
    """
    The effect of one operation before execution - represents INTENT.

    Created by compute_* functions, executed by LeaseContract.execute().

    Attributes:
        operation: Public operation name (e.g. "create_lease")
        caller: Account that invoked the operation
        height: Host height the intent was computed at
        changes: Row changes to apply atomically (may be empty)
        receipt: Value returned to the caller on success
    """
    operation: str
    caller: str
    height: int
    changes: Tuple[StateChange, ...] = ()
    receipt: Any = None

    def is_empty(self) -> bool:
        return not self.changes

    def __repr__(self) -> str:
        return f"PendingTransaction({self.operation} by {self.caller}, {len(self.changes)} changes)"


def build_transaction(
    view: ContractView,
    operation: str,
    caller: str,
    changes: Optional[List[StateChange]] = None,
    receipt: Any = None,
) -> PendingTransaction:
    """
    Build a PendingTransaction stamped with the view's current height.

    Example:
        def compute_pause(view, caller):
            old = view.get_state()
            new = replace(old, paused=True)
            return build_transaction(view, "pause_contract", caller, [
                StateChange(TABLE_STATE, STATE_KEY, old, new)
            ], receipt=True)
    """
    return PendingTransaction(
        operation=operation,
        caller=caller,
        height=view.current_height,
        changes=tuple(changes or ()),
        receipt=receipt,
    )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of contract state changes - represents FACT.

    Attributes:
        operation: Public operation name
        caller: Account that invoked the operation
        height: Host height at execution
        sequence_number: Monotonic position in the contract's log
        changes: Applied row changes
        receipt: Value returned to the caller
        contract_name: Name of the contract that executed this
    """
    operation: str
    caller: str
    height: int
    sequence_number: int
    changes: Tuple[StateChange, ...]
    receipt: Any
    contract_name: str

    def __repr__(self) -> str:
        w = 100
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(f' Transaction #{self.sequence_number}: {self.operation}')}│",
            f"├{bar}┤",
            f"│{pad('   caller   : ' + self.caller)}│",
            f"│{pad('   height   : ' + str(self.height))}│",
            f"│{pad('   contract : ' + self.contract_name)}│",
            f"│{pad('   receipt  : ' + repr(self.receipt))}│",
        ]
        if self.changes:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Changes (' + str(len(self.changes)) + '):')}│")
            for sc in self.changes:
                lines.append(f"│{pad(f'   [{sc.table}:{sc.key}]')}│")
                for field_name, (old_val, new_val) in sc.changed_fields().items():
                    lines.append(f"│{pad(f'      {field_name}: {old_val!r} → {new_val!r}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)
