"""
leaselock - Lease Agreement Contract

Multi-party lease agreements (owner <-> renter) with recurring payments,
late-fee accrual, early termination and per-owner statistics, all recorded in
a single contract object that anyone can read and only authorized callers can
mutate.

Usage:
    from leaselock import LeaseContract

    contract = LeaseContract("deployer")
    lease_id = contract.create_lease(
        "alice", "bob", "2023 Toyota Camry - VIN: 1234567890",
        monthly_payment=100000, duration=365, security_deposit=200000,
    )

    contract.mine_blocks(144)
    receipt = contract.make_payment("bob", lease_id)

    contract.terminate_lease("alice", lease_id, "breach")
"""

# Core types
from .core import (
    ContractView,
    LeaseRecord,
    PaymentRecord,
    LessorProfile,
    ContractState,
    ContractStats,
    PaymentReceipt,
    PartialPaymentReceipt,
    TerminationReceipt,
    StateChange,
    PendingTransaction,
    Transaction,
    build_transaction,
    LeaseStatus,
    ErrorCode,
    ExecuteResult,
    Role,
    roles_of,
    has_any_role,
    LeaseError,
    Unauthorized,
    LeaseNotFound,
    LeaseAlreadyExists,
    PaymentLate,
    InsufficientPayment,
    LeaseExpired,
    InvalidTerms,
    LeaseTerminated,
    ERRORS_BY_CODE,
    BLOCKS_PER_DAY,
    PAYMENT_PERIOD_DAYS,
    GRACE_PERIOD_DAYS,
    LATE_FEE_RATE,
    MIN_LEASE_DURATION,
    MAX_LEASE_DURATION,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    DEFAULT_REPUTATION_SCORE,
    MAX_BULK_LOOKUP,
)

# Contract
from .contract import LeaseContract

# Clock
from .clock import height_to_days, days_to_height

# Terms and fees
from .terms import validate_terms, compute_late_fee

# Registry
from .registry import (
    compute_lease_creation,
    compute_payment,
    compute_partial_payment,
    compute_termination,
    is_overdue,
    calculate_total_owed,
    get_leases_by_renter,
)

# Lessors
from .lessors import (
    get_or_default_profile,
    compute_profile_update,
)

# Administration
from .admin import (
    compute_pause,
    compute_resume,
    get_contract_stats,
    get_multiple_leases,
)

__all__ = [
    # Core
    'ContractView', 'LeaseRecord', 'PaymentRecord', 'LessorProfile',
    'ContractState', 'ContractStats',
    'PaymentReceipt', 'PartialPaymentReceipt', 'TerminationReceipt',
    'StateChange', 'PendingTransaction', 'Transaction', 'build_transaction',
    'LeaseStatus', 'ErrorCode', 'ExecuteResult', 'Role', 'roles_of', 'has_any_role',
    'LeaseError', 'Unauthorized', 'LeaseNotFound', 'LeaseAlreadyExists',
    'PaymentLate', 'InsufficientPayment', 'LeaseExpired', 'InvalidTerms',
    'LeaseTerminated', 'ERRORS_BY_CODE',
    'BLOCKS_PER_DAY', 'PAYMENT_PERIOD_DAYS', 'GRACE_PERIOD_DAYS', 'LATE_FEE_RATE',
    'MIN_LEASE_DURATION', 'MAX_LEASE_DURATION', 'MAX_DESCRIPTION_LENGTH',
    'MAX_NAME_LENGTH', 'DEFAULT_REPUTATION_SCORE', 'MAX_BULK_LOOKUP',
    # Contract
    'LeaseContract',
    # Clock
    'height_to_days', 'days_to_height',
    # Terms
    'validate_terms', 'compute_late_fee',
    # Registry
    'compute_lease_creation', 'compute_payment', 'compute_partial_payment',
    'compute_termination', 'is_overdue', 'calculate_total_owed',
    'get_leases_by_renter',
    # Lessors
    'get_or_default_profile', 'compute_profile_update',
    # Administration
    'compute_pause', 'compute_resume', 'get_contract_stats', 'get_multiple_leases',
]

__version__ = '1.0.0'
