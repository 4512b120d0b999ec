"""
contract.py - Stateful Lease Contract

The LeaseContract class is the central state manager for the lease system.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements ContractView protocol for safe read-only access by pure functions
    - Executes pending transactions atomically (all changes apply or none do)
    - Owns the four tables: leases, payments, lessors, and the singleton state
    - Tracks host height and provides temporal operations (clone_at)
    - Exposes the public operation surface (create_lease, make_payment, ...)
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import threading

from .core import (
    # Types
    ContractState, ContractStats, LeaseRecord, LeaseStatus, LessorProfile,
    PaymentRecord, PaymentReceipt, PartialPaymentReceipt, TerminationReceipt,
    PendingTransaction, Transaction, ExecuteResult,
    # Constants
    STATE_KEY, TABLE_LEASES, TABLE_LESSORS, TABLE_PAYMENTS, TABLE_STATE,
    # Exceptions
    LeaseError,
    # Helpers
    require_account, require_uint,
)
from . import admin, lessors, registry


class LeaseContract:
    """
    Lease contract with atomic execution and a full audit trail.

    Implements the ContractView protocol, allowing the contract to be passed
    to pure compute functions that use only read-only methods.

    Design Principles:
        - Compute, then execute: every mutating operation calls a pure
          compute_* function that either raises a LeaseError or returns a
          PendingTransaction; only execute() writes.
        - Always logs: every applied transaction is recorded, enabling
          clone_at() for historical state reconstruction.

    Thread Safety:
        Public operations hold an internal lock across compute and execute,
        so each operation is a single-writer transaction.

    Example:
        contract = LeaseContract("deployer")
        lease_id = contract.create_lease(
            "alice", "bob", "2023 Toyota Camry",
            monthly_payment=100000, duration=365, security_deposit=200000,
        )
        contract.mine_blocks(10)
        receipt = contract.make_payment("bob", lease_id)
    """

    def __init__(
        self,
        administrator: str,
        initial_height: int = 0,
        name: str = "leaselock",
        verbose: bool = True,
    ):
        """
        Create a contract.

        Args:
            administrator: Account allowed to pause/resume and terminate any lease
            initial_height: Starting host height (default: 0)
            name: Contract identifier used in the audit trail
            verbose: Print applied and rejected operations (default: True)
        """
        self.name = name
        self._administrator = require_account("administrator", administrator)
        self._current_height: int = require_uint("initial_height", initial_height)
        self.verbose = verbose
        self._tables: Dict[str, Dict[Any, Any]] = {
            TABLE_LEASES: {},
            TABLE_PAYMENTS: {},
            TABLE_LESSORS: {},
            TABLE_STATE: {STATE_KEY: ContractState()},
        }
        self.transaction_log: List[Transaction] = []
        self._next_sequence: int = 0
        self._lock = threading.RLock()

    # ========================================================================
    # ContractView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_height(self) -> int:
        """Current host height."""
        return self._current_height

    @property
    def administrator(self) -> str:
        return self._administrator

    def get_state(self) -> ContractState:
        return self._tables[TABLE_STATE][STATE_KEY]

    def get_lease(self, lease_id: int) -> Optional[LeaseRecord]:
        return self._tables[TABLE_LEASES].get(lease_id)

    def get_payment(self, lease_id: int, payment_number: int) -> Optional[PaymentRecord]:
        return self._tables[TABLE_PAYMENTS].get((lease_id, payment_number))

    def get_profile(self, owner: str) -> Optional[LessorProfile]:
        return self._tables[TABLE_LESSORS].get(owner)

    @property
    def leases(self) -> Dict[int, LeaseRecord]:
        return dict(self._tables[TABLE_LEASES])

    @property
    def payments(self) -> Dict[Tuple[int, int], PaymentRecord]:
        return dict(self._tables[TABLE_PAYMENTS])

    @property
    def lessors(self) -> Dict[str, LessorProfile]:
        return dict(self._tables[TABLE_LESSORS])

    def payment_history(self, lease_id: int) -> List[PaymentRecord]:
        """All payment records for a lease, ordered by payment number."""
        return [
            record for (lid, _), record in sorted(self._tables[TABLE_PAYMENTS].items())
            if lid == lease_id
        ]

    # ========================================================================
    # HEIGHT MANAGEMENT
    # ========================================================================

    def advance_height(self, new_height: int) -> None:
        """
        Move the host height forward.

        Raises:
            ValueError: If new_height is below the current height
        """
        with self._lock:
            if new_height < self._current_height:
                raise ValueError(
                    f"Cannot move height backwards: {new_height} < {self._current_height}"
                )
            self._current_height = new_height

    def mine_blocks(self, count: int = 1) -> int:
        """Advance the height by count and return the new height."""
        require_uint("count", count)
        with self._lock:
            self.advance_height(self._current_height + count)
            return self._current_height

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def execute(self, pending: PendingTransaction) -> ExecuteResult:
        """
        Execute a PendingTransaction atomically.

        Every change is checked against the stored row before anything is
        written: a change whose old value no longer matches (the state moved
        on since the transaction was computed) rejects the whole transaction.
        So does a transaction computed at any height other than the current
        one, since payment lateness and fees are priced at compute time.

        Args:
            pending: PendingTransaction to execute

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.REJECTED if the height or any change was stale
        """
        with self._lock:
            if pending.is_empty():
                return ExecuteResult.APPLIED

            valid, reason = self._validate_pending(pending)
            if not valid:
                if self.verbose:
                    print(f"✗ REJECTED: {pending.operation} by {pending.caller}: {reason}")
                return ExecuteResult.REJECTED

            for sc in pending.changes:
                self._tables[sc.table][sc.key] = sc.new

            tx = Transaction(
                operation=pending.operation,
                caller=pending.caller,
                height=self._current_height,
                sequence_number=self._next_sequence,
                changes=pending.changes,
                receipt=pending.receipt,
                contract_name=self.name,
            )
            self._next_sequence += 1
            self.transaction_log.append(tx)

            if self.verbose:
                print(repr(tx))
                print(f"✓ APPLIED: {tx.operation}")
            return ExecuteResult.APPLIED

    def _validate_pending(self, pending: PendingTransaction) -> Tuple[bool, str]:
        """
        Validate a pending transaction against current state.

        Checks performed:
        1. Height check (transaction must have been computed at the current
           height; fees and lateness are priced at that height)
        2. Each change targets a known table
        3. Each change's old value equals the stored row (None for inserts)
        4. No row is changed twice in one transaction

        Returns:
            Tuple of (success: bool, reason: str)
        """
        if pending.height > self._current_height:
            return False, "future height"
        if pending.height < self._current_height:
            return False, f"stale height: computed at {pending.height}, now {self._current_height}"

        seen = set()
        for sc in pending.changes:
            if sc.table not in self._tables:
                return False, f"unknown table: {sc.table}"
            if (sc.table, sc.key) in seen:
                return False, f"duplicate change for {sc.table}:{sc.key}"
            seen.add((sc.table, sc.key))
            current = self._tables[sc.table].get(sc.key)
            if current != sc.old:
                return False, f"stale state for {sc.table}:{sc.key}"
        return True, ""

    def _run(self, compute: Callable[..., PendingTransaction], *args) -> Any:
        """
        Compute and execute one operation under the lock; return its receipt.

        The lock is held across compute and execute, so neither the height nor
        any row can move in between and execute() cannot reject here. The
        uncoded LeaseError below only fires if that invariant is broken
        (e.g. execute() replaced on a subclass); it is never a caller error.
        """
        with self._lock:
            try:
                pending = compute(self, *args)
            except LeaseError as e:
                if self.verbose:
                    print(f"✗ REJECTED [{e.code.value if e.code else '-'}]: {compute.__name__}: {e}")
                raise
            if self.execute(pending) == ExecuteResult.REJECTED:
                raise LeaseError(f"{pending.operation} rejected: state changed during execution")
            return pending.receipt

    # ========================================================================
    # PUBLIC OPERATIONS (Mutating)
    # ========================================================================

    def create_lease(
        self,
        caller: str,
        renter: str,
        asset_description: str,
        monthly_payment: int,
        duration: int,
        security_deposit: int,
    ) -> int:
        """Open a lease owned by caller. Returns the new lease id."""
        return self._run(
            registry.compute_lease_creation,
            caller, renter, asset_description, monthly_payment, duration, security_deposit,
        )

    def make_payment(self, caller: str, lease_id: int) -> PaymentReceipt:
        return self._run(registry.compute_payment, caller, lease_id)

    def make_partial_payment(self, caller: str, lease_id: int, amount: int) -> PartialPaymentReceipt:
        """Validate and acknowledge a partial amount. Lease state is not changed."""
        return self._run(registry.compute_partial_payment, caller, lease_id, amount)

    def terminate_lease(self, caller: str, lease_id: int, reason: str) -> TerminationReceipt:
        return self._run(registry.compute_termination, caller, lease_id, reason)

    def update_lessor_profile(self, caller: str, name: str) -> bool:
        return self._run(lessors.compute_profile_update, caller, name)

    def pause_contract(self, caller: str) -> bool:
        return self._run(admin.compute_pause, caller)

    def resume_contract(self, caller: str) -> bool:
        return self._run(admin.compute_resume, caller)

    # ========================================================================
    # PUBLIC QUERIES (Read-only)
    # ========================================================================

    def get_lease_details(self, lease_id: int) -> Optional[LeaseRecord]:
        return self.get_lease(lease_id)

    def get_payment_details(self, lease_id: int, payment_number: int) -> Optional[PaymentRecord]:
        return self.get_payment(lease_id, payment_number)

    def is_lease_overdue(self, lease_id: int) -> bool:
        return registry.is_overdue(self, lease_id)

    def calculate_total_owed(self, lease_id: int) -> Optional[int]:
        return registry.calculate_total_owed(self, lease_id)

    def get_lessor_profile(self, owner: str) -> Optional[LessorProfile]:
        return self.get_profile(owner)

    def get_contract_stats(self) -> ContractStats:
        return admin.get_contract_stats(self)

    def get_multiple_leases(self, lease_ids: Sequence[int]) -> List[Optional[LeaseRecord]]:
        return admin.get_multiple_leases(self, lease_ids)

    def get_leases_by_renter(self, renter: str) -> List[LeaseRecord]:
        return registry.get_leases_by_renter(self, renter)

    # ========================================================================
    # CONTRACT OPERATIONS
    # ========================================================================

    def verify_invariants(self) -> Dict[str, Any]:
        """
        Verify that the derived counters agree with the stored records.

        Checks:
        - total_active_leases equals the number of ACTIVE leases
        - next_lease_id equals the number of leases + 1 (ids have no gaps)
        - each lease's payments_made equals its payment record count, and
          its payment numbers run 1..n without gaps

        Returns:
            Dict with keys:
            - 'valid': bool - True if every check holds
            - 'discrepancies': List[Dict] - one entry per failed check

        Example:
            result = contract.verify_invariants()
            assert result['valid'], result['discrepancies']
        """
        discrepancies = []
        state = self.get_state()
        leases = self._tables[TABLE_LEASES]

        active = sum(1 for lease in leases.values() if lease.status == LeaseStatus.ACTIVE)
        if active != state.total_active_leases:
            discrepancies.append({
                'check': 'total_active_leases',
                'expected': active,
                'actual': state.total_active_leases,
            })

        if sorted(leases) != list(range(1, state.next_lease_id)):
            discrepancies.append({
                'check': 'lease_ids',
                'expected': list(range(1, state.next_lease_id)),
                'actual': sorted(leases),
            })

        for lease_id, lease in sorted(leases.items()):
            numbers = [p.payment_number for p in self.payment_history(lease_id)]
            if numbers != list(range(1, lease.payments_made + 1)):
                discrepancies.append({
                    'check': 'payment_numbers',
                    'lease_id': lease_id,
                    'expected': list(range(1, lease.payments_made + 1)),
                    'actual': numbers,
                })

        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }

    def clone(self) -> LeaseContract:
        """
        Create an independent copy of this contract.

        Records are immutable, so copying the table dicts is enough for full
        independence.
        """
        cloned = LeaseContract.__new__(LeaseContract)
        cloned.name = self.name
        cloned._administrator = self._administrator
        cloned._current_height = self._current_height
        cloned.verbose = self.verbose
        cloned._tables = {table: dict(rows) for table, rows in self._tables.items()}
        cloned.transaction_log = list(self.transaction_log)
        cloned._next_sequence = self._next_sequence
        cloned._lock = threading.RLock()
        return cloned

    def clone_at(self, target_height: int) -> LeaseContract:
        """
        Create a copy of this contract as it existed at a past height.

        Walks backward through transactions executed after target_height and
        restores each change's old value (removing rows that were inserted).

        Raises:
            ValueError: If target_height is in the future
        """
        if target_height > self._current_height:
            raise ValueError(f"Target height {target_height} is in the future")

        cloned = self.clone()
        cloned._current_height = target_height
        cloned.transaction_log = [tx for tx in self.transaction_log if tx.height <= target_height]
        cloned._next_sequence = len(cloned.transaction_log)

        for tx in reversed(self.transaction_log):
            if tx.height <= target_height:
                break
            for sc in reversed(tx.changes):
                if sc.old is None:
                    cloned._tables[sc.table].pop(sc.key, None)
                else:
                    cloned._tables[sc.table][sc.key] = sc.old

        return cloned
