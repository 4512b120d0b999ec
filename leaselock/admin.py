"""
admin.py - Contract Administration

Pause/resume computations (administrator only), the stats projection and the
bounded bulk lease lookup.
"""

from __future__ import annotations
from dataclasses import replace
from typing import List, Optional, Sequence

from .core import (
    ContractStats, ContractView, LeaseRecord, PendingTransaction, StateChange,
    Unauthorized,
    MAX_BULK_LOOKUP, STATE_KEY, TABLE_STATE,
    build_transaction,
)


def _set_paused(view: ContractView, caller: str, paused: bool, operation: str) -> PendingTransaction:
    if caller != view.administrator:
        raise Unauthorized(f"{caller} is not the contract administrator")
    old = view.get_state()
    new = replace(old, paused=paused)
    return build_transaction(
        view, operation, caller,
        [StateChange(TABLE_STATE, STATE_KEY, old, new)],
        receipt=True,
    )


def compute_pause(view: ContractView, caller: str) -> PendingTransaction:
    """Block new lease creation. Existing leases are unaffected."""
    return _set_paused(view, caller, True, "pause_contract")


def compute_resume(view: ContractView, caller: str) -> PendingTransaction:
    return _set_paused(view, caller, False, "resume_contract")


def get_contract_stats(view: ContractView) -> ContractStats:
    """total_leases_created is derived from the id counter (next_lease_id - 1)."""
    state = view.get_state()
    return ContractStats(
        total_leases_created=state.next_lease_id - 1,
        total_active_leases=state.total_active_leases,
        paused=state.paused,
        administrator=view.administrator,
    )


def get_multiple_leases(view: ContractView, lease_ids: Sequence[int]) -> List[Optional[LeaseRecord]]:
    """
    Look up several leases at once, preserving input order.

    Every id is treated like get_lease_details treats it: an id with no
    stored lease (unknown, negative, or not an integer) yields None in its
    position and never raises. Only the list length is bounded; a longer
    list is outside the accepted argument domain, like an over-long
    description on create_lease.

    Raises:
        ValueError: If more than MAX_BULK_LOOKUP ids are requested
    """
    if len(lease_ids) > MAX_BULK_LOOKUP:
        raise ValueError(f"At most {MAX_BULK_LOOKUP} lease ids per lookup, got {len(lease_ids)}")
    return [view.get_lease(lease_id) for lease_id in lease_ids]
