"""
lessors.py - Lessor Directory

Per-owner profile and aggregate statistics. Profiles are created lazily: the
first lease creation or profile update for an owner starts from a default
record.

    get_or_default_profile(view, owner) -> LessorProfile
    compute_profile_update(view, caller, name) -> PendingTransaction
    compute_lessor_counters(view, owner) -> StateChange
"""

from __future__ import annotations
from dataclasses import replace

from .core import (
    ContractView, LessorProfile, PendingTransaction, StateChange,
    MAX_NAME_LENGTH, TABLE_LESSORS,
    build_transaction, require_account, require_text,
)


def get_or_default_profile(view: ContractView, owner: str) -> LessorProfile:
    """Return the stored profile, or a fresh default one if the owner has none."""
    profile = view.get_profile(owner)
    if profile is None:
        return LessorProfile(owner=owner)
    return profile


def compute_lessor_counters(view: ContractView, owner: str) -> StateChange:
    """
    Profile change recorded when an owner creates a lease.

    Both active_leases and total_leases_created go up by one. Nothing
    decrements active_leases afterwards.
    """
    old = view.get_profile(owner)
    base = old if old is not None else LessorProfile(owner=owner)
    new = replace(
        base,
        active_leases=base.active_leases + 1,
        total_leases_created=base.total_leases_created + 1,
    )
    return StateChange(TABLE_LESSORS, owner, old, new)


def compute_profile_update(view: ContractView, caller: str, name: str) -> PendingTransaction:
    """
    Set the caller's display name.

    Always succeeds. Lease counters and reputation are preserved; only the
    name is replaced.

    Raises:
        ValueError: If name exceeds MAX_NAME_LENGTH characters
    """
    require_account("caller", caller)
    require_text("name", name, MAX_NAME_LENGTH)

    old = view.get_profile(caller)
    new = replace(get_or_default_profile(view, caller), name=name)
    return build_transaction(
        view, "update_lessor_profile", caller,
        [StateChange(TABLE_LESSORS, caller, old, new)],
        receipt=True,
    )
