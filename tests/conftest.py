"""
conftest.py - Shared pytest fixtures for leaselock tests

Provides common fixtures used across unit, functional and conformance tests:
- Fresh contracts (empty, with one lease, with a short two-payment lease)
- A contract with verbose output enabled, for output checks
"""

import pytest

from leaselock import LeaseContract

from tests.fake_view import ADMIN, OWNER, RENTER, create_standard_lease


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def contract():
    """Fresh contract at height 0 with no leases."""
    return LeaseContract(ADMIN, verbose=False)


@pytest.fixture
def verbose_contract():
    """Fresh contract that prints applied and rejected operations."""
    return LeaseContract(ADMIN, verbose=True)


@pytest.fixture
def leased_contract(contract):
    """Contract with lease 1 (OWNER -> RENTER, 12 payments)."""
    create_standard_lease(contract)
    return contract


@pytest.fixture
def short_lease_contract(contract):
    """Contract with lease 1 lasting 60 days (2 payments)."""
    contract.create_lease(OWNER, RENTER, "Completion Test Vehicle", 100000, 60, 200000)
    return contract
