"""
Counter Conformance Tests

INVARIANT: Derived counters agree with the stored records.

    total_active_leases = |{ lease : lease.status = ACTIVE }|
    next_lease_id       = |leases| + 1
    payments_made(l)    = |payments(l)|, numbered 1..n
    lessor.total_leases_created(o) = |{ lease : lease.owner = o }|

The per-owner active_leases counter only ever grows; it equals
total_leases_created for every owner.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from leaselock import LeaseContract, LeaseStatus

from tests.fake_view import ACCOUNTS, ADMIN, run_operation


KINDS = ["create", "create", "pay", "pay", "terminate", "pause", "resume", "wait"]

operations = st.lists(
    st.tuples(
        st.sampled_from(KINDS),
        st.sampled_from(ACCOUNTS),
        st.integers(min_value=1, max_value=6),
        st.integers(min_value=0, max_value=50),
    ),
    max_size=60,
)


class TestCounterProperties:

    @given(operations)
    @settings(max_examples=100, deadline=None)
    def test_verify_invariants_holds_after_any_sequence(self, ops):
        contract = LeaseContract(ADMIN, verbose=False)
        for op in ops:
            run_operation(contract, op)
            result = contract.verify_invariants()
            assert result['valid'], result['discrepancies']

    @given(operations)
    @settings(max_examples=100, deadline=None)
    def test_active_count_matches_statuses(self, ops):
        contract = LeaseContract(ADMIN, verbose=False)
        for op in ops:
            run_operation(contract, op)
        active = [l for l in contract.leases.values() if l.status == LeaseStatus.ACTIVE]
        assert contract.get_contract_stats().total_active_leases == len(active)

    @given(operations)
    @settings(max_examples=100, deadline=None)
    def test_lessor_counters_track_creations(self, ops):
        contract = LeaseContract(ADMIN, verbose=False)
        for op in ops:
            run_operation(contract, op)
        for owner, profile in contract.lessors.items():
            created = sum(1 for l in contract.leases.values() if l.owner == owner)
            assert profile.total_leases_created == created
            assert profile.active_leases == created

    @given(operations)
    @settings(max_examples=100, deadline=None)
    def test_payments_never_exceed_total(self, ops):
        contract = LeaseContract(ADMIN, verbose=False)
        for op in ops:
            run_operation(contract, op)
        for lease in contract.leases.values():
            assert 0 <= lease.payments_made <= lease.total_payments
            if lease.status == LeaseStatus.ACTIVE:
                assert lease.payments_made < lease.total_payments
