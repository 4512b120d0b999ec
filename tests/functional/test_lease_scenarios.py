"""
End-to-end lease scenarios through the public LeaseContract surface.

Covers the canonical flows:
1. Creation and details
2. Back-to-back on-time payments
3. Invalid terms
4. Unauthorized payer
5. Double termination
6. Completion releases the active count
"""

import pytest

from leaselock import LeaseStatus, LeaseError, InvalidTerms, Unauthorized, LeaseTerminated

from tests.fake_view import OWNER, RENTER, STRANGER, ADMIN, create_standard_lease


class TestCreation:

    def test_first_lease_details(self, contract):
        lease_id = create_standard_lease(contract)
        assert lease_id == 1

        lease = contract.get_lease_details(1)
        assert lease.status == LeaseStatus.ACTIVE
        assert lease.total_payments == 12
        assert lease.payments_made == 0
        assert lease.owner == OWNER
        assert lease.renter == RENTER
        assert lease.asset_description == "2023 Toyota Camry - VIN: 1234567890"

    def test_ids_are_sequential(self, contract):
        assert [create_standard_lease(contract) for _ in range(3)] == [1, 2, 3]
        assert contract.get_contract_stats().total_leases_created == 3

    def test_too_short_duration(self, contract):
        with pytest.raises(InvalidTerms) as excinfo:
            contract.create_lease(OWNER, RENTER, "Short", 100000, 10, 200000)
        assert excinfo.value.code == 106
        assert contract.get_lease_details(1) is None
        assert contract.get_contract_stats().total_leases_created == 0


class TestPayments:

    def test_two_immediate_payments_are_on_time(self, leased_contract):
        first = leased_contract.make_payment(RENTER, 1)
        second = leased_contract.make_payment(RENTER, 1)
        assert (first.late_fee, second.late_fee) == (0, 0)

        for n in (1, 2):
            record = leased_contract.get_payment_details(1, n)
            assert record is not None
            assert record.is_late is False
            assert record.amount == 100000
        assert leased_contract.get_payment_details(1, 3) is None
        assert leased_contract.get_lease_details(1).payments_made == 2

    def test_stranger_cannot_pay(self, leased_contract):
        with pytest.raises(Unauthorized) as excinfo:
            leased_contract.make_payment(STRANGER, 1)
        assert excinfo.value.code == 100
        assert leased_contract.get_lease_details(1).payments_made == 0


class TestTermination:

    def test_second_termination_fails(self, leased_contract):
        receipt = leased_contract.terminate_lease(OWNER, 1, "breach")
        assert receipt.terminated_by == OWNER
        assert receipt.reason == "breach"
        assert leased_contract.get_lease_details(1).status == LeaseStatus.TERMINATED

        with pytest.raises(LeaseTerminated) as excinfo:
            leased_contract.terminate_lease(OWNER, 1, "breach")
        assert excinfo.value.code == 107

    def test_administrator_can_terminate(self, leased_contract):
        leased_contract.terminate_lease(ADMIN, 1, "Fraud investigation")
        assert leased_contract.get_contract_stats().total_active_leases == 0

    def test_terminated_lease_cannot_be_paid(self, leased_contract):
        leased_contract.terminate_lease(RENTER, 1, "Returned early")
        with pytest.raises(LeaseTerminated):
            leased_contract.make_payment(RENTER, 1)


class TestCompletion:

    def test_two_payment_lease_completes(self, short_lease_contract):
        active_after_creation = short_lease_contract.get_contract_stats().total_active_leases

        short_lease_contract.make_payment(RENTER, 1)
        assert short_lease_contract.get_lease_details(1).status == LeaseStatus.ACTIVE
        short_lease_contract.make_payment(RENTER, 1)

        lease = short_lease_contract.get_lease_details(1)
        assert lease.status == LeaseStatus.COMPLETED
        assert lease.payments_made == lease.total_payments == 2
        stats = short_lease_contract.get_contract_stats()
        assert stats.total_active_leases == active_after_creation - 1

    def test_completed_lease_rejects_further_payments(self, short_lease_contract):
        short_lease_contract.make_payment(RENTER, 1)
        short_lease_contract.make_payment(RENTER, 1)
        with pytest.raises(LeaseError) as excinfo:
            short_lease_contract.make_payment(RENTER, 1)
        assert excinfo.value.code == 107
