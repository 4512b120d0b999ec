"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the lease contract.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. atomicity.py - All-or-nothing operations; failed calls write nothing
2. counters.py - Derived counters agree with stored records
3. determinism.py - Identical call sequences yield identical state
4. temporal.py - Height ordering, audit trail and history reconstruction

These tests use hypothesis for property-based testing.
"""
