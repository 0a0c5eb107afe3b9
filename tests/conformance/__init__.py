"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the ledger SDK.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. canonicalization.py - One name per currency, lossless name codec
2. determinism.py - Canonical ordering of names, tokens and currencies
3. conservation.py - Transfer suggestions never exceed what the account holds

These tests use hypothesis for property-based testing.
"""
