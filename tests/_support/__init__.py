"""
Test support utilities for docspine tests.

``fake_engine`` provides an in-memory engine that satisfies the
:mod:`docspine.core.protocols` contract and records every call it receives.
"""
