"""
Test fixtures package for identity state registry tests.

Usage:
    from fixtures import make_genesis_identity, make_stub_ledger

    def test_something():
        identity, genesis = make_genesis_identity()
        ledger = make_stub_ledger()
"""

from .registry_fixtures import OWNER, make_genesis_identity, make_stub_ledger

__all__ = [
    "OWNER",
    "make_genesis_identity",
    "make_stub_ledger",
]
