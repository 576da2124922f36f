"""
Module 09 - Ledger (In-Process Runtime Wiring)

Composes the tree, root history, state registry, request registry and
verification coordinator behind one lock and one event log.

Public API:
- Ledger: Top-level owner of every registry component
- LedgerSummary: Point-in-time counters
- create_ledger: Ledger from (env-derived) RuntimeConfig
- create_test_ledger: Deterministic ledger for tests
"""

from orchestrator.ledger import Ledger, LedgerSummary, create_ledger, create_test_ledger

__all__ = [
    "Ledger",
    "LedgerSummary",
    "create_ledger",
    "create_test_ledger",
]
