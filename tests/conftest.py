"""
Pytest configuration and shared fixtures for identity state registry tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_registry = importlib.import_module("fixtures.registry_fixtures")

make_genesis_identity = _registry.make_genesis_identity
make_stub_ledger = _registry.make_stub_ledger
OWNER = _registry.OWNER


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def clock():
    """Provide a frozen block clock."""
    from core.clock import FrozenBlockClock
    return FrozenBlockClock(timestamp=1_000, block=10)


@pytest.fixture
def ledger(clock):
    """Provide a deterministic ledger (max depth 32, frozen clock)."""
    from orchestrator.ledger import create_test_ledger
    return create_test_ledger(max_depth=32, clock=clock)


@pytest.fixture
def stub_ledger(clock):
    """Provide a ledger with StubValidators whitelisted as "stub" and "stub-v3"."""
    return make_stub_ledger(clock)


@pytest.fixture
def tree():
    """Provide an empty sparse Merkle tree of depth 32."""
    from core.smt import SparseMerkleTree
    return SparseMerkleTree(max_depth=32)


@pytest.fixture
def history():
    """Provide an empty root history."""
    from core.history import RootHistoryIndex
    return RootHistoryIndex()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
