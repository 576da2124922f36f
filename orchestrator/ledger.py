"""
Module 09 - Ledger

Single-writer owner of every registry component.

The ledger creates one re-entrant lock and hands it to the tree, the root
history, the state registry, the request registry and the coordinator, so
all mutations are serialized while reads stay lock-free. It also owns the
event log every component emits into.

Key features:
- Built from RuntimeConfig (tree depth, page limit, id types, owner)
- Pluggable hash engine, block clock and state transition verifier
- No module-level state: each Ledger is an independent registry
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from core.clock import BlockClock, FrozenBlockClock, RealBlockClock
from core.config import RuntimeConfig
from core.crypto.hashing import HashEngine
from core.events import EventLog
from core.history import RootHistoryIndex
from core.smt import SparseMerkleTree
from registry import ProofRequestRegistry, ProofVerificationCoordinator, StateRegistry
from validators.base import ProofVerifier


logger = logging.getLogger(__name__)


@dataclass
class LedgerSummary:
    """Point-in-time counters of a ledger."""
    gist_root: int
    root_history_length: int
    leaf_count: int
    requests_count: int
    events_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "gist_root": str(self.gist_root),
            "root_history_length": self.root_history_length,
            "leaf_count": self.leaf_count,
            "requests_count": self.requests_count,
            "events_count": self.events_count,
        }


class Ledger:
    """
    Top-level identity state ledger.

    Usage:
        ledger = Ledger(RuntimeConfig())
        ledger.state.transit_state(id, genesis, new_state, True)
        ledger.requests.set_request(1, ProofRequestInput(validator="v3"), caller="alice")
        ledger.coordinator.submit_response(1, inputs, proof)
    """

    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        *,
        hash_engine: Optional[HashEngine] = None,
        clock: Optional[BlockClock] = None,
        state_transition_verifier: Optional[ProofVerifier] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self.config = config or RuntimeConfig()
        self.lock = threading.RLock()
        self.clock = clock or RealBlockClock()
        self.events = events or EventLog()

        self.tree = SparseMerkleTree(
            self.config.tree.max_depth,
            hash_engine=hash_engine,
            lock=self.lock,
        )
        self.history = RootHistoryIndex(self.config.history.page_limit, lock=self.lock)
        self.state = StateRegistry(
            self.tree,
            self.history,
            default_id_type=self.config.registry.default_id_type,
            supported_id_types=self.config.registry.supported_id_types,
            owner=self.config.registry.owner,
            page_limit=self.config.history.page_limit,
            state_transition_verifier=state_transition_verifier,
            events=self.events,
            clock=self.clock,
            lock=self.lock,
        )
        self.requests = ProofRequestRegistry(
            owner=self.config.registry.owner,
            events=self.events,
            lock=self.lock,
        )
        self.coordinator = ProofVerificationCoordinator(
            self.requests,
            events=self.events,
            clock=self.clock,
            lock=self.lock,
        )

        logger.info(
            f"Ledger created: max_depth={self.tree.max_depth} "
            f"page_limit={self.history.page_limit} hash={getattr(self.tree.hash_engine, 'name', '?')}"
        )

    @property
    def owner(self) -> str:
        return self.config.registry.owner

    def summary(self) -> LedgerSummary:
        return LedgerSummary(
            gist_root=self.tree.root,
            root_history_length=self.history.get_history_length(),
            leaf_count=self.tree.leaf_count,
            requests_count=self.requests.get_requests_count(),
            events_count=len(self.events),
        )


def create_ledger(config: Optional[RuntimeConfig] = None, **kwargs: Any) -> Ledger:
    """Create a ledger from config, defaulting to env-derived configuration."""
    return Ledger(config or RuntimeConfig.from_env(), **kwargs)


def create_test_ledger(
    max_depth: int = 32,
    *,
    clock: Optional[BlockClock] = None,
    **kwargs: Any,
) -> Ledger:
    """Create a deterministic ledger: small tree, frozen clock."""
    config = RuntimeConfig()
    config.tree.max_depth = max_depth
    return Ledger(config, clock=clock or FrozenBlockClock(), **kwargs)


__all__ = [
    "Ledger",
    "LedgerSummary",
    "create_ledger",
    "create_test_ledger",
]
