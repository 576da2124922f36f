"""
Module 06 - State Registry
Identity state transitions over the global identity state tree (GIST).

This module provides:
- transit_state: validated, all-or-nothing identity state transitions
- Per-identity state history (StateInfo) with seal-once replacement
- GIST root, root history and GIST proofs by id, root, time and block

Transition Rules:
1. The id type must be supported
2. new_state is non-zero and not yet recorded for the id
3. Genesis transitions: the id is unknown and derives from old_state
4. Other transitions: the id is known and old_state is its latest state
5. A configured state transition verifier must accept the proof

Each transition writes leaf hash(id) -> new_state, appends the new root to
the root history and seals both the previous root and the previous state.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Optional

from core.clock import BlockClock, RealBlockClock
from core.crypto.hashing import HashEngine
from core.events import EventLog, RootUpdated, StateUpdated
from core.history import DEFAULT_PAGE_LIMIT, RootHistoryIndex, check_page
from core.identity import (
    calc_id_from_genesis_state,
    id_type_of,
    id_type_to_hex,
    is_genesis_state,
    normalize_id_type,
)
from core.identity.genesis import IdTypeLike
from core.schemas.errors import (
    AuthorizationException,
    ErrorCodes,
    NotFoundException,
    ProofVerificationException,
    RegistryValidationException,
    RootNotFoundException,
)
from core.schemas.history import RootInfo
from core.schemas.state import StateInfo, StateTransition
from core.smt import SmtProof, SparseMerkleTree
from validators.base import ProofVerifier


logger = logging.getLogger(__name__)

DEFAULT_ID_TYPE = "0x0212"


class StateRegistry:
    """
    Registry of identity states backed by a sparse Merkle tree.

    Usage:
        registry = StateRegistry(SparseMerkleTree(max_depth=64), RootHistoryIndex())
        registry.transit_state(id, genesis_state, new_state, is_old_state_genesis=True)
        registry.get_state_info_by_id(id).state  # new_state
    """

    def __init__(
        self,
        tree: SparseMerkleTree,
        history: RootHistoryIndex,
        *,
        default_id_type: IdTypeLike = DEFAULT_ID_TYPE,
        supported_id_types: Iterable[IdTypeLike] = (),
        owner: str = "owner",
        page_limit: int = DEFAULT_PAGE_LIMIT,
        state_transition_verifier: Optional[ProofVerifier] = None,
        events: Optional[EventLog] = None,
        clock: Optional[BlockClock] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._tree = tree
        self._history = history
        self._owner = owner
        self._page_limit = page_limit
        self._verifier = state_transition_verifier
        self._events = events or EventLog()
        self._clock = clock or RealBlockClock()
        self._lock = lock or threading.RLock()

        self._default_id_type = normalize_id_type(default_id_type)
        self._supported_id_types: set[bytes] = {self._default_id_type}
        self._supported_id_types.update(normalize_id_type(t) for t in supported_id_types)

        # id -> state infos, oldest first
        self._state_history: dict[int, list[StateInfo]] = {}
        # (id, state) -> position in _state_history[id]
        self._state_positions: dict[tuple[int, int], int] = {}

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def tree(self) -> SparseMerkleTree:
        return self._tree

    @property
    def history(self) -> RootHistoryIndex:
        return self._history

    @property
    def hash_engine(self) -> HashEngine:
        return self._tree.hash_engine

    @property
    def default_id_type(self) -> bytes:
        return self._default_id_type

    @property
    def state_transition_verifier(self) -> Optional[ProofVerifier]:
        return self._verifier

    # -------------------------------------------------------------------------
    # Id types
    # -------------------------------------------------------------------------

    def is_id_type_supported(self, id_type: IdTypeLike) -> bool:
        return normalize_id_type(id_type) in self._supported_id_types

    def get_supported_id_types(self) -> list[str]:
        return sorted(id_type_to_hex(t) for t in self._supported_id_types)

    def set_supported_id_type(self, id_type: IdTypeLike, supported: bool, caller: str) -> None:
        """Enable or disable an id type (owner only). The default id type stays supported."""
        self._require_owner(caller)
        type_bytes = normalize_id_type(id_type)
        with self._lock:
            if supported:
                self._supported_id_types.add(type_bytes)
            elif type_bytes == self._default_id_type:
                raise RegistryValidationException(
                    "Default id type cannot be unsupported",
                    details={"id_type": id_type_to_hex(type_bytes)},
                )
            else:
                self._supported_id_types.discard(type_bytes)
        logger.info(f"Id type {id_type_to_hex(type_bytes)} supported={supported}")

    def get_id_type_if_supported(self, identity_id: int) -> bytes:
        id_type = id_type_of(identity_id)
        if id_type not in self._supported_id_types:
            raise RegistryValidationException(
                "id type is not supported",
                code=ErrorCodes.INVALID_STATE_TRANSITION,
                details={"id": str(identity_id), "id_type": id_type_to_hex(id_type)},
            )
        return id_type

    def calc_id_from_genesis_state(self, state: int, id_type: Optional[IdTypeLike] = None) -> int:
        """Id derived from a genesis state under id_type (default id type if None)."""
        return calc_id_from_genesis_state(
            self._default_id_type if id_type is None else id_type,
            state,
        )

    # -------------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------------

    def transit_state(
        self,
        id: int,
        old_state: int,
        new_state: int,
        is_old_state_genesis: bool,
        proof: Any = None,
    ) -> StateInfo:
        """
        Apply an identity state transition.

        Returns:
            The StateInfo recorded for new_state

        Raises:
            RegistryValidationException: Invalid transition or unsupported id type
            NotFoundException: Non-genesis transition of an unknown id
            ProofVerificationException: The transition proof was rejected
            CapacityException: The tree cannot place the identity's leaf
        """
        transition = StateTransition(
            id=id,
            old_state=old_state,
            new_state=new_state,
            is_old_state_genesis=is_old_state_genesis,
            proof=proof,
        )
        return self.apply_transition(transition)

    def apply_transition(self, transition: StateTransition) -> StateInfo:
        """Apply a StateTransition. See transit_state."""
        with self._lock:
            self._validate_transition(transition)
            self._verify_transition_proof(transition)

            stamp = self._clock.now()
            self._history.check_append(stamp.timestamp, stamp.block)

            # Writes start here: the tree is the only step that can still fail
            leaf_index = self._leaf_index(transition.id)
            previous_root = self._tree.root
            new_root = self._tree.set(leaf_index, transition.new_state)
            self._history.append(new_root, stamp.timestamp, stamp.block)

            infos = self._state_history.setdefault(transition.id, [])
            if transition.is_old_state_genesis:
                self._state_positions[(transition.id, transition.old_state)] = len(infos)
                infos.append(StateInfo(id=transition.id, state=transition.old_state))

            infos[-1] = infos[-1].sealed(transition.new_state, stamp.timestamp, stamp.block)
            new_info = StateInfo(
                id=transition.id,
                state=transition.new_state,
                created_at_timestamp=stamp.timestamp,
                created_at_block=stamp.block,
            )
            self._state_positions[(transition.id, transition.new_state)] = len(infos)
            infos.append(new_info)

            logger.info(
                f"State transition id={transition.id} genesis={transition.is_old_state_genesis} "
                f"block={stamp.block} root={new_root}"
            )
            self._events.emit(StateUpdated(
                id=transition.id,
                block_n=stamp.block,
                timestamp=stamp.timestamp,
                state=transition.new_state,
            ))
            self._events.emit(RootUpdated(
                root=new_root,
                replaced_root=previous_root,
                timestamp=stamp.timestamp,
                block=stamp.block,
            ))
        return new_info

    def _validate_transition(self, t: StateTransition) -> None:
        if t.id == 0:
            self._reject("ID should not be zero", t)
        if t.new_state == 0:
            self._reject("New state should not be zero", t)
        self.get_id_type_if_supported(t.id)
        if self.state_exists(t.id, t.new_state):
            self._reject("New state already exists", t)

        if t.is_old_state_genesis:
            if self.id_exists(t.id):
                self._reject("Old state is genesis but identity already exists", t)
            if not is_genesis_state(t.id, t.old_state):
                self._reject("Identity id does not correspond to the genesis state", t)
            return

        if not self.id_exists(t.id):
            logger.warning(f"Rejected transition of unknown id={t.id}")
            raise NotFoundException(
                "Old state is not genesis but identity does not yet exist",
                code=ErrorCodes.IDENTITY_NOT_FOUND,
                details={"id": str(t.id)},
            )
        if self._state_history[t.id][-1].state != t.old_state:
            self._reject("Old state does not match the latest state", t)

    def _verify_transition_proof(self, t: StateTransition) -> None:
        if self._verifier is None:
            return
        try:
            result = self._verifier.verify(t.public_inputs, t.proof, b"")
        except ProofVerificationException:
            raise
        except Exception as e:
            raise ProofVerificationException(
                "State transition proof is not valid",
                details={"id": str(t.id), "error": str(e)},
            ) from e
        if not result or not result.valid:
            raise ProofVerificationException(
                "State transition proof is not valid",
                details={"id": str(t.id)},
            )

    def _reject(self, message: str, t: StateTransition) -> None:
        logger.warning(f"Rejected transition id={t.id}: {message}")
        raise RegistryValidationException(
            message,
            code=ErrorCodes.INVALID_STATE_TRANSITION,
            details={"id": str(t.id), "old_state": str(t.old_state), "new_state": str(t.new_state)},
        )

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise AuthorizationException(
                "Only owner can call this function",
                details={"caller": caller},
            )

    def _leaf_index(self, identity_id: int) -> int:
        return self._tree.hash_engine.hash_elements(identity_id)

    # -------------------------------------------------------------------------
    # Identity state queries
    # -------------------------------------------------------------------------

    def id_exists(self, id: int) -> bool:
        return id in self._state_history

    def state_exists(self, id: int, state: int) -> bool:
        return (id, state) in self._state_positions

    def get_state_info_by_id(self, id: int) -> StateInfo:
        """Latest state of an identity."""
        infos = self._state_history.get(id)
        if not infos:
            raise self._identity_not_found(id)
        return infos[-1]

    def get_state_info_by_id_and_state(self, id: int, state: int) -> StateInfo:
        position = self._state_positions.get((id, state))
        if position is None:
            raise NotFoundException(
                "State does not exist",
                code=ErrorCodes.STATE_NOT_FOUND,
                details={"id": str(id), "state": str(state)},
            )
        return self._state_history[id][position]

    def get_state_info_history_length_by_id(self, id: int) -> int:
        infos = self._state_history.get(id)
        if not infos:
            raise self._identity_not_found(id)
        return len(infos)

    def get_state_info_history_by_id(self, id: int, start: int, length: int) -> list[StateInfo]:
        infos = self._state_history.get(id)
        if not infos:
            raise self._identity_not_found(id)
        check_page(start, length, len(infos), self._page_limit)
        return infos[start:start + length]

    @staticmethod
    def _identity_not_found(id: int) -> NotFoundException:
        return NotFoundException(
            "Identity does not exist",
            code=ErrorCodes.IDENTITY_NOT_FOUND,
            details={"id": str(id)},
        )

    # -------------------------------------------------------------------------
    # GIST queries
    # -------------------------------------------------------------------------

    def get_gist_root(self) -> int:
        return self._tree.root

    def get_gist_proof(self, id: int) -> SmtProof:
        return self._tree.get_proof(self._leaf_index(id))

    def get_gist_proof_by_root(self, id: int, root: int) -> SmtProof:
        """
        Raises:
            RootNotFoundException: If root is not in the root history
        """
        if not self._history.root_exists(root):
            raise RootNotFoundException(root)
        return self._tree.get_proof_by_root(self._leaf_index(id), root)

    def get_gist_proof_by_time(self, id: int, timestamp: int) -> SmtProof:
        """Proof against the root current at timestamp (the empty root before the first entry)."""
        root = self._history.get_root_by_time(timestamp)
        return self._tree.get_proof_by_root(self._leaf_index(id), root)

    def get_gist_proof_by_block(self, id: int, block: int) -> SmtProof:
        root = self._history.get_root_by_block(block)
        return self._tree.get_proof_by_root(self._leaf_index(id), root)

    def gist_root_exists(self, root: int) -> bool:
        return self._history.root_exists(root)

    def get_gist_root_info(self, root: int) -> RootInfo:
        return self._history.get_root_info(root)

    def get_gist_root_history_length(self) -> int:
        return self._history.get_history_length()

    def get_gist_root_history(self, start: int, length: int) -> list[RootInfo]:
        return self._history.get_history(start, length)

    def get_gist_root_info_by_time(self, timestamp: int) -> Optional[RootInfo]:
        return self._history.get_root_info_by_time(timestamp)

    def get_gist_root_info_by_block(self, block: int) -> Optional[RootInfo]:
        return self._history.get_root_info_by_block(block)


__all__ = [
    "DEFAULT_ID_TYPE",
    "StateRegistry",
]
