"""
Module 03 - Sparse Merkle Tree
Fixed-depth binary sparse Merkle tree over field-element indices.

This module provides:
- Leaf insertion (add), in-place update (update) and upsert (set)
- Existence / non-existence proofs against the current root
- Proofs against any root the tree has ever held

Tree Rules (Hard Contracts):
1. The path of an index is read from its bits, least significant first:
   bit d chooses the child at depth d (0 = left, 1 = right)
2. A leaf lives as high as possible: it is pushed down only until its path
   diverges from the leaf already occupying that position
3. Pushing a leaf at depth >= max_depth - 1 fails with MaxDepthReached
4. Nodes are immutable and keyed by hash, so every historical root stays
   walkable after later writes
5. Empty subtrees hash to 0

Atomicity:
- An insertion stages every new node and commits the staged nodes plus the
  new root pointer only after the whole path has been rebuilt. A failing
  insertion leaves the store and the root untouched.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.crypto.hashing import DEFAULT_HASH_ENGINE, EMPTY_HASH, HashEngine, is_field_element
from core.schemas.errors import (
    DuplicateLeafException,
    ErrorCodes,
    MaxDepthReachedException,
    NotFoundException,
    RegistryException,
    RegistryValidationException,
    RootNotFoundException,
)
from core.smt.smt_proofs import SmtProof


logger = logging.getLogger(__name__)

# Upper bound for max_depth: indices are field elements (< 2**254)
MAX_DEPTH_LIMIT = 256


class NodeType(str, Enum):
    EMPTY = "empty"
    LEAF = "leaf"
    MIDDLE = "middle"


@dataclass(frozen=True)
class Node:
    """
    A tree node.

    Leaves carry index/value; middle nodes carry child hashes.
    """
    node_type: NodeType
    child_left: int = EMPTY_HASH
    child_right: int = EMPTY_HASH
    index: int = 0
    value: int = 0


EMPTY_NODE = Node(NodeType.EMPTY)


def _bit(index: int, depth: int) -> int:
    return (index >> depth) & 1


class SparseMerkleTree:
    """
    Sparse Merkle tree with bounded depth and a content-addressed node store.

    Usage:
        tree = SparseMerkleTree(max_depth=32)
        tree.add(4, 444)
        tree.add(2, 222)
        proof = tree.get_proof(2)
        assert proof.existence and proof.value == 222
    """

    def __init__(
        self,
        max_depth: int = 64,
        *,
        hash_engine: Optional[HashEngine] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        if not isinstance(max_depth, int) or not 2 <= max_depth <= MAX_DEPTH_LIMIT:
            raise RegistryValidationException(
                f"max_depth must be between 2 and {MAX_DEPTH_LIMIT}, got {max_depth!r}",
                details={"max_depth": max_depth},
            )
        self._max_depth = max_depth
        self._hash = hash_engine or DEFAULT_HASH_ENGINE
        self._lock = lock or threading.RLock()

        self._nodes: dict[int, Node] = {}
        self._root: int = EMPTY_HASH
        self._roots: set[int] = {EMPTY_HASH}
        self._leaf_count = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def root(self) -> int:
        """Current root hash."""
        return self._root

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def hash_engine(self) -> HashEngine:
        return self._hash

    @property
    def leaf_count(self) -> int:
        return self._leaf_count

    def root_exists(self, root: int) -> bool:
        """Whether the tree has ever held this root."""
        return root in self._roots

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, index: int, value: int) -> int:
        """
        Insert a new leaf.

        Returns:
            The new root

        Raises:
            DuplicateLeafException: If index is already present
            MaxDepthReachedException: If the leaf cannot be placed within max_depth
        """
        return self._write(index, value, allow_add=True, allow_update=False)

    def update(self, index: int, value: int) -> int:
        """
        Replace the value of an existing leaf.

        Raises:
            NotFoundException: If index is not present
        """
        return self._write(index, value, allow_add=False, allow_update=True)

    def set(self, index: int, value: int) -> int:
        """Insert or update a leaf."""
        return self._write(index, value, allow_add=True, allow_update=True)

    def _write(self, index: int, value: int, *, allow_add: bool, allow_update: bool) -> int:
        self._check_element("index", index)
        self._check_element("value", value)

        with self._lock:
            staged: dict[int, Node] = {}
            new_leaf = Node(NodeType.LEAF, index=index, value=value)
            new_root, replaced = self._add_leaf(
                new_leaf, self._root, 0, staged,
                allow_add=allow_add, allow_update=allow_update,
            )

            # Commit: nodes first, then the root pointer readers start from
            self._nodes.update(staged)
            self._root = new_root
            self._roots.add(new_root)
            if not replaced:
                self._leaf_count += 1

        logger.debug(
            f"SMT {'update' if replaced else 'add'} index={index} "
            f"staged_nodes={len(staged)} root={new_root}"
        )
        return new_root

    def _add_leaf(
        self,
        new_leaf: Node,
        node_hash: int,
        depth: int,
        staged: dict[int, Node],
        *,
        allow_add: bool,
        allow_update: bool,
    ) -> tuple[int, bool]:
        """Rebuild the path below node_hash with new_leaf placed. Returns (hash, replaced)."""
        node = self._get_node(node_hash)

        if node.node_type == NodeType.EMPTY:
            if not allow_add:
                raise self._leaf_not_found(new_leaf.index)
            return self._stage(new_leaf, staged), False

        if node.node_type == NodeType.LEAF:
            if node.index == new_leaf.index:
                if not allow_update:
                    raise DuplicateLeafException(new_leaf.index)
                return self._stage(new_leaf, staged), True
            if not allow_add:
                raise self._leaf_not_found(new_leaf.index)
            return self._push_leaf(new_leaf, node, depth, staged), False

        # Middle node: descend by the index bit at this depth
        if _bit(new_leaf.index, depth):
            child, replaced = self._add_leaf(
                new_leaf, node.child_right, depth + 1, staged,
                allow_add=allow_add, allow_update=allow_update,
            )
            middle = Node(NodeType.MIDDLE, child_left=node.child_left, child_right=child)
        else:
            child, replaced = self._add_leaf(
                new_leaf, node.child_left, depth + 1, staged,
                allow_add=allow_add, allow_update=allow_update,
            )
            middle = Node(NodeType.MIDDLE, child_left=child, child_right=node.child_right)
        return self._stage(middle, staged), replaced

    def _push_leaf(self, new_leaf: Node, old_leaf: Node, depth: int, staged: dict[int, Node]) -> int:
        """Push two leaves sharing a position down until their paths diverge."""
        # No room for another middle level
        if depth >= self._max_depth - 1:
            raise MaxDepthReachedException(self._max_depth, new_leaf.index)

        new_bit = _bit(new_leaf.index, depth)
        old_bit = _bit(old_leaf.index, depth)

        if new_bit == old_bit:
            next_hash = self._push_leaf(new_leaf, old_leaf, depth + 1, staged)
            if new_bit:
                middle = Node(NodeType.MIDDLE, child_left=EMPTY_HASH, child_right=next_hash)
            else:
                middle = Node(NodeType.MIDDLE, child_left=next_hash, child_right=EMPTY_HASH)
            return self._stage(middle, staged)

        new_hash = self._stage(new_leaf, staged)
        old_hash = self._node_hash(old_leaf)
        if new_bit:
            middle = Node(NodeType.MIDDLE, child_left=old_hash, child_right=new_hash)
        else:
            middle = Node(NodeType.MIDDLE, child_left=new_hash, child_right=old_hash)
        return self._stage(middle, staged)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, index: int) -> Optional[int]:
        """Return the value stored at index, or None if not found."""
        proof = self._build_proof(index, self._root)
        return proof.value if proof.existence else None

    def get_proof(self, index: int) -> SmtProof:
        """Existence / non-existence proof of index against the current root."""
        self._check_element("index", index)
        return self._build_proof(index, self._root)

    def get_proof_by_root(self, index: int, root: int) -> SmtProof:
        """
        Proof of index against a root the tree held in the past.

        Raises:
            RootNotFoundException: If the tree never held root
        """
        self._check_element("index", index)
        if root not in self._roots:
            raise RootNotFoundException(root)
        return self._build_proof(index, root)

    def _build_proof(self, index: int, root: int) -> SmtProof:
        siblings = [EMPTY_HASH] * self._max_depth
        existence = False
        value = 0
        aux_existence = False
        aux_index = 0
        aux_value = 0

        node_hash = root
        for depth in range(self._max_depth):
            node = self._get_node(node_hash)

            if node.node_type == NodeType.EMPTY:
                break

            if node.node_type == NodeType.LEAF:
                if node.index == index:
                    existence = True
                else:
                    aux_existence = True
                    aux_index = node.index
                    aux_value = node.value
                value = node.value
                break

            if _bit(index, depth):
                siblings[depth] = node.child_left
                node_hash = node.child_right
            else:
                siblings[depth] = node.child_right
                node_hash = node.child_left
        else:
            raise RegistryException(
                "Tree path did not terminate within max depth",
                details={"index": index, "root": str(root)},
            )

        return SmtProof(
            root=root,
            existence=existence,
            siblings=siblings,
            index=index,
            value=value,
            aux_existence=aux_existence,
            aux_index=aux_index,
            aux_value=aux_value,
        )

    # -------------------------------------------------------------------------
    # Node store
    # -------------------------------------------------------------------------

    def _node_hash(self, node: Node) -> int:
        if node.node_type == NodeType.LEAF:
            return self._hash.hash_leaf(node.index, node.value)
        if node.node_type == NodeType.MIDDLE:
            return self._hash.hash_middle(node.child_left, node.child_right)
        return EMPTY_HASH

    def _stage(self, node: Node, staged: dict[int, Node]) -> int:
        node_hash = self._node_hash(node)
        staged[node_hash] = node
        return node_hash

    def _get_node(self, node_hash: int) -> Node:
        if node_hash == EMPTY_HASH:
            return EMPTY_NODE
        node = self._nodes.get(node_hash)
        if node is None:
            raise RegistryException(
                "Node store is missing a referenced node",
                details={"node_hash": str(node_hash)},
            )
        return node

    # -------------------------------------------------------------------------
    # Validation helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_element(name: str, value: int) -> None:
        if not is_field_element(value):
            raise RegistryValidationException(
                f"{name} must be a field element",
                code=ErrorCodes.INVALID_FIELD_ELEMENT,
                details={name: repr(value)},
            )

    @staticmethod
    def _leaf_not_found(index: int) -> NotFoundException:
        return NotFoundException(
            "Leaf does not exist",
            code=ErrorCodes.LEAF_NOT_FOUND,
            details={"index": index},
        )


__all__ = [
    "MAX_DEPTH_LIMIT",
    "Node",
    "NodeType",
    "EMPTY_NODE",
    "SparseMerkleTree",
]
