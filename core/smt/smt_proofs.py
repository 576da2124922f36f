"""
Module 03 - SMT Proofs
Existence / non-existence proof model and stateless verification.

A proof carries one sibling per tree level (unused levels are zero). The
node the path terminates at sits one level below the deepest non-zero
sibling, because a leaf is only ever pushed down until it diverges from
its neighbour. That makes the terminal depth recoverable from the proof
alone.

Terminal node kinds:
- existence=True:                  the leaf (index, value)
- existence=False, aux_existence:  a different leaf (aux_index, aux_value)
                                   sharing the path prefix
- neither:                         an empty subtree
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import DEFAULT_HASH_ENGINE, EMPTY_HASH, HashEngine


class SmtProof(BaseModel):
    """
    Merkle proof for one index of the sparse Merkle tree.

    Attributes:
        root: Root the proof is against
        existence: Whether index holds a value under root
        siblings: Sibling hashes from the root level down (len == max_depth)
        index: The queried index
        value: Stored value; for an aux proof, the aux leaf's value
        aux_existence: Whether the path ends at a different occupied leaf
        aux_index: Index of that leaf (0 otherwise)
        aux_value: Value of that leaf (0 otherwise)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: int = Field(..., ge=0)
    existence: bool
    siblings: list[int]
    index: int = Field(..., ge=0)
    value: int = Field(default=0, ge=0)
    aux_existence: bool = False
    aux_index: int = Field(default=0, ge=0)
    aux_value: int = Field(default=0, ge=0)

    @property
    def depth(self) -> int:
        """Depth of the terminal node of the proof path."""
        for level in range(len(self.siblings) - 1, -1, -1):
            if self.siblings[level] != EMPTY_HASH:
                return level + 1
        return 0


def compute_proof_root(proof: SmtProof, hash_engine: HashEngine = DEFAULT_HASH_ENGINE) -> int:
    """
    Recompute the root implied by a proof.

    Starts from the terminal node hash and folds the siblings bottom-up,
    placing the running hash left or right by the index bit at each level.
    """
    if proof.existence:
        current = hash_engine.hash_leaf(proof.index, proof.value)
    elif proof.aux_existence:
        current = hash_engine.hash_leaf(proof.aux_index, proof.aux_value)
    else:
        current = EMPTY_HASH

    for level in range(proof.depth - 1, -1, -1):
        sibling = proof.siblings[level]
        if (proof.index >> level) & 1:
            current = hash_engine.hash_middle(sibling, current)
        else:
            current = hash_engine.hash_middle(current, sibling)

    return current


def verify_smt_proof(proof: SmtProof, hash_engine: HashEngine = DEFAULT_HASH_ENGINE) -> bool:
    """
    Verify a sparse Merkle tree proof against its claimed root.

    An aux proof is only valid if the aux leaf is a different index that
    shares the queried index's path down to the terminal depth.

    Returns:
        True if the proof is internally consistent and matches its root
    """
    if proof.existence and proof.aux_existence:
        return False

    if proof.aux_existence:
        if proof.aux_index == proof.index:
            return False
        mask = (1 << proof.depth) - 1
        if (proof.aux_index & mask) != (proof.index & mask):
            return False

    return compute_proof_root(proof, hash_engine) == proof.root


__all__ = [
    "SmtProof",
    "compute_proof_root",
    "verify_smt_proof",
]
