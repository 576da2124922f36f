"""
Core SMT Module

Sparse Merkle tree with existence / non-existence proofs.
"""

from .smt_proofs import SmtProof, compute_proof_root, verify_smt_proof
from .sparse_merkle_tree import EMPTY_NODE, MAX_DEPTH_LIMIT, Node, NodeType, SparseMerkleTree

__all__ = [
    "SmtProof",
    "compute_proof_root",
    "verify_smt_proof",
    "EMPTY_NODE",
    "MAX_DEPTH_LIMIT",
    "Node",
    "NodeType",
    "SparseMerkleTree",
]
