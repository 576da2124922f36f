"""
Module 02 - Hashing Utilities
Field-element hashing for the global identity state tree.

This module provides:
- SHA-256 hashing for raw bytes
- The HashEngine protocol consumed by the sparse Merkle tree
- A default SHA-256 based engine reducing digests into the BN254 scalar field
- Hex encoding/decoding with 0x prefix

Hashing Rules (Hard Contracts):
1. Every tree value is a field element: 0 <= x < FIELD_PRIME
2. Leaf hashing:   hash_elements(index, value, 1)
3. Middle hashing: hash_elements(left, right)
4. The empty subtree hashes to 0 and is never hashed again

Determinism Notes:
- Elements are encoded as 32-byte big-endian words before hashing
- Each arity gets its own domain tag so (a, b) and (a, b, 1) never collide
"""
from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable


# BN254 scalar field, the field the identity circuits operate on
FIELD_PRIME: int = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

# Hash of an empty subtree
EMPTY_HASH: int = 0


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def is_field_element(value: int) -> bool:
    """Check that value is an int inside the scalar field."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < FIELD_PRIME


def element_to_bytes(value: int) -> bytes:
    """Encode a field element as a 32-byte big-endian word."""
    return value.to_bytes(32, "big")


@runtime_checkable
class HashEngine(Protocol):
    """
    Protocol for the tree hash function.

    Implementations must be stateless and deterministic. The concrete
    circuit-friendly hash (e.g. Poseidon) can be plugged in here.
    """

    def hash_elements(self, *elements: int) -> int:
        """Hash one or more field elements into a field element."""
        ...

    def hash_leaf(self, index: int, value: int) -> int:
        """Hash a leaf node."""
        ...

    def hash_middle(self, left: int, right: int) -> int:
        """Hash a middle node from its two children."""
        ...


class Sha256FieldHasher:
    """
    Default HashEngine: SHA-256 reduced modulo the field prime.

    hash_elements(e1..en) = int(sha256(tag || e1 || .. || en)) mod FIELD_PRIME
    where tag is b"idstate/" followed by the arity as one byte.
    """

    name = "sha256-field"

    def hash_elements(self, *elements: int) -> int:
        if not elements:
            raise ValueError("hash_elements requires at least one element")
        if len(elements) > 16:
            raise ValueError(f"hash_elements supports at most 16 elements, got {len(elements)}")
        for element in elements:
            if not is_field_element(element):
                raise ValueError(f"Not a field element: {element!r}")
        payload = b"idstate/" + bytes([len(elements)])
        payload += b"".join(element_to_bytes(e) for e in elements)
        return int.from_bytes(sha256(payload), "big") % FIELD_PRIME

    def hash_leaf(self, index: int, value: int) -> int:
        return self.hash_elements(index, value, 1)

    def hash_middle(self, left: int, right: int) -> int:
        return self.hash_elements(left, right)


DEFAULT_HASH_ENGINE: HashEngine = Sha256FieldHasher()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def element_to_hex(value: int) -> str:
    """Render a field element as a 0x-prefixed 32-byte hex word."""
    return to_hex(element_to_bytes(value))


__all__ = [
    "FIELD_PRIME",
    "EMPTY_HASH",
    "sha256",
    "is_field_element",
    "element_to_bytes",
    "element_to_hex",
    "HashEngine",
    "Sha256FieldHasher",
    "DEFAULT_HASH_ENGINE",
    "to_hex",
    "from_hex",
]
