"""
Core cryptographic utilities.

Module 02 provides field-element hashing for the identity state tree.
"""
from .hashing import (
    DEFAULT_HASH_ENGINE,
    EMPTY_HASH,
    FIELD_PRIME,
    HashEngine,
    Sha256FieldHasher,
    element_to_bytes,
    element_to_hex,
    from_hex,
    is_field_element,
    sha256,
    to_hex,
)

__all__ = [
    "DEFAULT_HASH_ENGINE",
    "EMPTY_HASH",
    "FIELD_PRIME",
    "HashEngine",
    "Sha256FieldHasher",
    "element_to_bytes",
    "element_to_hex",
    "from_hex",
    "is_field_element",
    "sha256",
    "to_hex",
]
