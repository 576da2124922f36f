"""
Core Identity Module

Identity id derivation from genesis states.
"""

from .genesis import (
    ID_LENGTH,
    IdTypeLike,
    calc_id_from_genesis_state,
    id_type_of,
    id_type_to_hex,
    is_genesis_state,
    normalize_id_type,
)

__all__ = [
    "ID_LENGTH",
    "IdTypeLike",
    "calc_id_from_genesis_state",
    "id_type_of",
    "id_type_to_hex",
    "is_genesis_state",
    "normalize_id_type",
]
