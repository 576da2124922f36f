"""
Module 05 - Identity ID Derivation
Derive an identity identifier from its genesis state.

ID Layout (31 bytes, little-endian integer):
    id_type (2) || genesis (27) || checksum (2)

- genesis is the lower 27 bytes of the 32-byte big-endian state
- checksum is the sum of the preceding 29 bytes, truncated to 16 bits and
  stored little-endian

Only the lower 27 bytes of the state participate, so two states differing
only in their top 5 bytes derive the same id.
"""

from __future__ import annotations

from typing import Union

from core.schemas.errors import RegistryValidationException


ID_TYPE_LENGTH = 2
GENESIS_LENGTH = 27
CHECKSUM_LENGTH = 2
ID_LENGTH = ID_TYPE_LENGTH + GENESIS_LENGTH + CHECKSUM_LENGTH

IdTypeLike = Union[bytes, str]


def normalize_id_type(id_type: IdTypeLike) -> bytes:
    """
    Accept an id type as 2 raw bytes or a hex string ("0x0212", "0212").

    Raises:
        RegistryValidationException: If the value is not exactly 2 bytes
    """
    if isinstance(id_type, str):
        text = id_type[2:] if id_type.lower().startswith("0x") else id_type
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise RegistryValidationException(
                f"Invalid id type hex: {id_type!r}",
                details={"id_type": id_type},
            ) from e
    elif isinstance(id_type, (bytes, bytearray)):
        raw = bytes(id_type)
    else:
        raise RegistryValidationException(
            f"id type must be bytes or hex string, got {type(id_type).__name__}",
            details={"id_type": repr(id_type)},
        )

    if len(raw) != ID_TYPE_LENGTH:
        raise RegistryValidationException(
            f"id type must be {ID_TYPE_LENGTH} bytes, got {len(raw)}",
            details={"id_type": raw.hex()},
        )
    return raw


def id_type_to_hex(id_type: bytes) -> str:
    return "0x" + id_type.hex()


def _checksum(data: bytes) -> bytes:
    return (sum(data) & 0xFFFF).to_bytes(CHECKSUM_LENGTH, "little")


def calc_id_from_genesis_state(id_type: IdTypeLike, state: int) -> int:
    """
    Compute the identity id for a genesis state.

    Args:
        id_type: 2-byte id type (raw bytes or hex)
        state: Genesis state commitment (< 2**256)

    Returns:
        The id as an integer
    """
    type_bytes = normalize_id_type(id_type)
    if not isinstance(state, int) or isinstance(state, bool) or not 0 <= state < 2 ** 256:
        raise RegistryValidationException(
            "state must be a 256-bit unsigned integer",
            details={"state": repr(state)},
        )

    genesis = state.to_bytes(32, "big")[-GENESIS_LENGTH:]
    before_checksum = type_bytes + genesis
    id_bytes = before_checksum + _checksum(before_checksum)
    return int.from_bytes(id_bytes, "little")


def id_type_of(identity_id: int) -> bytes:
    """Extract the 2-byte id type from an id."""
    if not isinstance(identity_id, int) or isinstance(identity_id, bool) or not 0 <= identity_id < 2 ** (8 * ID_LENGTH):
        raise RegistryValidationException(
            "id must be a 31-byte unsigned integer",
            details={"id": repr(identity_id)},
        )
    return identity_id.to_bytes(ID_LENGTH, "little")[:ID_TYPE_LENGTH]


def is_genesis_state(identity_id: int, state: int) -> bool:
    """Whether identity_id is the id derived from state under the id's own type."""
    return calc_id_from_genesis_state(id_type_of(identity_id), state) == identity_id


__all__ = [
    "ID_LENGTH",
    "IdTypeLike",
    "calc_id_from_genesis_state",
    "id_type_of",
    "id_type_to_hex",
    "is_genesis_state",
    "normalize_id_type",
]
