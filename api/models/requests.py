"""
Module 10 - API Request Models

Pydantic models for API request validation.

Field elements are accepted as JSON integers or decimal strings; opaque
byte payloads as 0x-prefixed hex strings.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _parse_hex_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise ValueError("expected a hex string")
    text = value[2:] if value.lower().startswith("0x") else value
    return bytes.fromhex(text)


class TransitStateRequest(BaseModel):
    """Request body for POST /state/transit."""

    id: int = Field(..., ge=0, description="Identity identifier")
    old_state: int = Field(..., ge=0, description="Latest (or genesis) state of the identity")
    new_state: int = Field(..., ge=0, description="State to publish")
    is_old_state_genesis: bool = Field(default=False)
    proof: Any = Field(default=None, description="Opaque state transition proof")


class SetRequestBody(BaseModel):
    """Request body for PUT /requests/{request_id}."""

    caller: str = Field(..., min_length=1, description="Identity of the calling account")
    metadata: str = Field(default="", description="Opaque request descriptor")
    validator: str = Field(..., min_length=1, description="Whitelisted validator reference")
    data: bytes = Field(default=b"", description="Validator params as 0x-prefixed hex")

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> bytes:
        return _parse_hex_bytes(value)


class CallerBody(BaseModel):
    """Request body for caller-authorized actions without parameters."""

    caller: str = Field(..., min_length=1)


class SubmitResponseBody(BaseModel):
    """Request body for POST /requests/{request_id}/responses."""

    inputs: list[int] = Field(..., description="Public inputs of the proof")
    proof: Any = Field(default=None, description="Opaque proof")
    requester_id: int | None = Field(
        default=None,
        ge=0,
        description="Identity of the submitter; required for sender-bound proofs",
    )


class LinkedProofsBody(BaseModel):
    """Request body for POST /proofs/linked."""

    request_ids: list[int] = Field(..., description="Requests whose proofs must share a linkID")
    requester: int = Field(..., ge=0)


class RawValueBody(BaseModel):
    """Request body for PUT /proofs/{requester}/{request_id}/raw/{field_name}."""

    raw_value: bytes = Field(..., description="Opaque value as 0x-prefixed hex")

    @field_validator("raw_value", mode="before")
    @classmethod
    def _decode_raw_value(cls, value: Any) -> bytes:
        return _parse_hex_bytes(value)
