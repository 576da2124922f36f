"""
Module 01 - Schemas
File: requests.py

Purpose: Proof request definitions and per-requester proof status.

A request binds an opaque query descriptor (metadata + params) to a
whitelisted validator. A proof status is written only after a successful
verification of a response to that request.
"""

from pydantic import BaseModel, ConfigDict, Field


class ProofRequestInput(BaseModel):
    """Body of set_request: what the caller controls."""

    model_config = ConfigDict(extra="forbid")

    metadata: str = Field(default="", description="Opaque request descriptor")
    validator: str = Field(..., min_length=1, description="Whitelisted validator reference")
    data: bytes = Field(default=b"", description="Opaque validator params")


class ProofRequest(BaseModel):
    """Public view of a request (what get_request returns)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    request_id: int = Field(..., ge=0)
    metadata: str = Field(default="")
    validator: str = Field(..., min_length=1)
    data: bytes = Field(default=b"")


class ProofRequestInfo(ProofRequest):
    """Full request record including ownership and lifecycle flags."""

    controller: str = Field(..., min_length=1, description="Caller that registered the request")
    is_disabled: bool = Field(default=False)

    def public_view(self) -> ProofRequest:
        return ProofRequest(
            request_id=self.request_id,
            metadata=self.metadata,
            validator=self.validator,
            data=self.data,
        )


class ProofStatus(BaseModel):
    """
    Outcome of the latest successful proof for (requester, request_id).

    storage holds the named signals extracted by the validator;
    raw_values holds opaque blobs attached afterwards. Both are
    last-write-wins.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_proved: bool = Field(default=False)
    validator_version: str = Field(default="")
    block_number: int = Field(default=0, ge=0)
    block_timestamp: int = Field(default=0, ge=0)
    storage: dict[str, int] = Field(default_factory=dict)
    raw_values: dict[str, bytes] = Field(default_factory=dict)
