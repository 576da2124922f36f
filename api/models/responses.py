"""
Module 10 - API Response Models

Pydantic models for API response serialization.

Field elements are serialized as decimal strings and byte payloads as
0x-prefixed hex, so clients without big integers can round-trip them.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from core.schemas.history import RootInfo
from core.schemas.requests import ProofRequest, ProofRequestInfo, ProofStatus
from core.schemas.state import StateInfo
from core.smt import SmtProof


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "idstate-registry-api"
    version: str = "v1"


class SummaryResponse(BaseModel):
    """Response for GET /summary endpoint."""

    gist_root: str
    root_history_length: int
    leaf_count: int
    requests_count: int
    events_count: int


class StateInfoResponse(BaseModel):
    id: str
    state: str
    replaced_by_state: str
    created_at_timestamp: int
    replaced_at_timestamp: int
    created_at_block: int
    replaced_at_block: int

    @classmethod
    def from_info(cls, info: StateInfo) -> "StateInfoResponse":
        return cls(
            id=str(info.id),
            state=str(info.state),
            replaced_by_state=str(info.replaced_by_state),
            created_at_timestamp=info.created_at_timestamp,
            replaced_at_timestamp=info.replaced_at_timestamp,
            created_at_block=info.created_at_block,
            replaced_at_block=info.replaced_at_block,
        )


class RootInfoResponse(BaseModel):
    root: str
    replaced_by_root: str
    created_at_timestamp: int
    replaced_at_timestamp: int
    created_at_block: int
    replaced_at_block: int

    @classmethod
    def from_info(cls, info: RootInfo) -> "RootInfoResponse":
        return cls(
            root=str(info.root),
            replaced_by_root=str(info.replaced_by_root),
            created_at_timestamp=info.created_at_timestamp,
            replaced_at_timestamp=info.replaced_at_timestamp,
            created_at_block=info.created_at_block,
            replaced_at_block=info.replaced_at_block,
        )


class RootHistoryResponse(BaseModel):
    total: int = Field(..., description="Length of the full root history")
    entries: list[RootInfoResponse] = Field(default_factory=list)


class GistRootResponse(BaseModel):
    root: str


class GistProofResponse(BaseModel):
    root: str
    existence: bool
    siblings: list[str]
    index: str
    value: str
    aux_existence: bool
    aux_index: str
    aux_value: str

    @classmethod
    def from_proof(cls, proof: SmtProof) -> "GistProofResponse":
        return cls(
            root=str(proof.root),
            existence=proof.existence,
            siblings=[str(s) for s in proof.siblings],
            index=str(proof.index),
            value=str(proof.value),
            aux_existence=proof.aux_existence,
            aux_index=str(proof.aux_index),
            aux_value=str(proof.aux_value),
        )


class ProofRequestResponse(BaseModel):
    request_id: int
    metadata: str
    validator: str
    data: str = Field(..., description="Validator params as 0x-prefixed hex")
    controller: Optional[str] = None
    is_disabled: Optional[bool] = None

    @classmethod
    def from_request(cls, request: ProofRequest) -> "ProofRequestResponse":
        extra: dict[str, Any] = {}
        if isinstance(request, ProofRequestInfo):
            extra = {"controller": request.controller, "is_disabled": request.is_disabled}
        return cls(
            request_id=request.request_id,
            metadata=request.metadata,
            validator=request.validator,
            data=_hex(request.data),
            **extra,
        )


class ProofRequestListResponse(BaseModel):
    total: int
    requests: list[ProofRequestResponse] = Field(default_factory=list)


class ValidatorListResponse(BaseModel):
    validators: list[str] = Field(default_factory=list)


class ProofStatusResponse(BaseModel):
    is_proved: bool
    validator_version: str
    block_number: int
    block_timestamp: int
    storage: dict[str, str] = Field(default_factory=dict)
    raw_values: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_status(cls, status: ProofStatus) -> "ProofStatusResponse":
        return cls(
            is_proved=status.is_proved,
            validator_version=status.validator_version,
            block_number=status.block_number,
            block_timestamp=status.block_timestamp,
            storage={k: str(v) for k, v in status.storage.items()},
            raw_values={k: _hex(v) for k, v in status.raw_values.items()},
        )


class VerifyResponseResult(BaseModel):
    ok: bool = True
    signals: dict[str, str] = Field(default_factory=dict)


class OkResponse(BaseModel):
    ok: bool = True


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    category: str = Field(default="internal", description="Error category")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
