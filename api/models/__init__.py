"""API request and response models."""

from api.models.requests import (
    CallerBody,
    LinkedProofsBody,
    RawValueBody,
    SetRequestBody,
    SubmitResponseBody,
    TransitStateRequest,
)
from api.models.responses import (
    ErrorDetail,
    ErrorResponse,
    GistProofResponse,
    GistRootResponse,
    HealthResponse,
    OkResponse,
    ProofRequestListResponse,
    ProofRequestResponse,
    ProofStatusResponse,
    RootHistoryResponse,
    RootInfoResponse,
    StateInfoResponse,
    SummaryResponse,
    ValidatorListResponse,
    VerifyResponseResult,
)

__all__ = [
    "CallerBody",
    "LinkedProofsBody",
    "RawValueBody",
    "SetRequestBody",
    "SubmitResponseBody",
    "TransitStateRequest",
    "ErrorDetail",
    "ErrorResponse",
    "GistProofResponse",
    "GistRootResponse",
    "HealthResponse",
    "OkResponse",
    "ProofRequestListResponse",
    "ProofRequestResponse",
    "ProofStatusResponse",
    "RootHistoryResponse",
    "RootInfoResponse",
    "StateInfoResponse",
    "SummaryResponse",
    "ValidatorListResponse",
    "VerifyResponseResult",
]
