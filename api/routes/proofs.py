"""
Module 10 - Proof Routes

Proof response submission, dry-run verification, linked proofs and
proof status queries.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_ledger
from api.models.requests import LinkedProofsBody, RawValueBody, SubmitResponseBody
from api.models.responses import OkResponse, ProofStatusResponse, VerifyResponseResult
from orchestrator.ledger import Ledger


logger = logging.getLogger(__name__)

router = APIRouter(tags=["proofs"])


@router.post("/requests/{request_id}/responses", response_model=ProofStatusResponse)
def submit_response(
    request_id: int,
    body: SubmitResponseBody,
    ledger: Ledger = Depends(get_ledger),
) -> ProofStatusResponse:
    """Verify a proof response and record the proof status."""
    status = ledger.coordinator.submit_response(
        request_id,
        body.inputs,
        body.proof,
        requester_id=body.requester_id,
    )
    return ProofStatusResponse.from_status(status)


@router.post("/requests/{request_id}/responses/verify", response_model=VerifyResponseResult)
def verify_response(
    request_id: int,
    body: SubmitResponseBody,
    ledger: Ledger = Depends(get_ledger),
) -> VerifyResponseResult:
    """Run every submission check without recording anything."""
    result = ledger.coordinator.verify_response(
        request_id,
        body.inputs,
        body.proof,
        requester_id=body.requester_id,
    )
    return VerifyResponseResult(signals={k: str(v) for k, v in result.signals.items()})


@router.post("/proofs/linked", response_model=OkResponse)
def verify_linked_proofs(body: LinkedProofsBody, ledger: Ledger = Depends(get_ledger)) -> OkResponse:
    ledger.coordinator.verify_linked_proofs(body.request_ids, body.requester)
    return OkResponse()


@router.get("/proofs/{requester}/{request_id}", response_model=ProofStatusResponse)
def get_proof_status(requester: int, request_id: int, ledger: Ledger = Depends(get_ledger)) -> ProofStatusResponse:
    return ProofStatusResponse.from_status(ledger.coordinator.get_proof_status(requester, request_id))


@router.put("/proofs/{requester}/{request_id}/raw/{field_name}", response_model=ProofStatusResponse)
def add_storage_field_raw_value(
    requester: int,
    request_id: int,
    field_name: str,
    body: RawValueBody,
    ledger: Ledger = Depends(get_ledger),
) -> ProofStatusResponse:
    status = ledger.coordinator.add_storage_field_raw_value(
        request_id,
        field_name,
        body.raw_value,
        requester,
    )
    return ProofStatusResponse.from_status(status)
