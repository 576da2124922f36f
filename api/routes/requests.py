"""
Module 10 - Proof Request Routes

Proof request registration, lifecycle and listing.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_ledger
from api.models.requests import CallerBody, SetRequestBody
from api.models.responses import (
    OkResponse,
    ProofRequestListResponse,
    ProofRequestResponse,
    ValidatorListResponse,
)
from core.schemas.requests import ProofRequestInput
from orchestrator.ledger import Ledger


router = APIRouter(tags=["requests"])


@router.get("/validators", response_model=ValidatorListResponse)
def list_validators(ledger: Ledger = Depends(get_ledger)) -> ValidatorListResponse:
    return ValidatorListResponse(validators=ledger.requests.get_whitelisted_validators())


@router.put("/requests/{request_id}", response_model=ProofRequestResponse)
def set_request(
    request_id: int,
    body: SetRequestBody,
    ledger: Ledger = Depends(get_ledger),
) -> ProofRequestResponse:
    """Register a proof request, or update one the caller controls."""
    info = ledger.requests.set_request(
        request_id,
        ProofRequestInput(metadata=body.metadata, validator=body.validator, data=body.data),
        caller=body.caller,
    )
    return ProofRequestResponse.from_request(info)


@router.post("/requests/{request_id}/disable", response_model=OkResponse)
def disable_request(request_id: int, body: CallerBody, ledger: Ledger = Depends(get_ledger)) -> OkResponse:
    ledger.requests.disable_request(request_id, caller=body.caller)
    return OkResponse()


@router.post("/requests/{request_id}/enable", response_model=OkResponse)
def enable_request(request_id: int, body: CallerBody, ledger: Ledger = Depends(get_ledger)) -> OkResponse:
    ledger.requests.enable_request(request_id, caller=body.caller)
    return OkResponse()


@router.get("/requests/{request_id}", response_model=ProofRequestResponse)
def get_request(request_id: int, ledger: Ledger = Depends(get_ledger)) -> ProofRequestResponse:
    return ProofRequestResponse.from_request(ledger.requests.get_request_full_info(request_id))


@router.get("/requests", response_model=ProofRequestListResponse)
def list_requests(
    offset: int = Query(0, ge=0),
    length: int = Query(100, ge=0),
    controller: Optional[str] = Query(None),
    ledger: Ledger = Depends(get_ledger),
) -> ProofRequestListResponse:
    """Page through requests, optionally only those of one controller."""
    if controller is None:
        total = ledger.requests.get_requests_count()
        items = ledger.requests.get_requests(offset, length)
    else:
        total = ledger.requests.get_requests_count_by_controller(controller)
        items = ledger.requests.get_requests_by_controller(controller, offset, length)
    return ProofRequestListResponse(
        total=total,
        requests=[ProofRequestResponse.from_request(r) for r in items],
    )
