"""
Module 10 - State Routes

Identity state transitions and per-identity state history.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from api.deps import get_ledger
from api.models.requests import TransitStateRequest
from api.models.responses import StateInfoResponse
from orchestrator.ledger import Ledger


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/state", tags=["state"])


@router.post("/transit", response_model=StateInfoResponse)
def transit_state(body: TransitStateRequest, ledger: Ledger = Depends(get_ledger)) -> StateInfoResponse:
    """Publish a new state for an identity."""
    info = ledger.state.transit_state(
        body.id,
        body.old_state,
        body.new_state,
        body.is_old_state_genesis,
        proof=body.proof,
    )
    return StateInfoResponse.from_info(info)


@router.get("/{id}", response_model=StateInfoResponse)
def get_state_info(id: int, ledger: Ledger = Depends(get_ledger)) -> StateInfoResponse:
    return StateInfoResponse.from_info(ledger.state.get_state_info_by_id(id))


@router.get("/{id}/history", response_model=list[StateInfoResponse])
def get_state_history(
    id: int,
    start: int = Query(0, ge=0),
    length: int = Query(...),
    ledger: Ledger = Depends(get_ledger),
) -> list[StateInfoResponse]:
    infos = ledger.state.get_state_info_history_by_id(id, start, length)
    return [StateInfoResponse.from_info(i) for i in infos]


@router.get("/{id}/states/{state}", response_model=StateInfoResponse)
def get_state_info_by_state(id: int, state: int, ledger: Ledger = Depends(get_ledger)) -> StateInfoResponse:
    return StateInfoResponse.from_info(ledger.state.get_state_info_by_id_and_state(id, state))
