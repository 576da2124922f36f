"""
Module 10 - GIST Routes

GIST root, root history lookups and GIST proofs.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_ledger
from api.errors import InvalidRequestError
from api.models.responses import (
    GistProofResponse,
    GistRootResponse,
    RootHistoryResponse,
    RootInfoResponse,
)
from core.schemas.history import RootInfo
from orchestrator.ledger import Ledger


router = APIRouter(prefix="/gist", tags=["gist"])


def _optional_info(info: Optional[RootInfo]) -> Optional[RootInfoResponse]:
    return RootInfoResponse.from_info(info) if info is not None else None


@router.get("/root", response_model=GistRootResponse)
def get_gist_root(ledger: Ledger = Depends(get_ledger)) -> GistRootResponse:
    return GistRootResponse(root=str(ledger.state.get_gist_root()))


@router.get("/roots", response_model=RootHistoryResponse)
def get_root_history(
    start: int = Query(0, ge=0),
    length: int = Query(...),
    ledger: Ledger = Depends(get_ledger),
) -> RootHistoryResponse:
    entries = ledger.state.get_gist_root_history(start, length)
    return RootHistoryResponse(
        total=ledger.state.get_gist_root_history_length(),
        entries=[RootInfoResponse.from_info(e) for e in entries],
    )


@router.get("/roots/by-time/{timestamp}", response_model=Optional[RootInfoResponse])
def get_root_info_by_time(timestamp: int, ledger: Ledger = Depends(get_ledger)) -> Optional[RootInfoResponse]:
    return _optional_info(ledger.state.get_gist_root_info_by_time(timestamp))


@router.get("/roots/by-block/{block}", response_model=Optional[RootInfoResponse])
def get_root_info_by_block(block: int, ledger: Ledger = Depends(get_ledger)) -> Optional[RootInfoResponse]:
    return _optional_info(ledger.state.get_gist_root_info_by_block(block))


@router.get("/roots/{root}", response_model=RootInfoResponse)
def get_root_info(root: int, ledger: Ledger = Depends(get_ledger)) -> RootInfoResponse:
    return RootInfoResponse.from_info(ledger.state.get_gist_root_info(root))


@router.get("/proof/{id}", response_model=GistProofResponse)
def get_gist_proof(
    id: int,
    root: Optional[int] = Query(None, ge=0),
    timestamp: Optional[int] = Query(None, ge=0),
    block: Optional[int] = Query(None, ge=0),
    ledger: Ledger = Depends(get_ledger),
) -> GistProofResponse:
    """
    GIST proof for an identity.

    At most one of root / timestamp / block selects a historical root;
    without any the proof is against the current root.
    """
    selectors = [s for s in (root, timestamp, block) if s is not None]
    if len(selectors) > 1:
        raise InvalidRequestError("Use at most one of root, timestamp, block")

    if root is not None:
        proof = ledger.state.get_gist_proof_by_root(id, root)
    elif timestamp is not None:
        proof = ledger.state.get_gist_proof_by_time(id, timestamp)
    elif block is not None:
        proof = ledger.state.get_gist_proof_by_block(id, block)
    else:
        proof = ledger.state.get_gist_proof(id)
    return GistProofResponse.from_proof(proof)
