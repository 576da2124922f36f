"""
State Transition Validator

Verifies identity state transition proofs submitted with transit_state.
Public inputs: [userID, oldUserState, newUserState, isOldStateGenesis].
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .base import BaseValidator, ProofChecker


class StateTransitionValidator(BaseValidator):
    _name = "StateTransitionValidator"
    _version = "1.0.0"
    signal_layout = ("userID", "oldUserState", "newUserState", "isOldStateGenesis")
    binds_sender = False

    def __init__(self, proof_checker: ProofChecker, *, version: Optional[str] = None) -> None:
        super().__init__(version=version)
        self._proof_checker = proof_checker

    def _check(self, inputs: Sequence[int], signals: dict[str, int], proof: Any, params: bytes) -> bool:
        return bool(self._proof_checker(inputs, proof))
