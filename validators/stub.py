"""
Stub Validator

Deterministic validator for tests and local development. Accepts a proof
mapping {"valid": bool}; anything else is rejected.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .base import BaseValidator


class StubValidator(BaseValidator):
    """
    Validator whose verdict is carried by the proof itself.

    Usage:
        validator = StubValidator(signal_layout=("userID", "linkID"))
        validator.verify([42, 7], {"valid": True}, b"")
    """

    _name = "StubValidator"
    _version = "stub-v1"

    def __init__(
        self,
        signal_layout: Sequence[str] = ("userID",),
        *,
        binds_sender: bool = False,
        version: Optional[str] = None,
    ) -> None:
        super().__init__(version=version)
        self.signal_layout = tuple(signal_layout)
        self.binds_sender = binds_sender

    def _check(self, inputs: Sequence[int], signals: dict[str, int], proof: Any, params: bytes) -> bool:
        return isinstance(proof, dict) and proof.get("valid") is True
