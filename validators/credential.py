"""
Credential Atomic Query Validators

Validators for credential atomic query proofs. The circuit check itself is
delegated to a pluggable ProofChecker; these classes own the checks that
bind a proof to its request and to the registry:

- circuitQueryHash must match the query hash packed in the request params
- gistRoot must be a root the state registry has held, and a replaced root
  must not be older than the GIST root expiration timeout
- the proof timestamp must not be older than the proof expiration timeout

The v3 validator additionally binds the proof to the submitting identity
and carries the linkID / nullifier signals used for linked proofs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from core.clock import BlockClock
from core.schemas.errors import ProofVerificationException

from .base import BaseValidator, ProofChecker

if TYPE_CHECKING:
    from registry.state_registry import StateRegistry


logger = logging.getLogger(__name__)

DEFAULT_PROOF_EXPIRATION_TIMEOUT = 3600
DEFAULT_GIST_ROOT_EXPIRATION_TIMEOUT = 3600


class CredentialQueryParams(BaseModel):
    """Request params understood by the credential validators (JSON, camelCase)."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    query_hash: int = Field(..., ge=0)
    group_id: int = Field(default=0, ge=0, alias="groupID")
    verifier_id: int = Field(default=0, ge=0, alias="verifierID")
    nullifier_session_id: int = Field(default=0, ge=0, alias="nullifierSessionID")

    def pack(self) -> bytes:
        """Encode as the opaque data of a proof request."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def unpack(cls, data: bytes) -> "CredentialQueryParams":
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise ProofVerificationException(
                "Invalid request params",
                details={"errors": e.error_count()},
            ) from e


class CredentialAtomicQueryValidator(BaseValidator):
    """
    Credential atomic query validator (v2 layout, no sender binding).

    Usage:
        validator = CredentialAtomicQueryValidator(checker, state_registry=ledger.state)
    """

    _name = "CredentialAtomicQueryValidator"
    _version = "2.0.0"
    signal_layout = (
        "merklized",
        "userID",
        "circuitQueryHash",
        "requestID",
        "challenge",
        "gistRoot",
        "issuerID",
        "isRevocationChecked",
        "issuerClaimNonRevState",
        "timestamp",
    )
    binds_sender = False

    def __init__(
        self,
        proof_checker: ProofChecker,
        *,
        state_registry: Optional["StateRegistry"] = None,
        clock: Optional[BlockClock] = None,
        proof_expiration_timeout: int = DEFAULT_PROOF_EXPIRATION_TIMEOUT,
        gist_root_expiration_timeout: int = DEFAULT_GIST_ROOT_EXPIRATION_TIMEOUT,
        version: Optional[str] = None,
    ) -> None:
        super().__init__(version=version)
        self._proof_checker = proof_checker
        self._state_registry = state_registry
        self._clock = clock
        self.proof_expiration_timeout = proof_expiration_timeout
        self.gist_root_expiration_timeout = gist_root_expiration_timeout

    def set_proof_expiration_timeout(self, seconds: int) -> None:
        self.proof_expiration_timeout = seconds

    def set_gist_root_expiration_timeout(self, seconds: int) -> None:
        self.gist_root_expiration_timeout = seconds

    def _check(self, inputs: Sequence[int], signals: dict[str, int], proof: Any, params: bytes) -> bool:
        query = CredentialQueryParams.unpack(params)

        if signals["circuitQueryHash"] != query.query_hash:
            raise ProofVerificationException(
                "Query hash does not match the requested one",
                details={"expected": str(query.query_hash), "actual": str(signals["circuitQueryHash"])},
            )

        self._check_gist_root(signals["gistRoot"])
        self._check_proof_expiration(signals["timestamp"])
        self._check_query_extras(signals, query)

        return bool(self._proof_checker(inputs, proof))

    def _check_query_extras(self, signals: dict[str, int], query: CredentialQueryParams) -> None:
        """Hook for layout-specific checks."""

    def _check_gist_root(self, gist_root: int) -> None:
        if self._state_registry is None:
            return
        if not self._state_registry.gist_root_exists(gist_root):
            raise ProofVerificationException(
                "Gist root state isn't in state contract",
                details={"gist_root": str(gist_root)},
            )
        info = self._state_registry.get_gist_root_info(gist_root)
        if self._clock is not None and info.replaced_at_timestamp != 0:
            age = self._clock.peek().timestamp - info.replaced_at_timestamp
            if age > self.gist_root_expiration_timeout:
                raise ProofVerificationException(
                    "Gist root is expired",
                    details={"gist_root": str(gist_root), "age": age},
                )

    def _check_proof_expiration(self, proof_timestamp: int) -> None:
        if self._clock is None:
            return
        now = self._clock.peek().timestamp
        if proof_timestamp > now or now - proof_timestamp > self.proof_expiration_timeout:
            raise ProofVerificationException(
                "Generated proof is outdated",
                details={"proof_timestamp": proof_timestamp, "now": now},
            )


class CredentialAtomicQueryV3Validator(CredentialAtomicQueryValidator):
    """
    Credential atomic query validator (v3 layout).

    Binds the proof to the submitting identity and exposes linkID and
    nullifier for cross-proof linking.
    """

    _name = "CredentialAtomicQueryV3Validator"
    _version = "3.0.0-beta.1"
    signal_layout = (
        "userID",
        "circuitQueryHash",
        "issuerState",
        "linkID",
        "nullifier",
        "operatorOutput",
        "proofType",
        "requestID",
        "challenge",
        "gistRoot",
        "issuerID",
        "isRevocationChecked",
        "issuerClaimNonRevState",
        "timestamp",
        "isBJJAuthEnabled",
    )
    binds_sender = True

    def _check_query_extras(self, signals: dict[str, int], query: CredentialQueryParams) -> None:
        link_id = signals["linkID"]
        if (query.group_id == 0) != (link_id == 0):
            raise ProofVerificationException(
                "Invalid Link ID pub signal",
                details={"group_id": query.group_id, "link_id": str(link_id)},
            )
        if query.nullifier_session_id != 0 and signals["nullifier"] == 0:
            raise ProofVerificationException(
                "Invalid nullify pub signal",
                details={"nullifier_session_id": str(query.nullifier_session_id)},
            )


__all__ = [
    "CredentialAtomicQueryValidator",
    "CredentialAtomicQueryV3Validator",
    "CredentialQueryParams",
    "DEFAULT_GIST_ROOT_EXPIRATION_TIMEOUT",
    "DEFAULT_PROOF_EXPIRATION_TIMEOUT",
]
