"""
Module 08 - Proof Verification Coordinator
Verifies responses to proof requests and records proof statuses.

Submission Pipeline:
1. Resolve the request (must exist and be enabled)
2. Resolve its validator (must still be whitelisted)
3. Verify the proof through the validator (nothing is written on failure)
4. Key the result by the userID signal (or the explicit requester_id) and
   refuse a sender-bound proof submitted by a different identity
5. Record the ProofStatus and emit ResponseSubmitted

Proof statuses are never deleted; a later successful submission for the
same (requester, request) overwrites the earlier one.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Sequence

from core.clock import BlockClock, RealBlockClock
from core.events import EventLog, ResponseSubmitted, StorageFieldRawValueAdded
from core.schemas.errors import (
    ErrorCodes,
    LinkedProofException,
    NotFoundException,
    ProofVerificationException,
    RegistryValidationException,
    RequestDisabledException,
    UserIdMismatchException,
)
from core.schemas.requests import ProofRequestInfo, ProofStatus
from validators.base import ProofVerifier, VerifierResult

from .requests import ProofRequestRegistry


logger = logging.getLogger(__name__)

USER_ID_SIGNAL = "userID"
LINK_ID_SIGNAL = "linkID"


class ProofVerificationCoordinator:
    """
    Routes responses to the whitelisted validator of their request.

    Usage:
        coordinator = ProofVerificationCoordinator(requests)
        coordinator.submit_response(1, inputs, proof)
        coordinator.get_proof_status(user_id, 1).is_proved  # True
    """

    def __init__(
        self,
        requests: ProofRequestRegistry,
        *,
        events: Optional[EventLog] = None,
        clock: Optional[BlockClock] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._requests = requests
        self._events = events or EventLog()
        self._clock = clock or RealBlockClock()
        self._lock = lock or threading.RLock()

        self._statuses: dict[tuple[int, int], ProofStatus] = {}

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify_response(
        self,
        request_id: int,
        inputs: Sequence[int],
        proof: Any,
        requester_id: Optional[int] = None,
    ) -> VerifierResult:
        """
        Run every submission check without recording anything.

        Returns:
            The validator's result for a valid proof
        """
        request, verifier = self._resolve(request_id)
        result = self._run_verifier(verifier, request, inputs, proof)
        self._requester_key(verifier, result, request_id, requester_id)
        return result

    def submit_response(
        self,
        request_id: int,
        inputs: Sequence[int],
        proof: Any,
        requester_id: Optional[int] = None,
    ) -> ProofStatus:
        """
        Verify a response and record its proof status.

        Raises:
            RequestNotFoundException: Unknown request id
            RequestDisabledException: Request is disabled
            ValidatorNotWhitelistedException: Request's validator was removed
            ProofVerificationException: The validator rejected the proof
            UserIdMismatchException: Sender-bound proof of another identity
        """
        with self._lock:
            request, verifier = self._resolve(request_id)
            result = self._run_verifier(verifier, request, inputs, proof)
            requester = self._requester_key(verifier, result, request_id, requester_id)

            stamp = self._clock.now()
            previous = self._statuses.get((requester, request_id))
            status = ProofStatus(
                is_proved=True,
                validator_version=verifier.version,
                block_number=stamp.block,
                block_timestamp=stamp.timestamp,
                storage=dict(result.signals),
                raw_values=dict(previous.raw_values) if previous is not None else {},
            )
            self._statuses[(requester, request_id)] = status

            logger.info(f"Response accepted for request {request_id} from {requester} ({verifier.version})")
            self._events.emit(ResponseSubmitted(request_id=request_id, caller=requester))
        return status

    def _resolve(self, request_id: int) -> tuple[ProofRequestInfo, ProofVerifier]:
        request = self._requests.get_request_full_info(request_id)
        if request.is_disabled:
            logger.warning(f"Rejected response for disabled request {request_id}")
            raise RequestDisabledException(request_id)
        return request, self._requests.get_verifier(request.validator)

    def _run_verifier(
        self,
        verifier: ProofVerifier,
        request: ProofRequestInfo,
        inputs: Sequence[int],
        proof: Any,
    ) -> VerifierResult:
        try:
            result = verifier.verify(list(inputs), proof, request.data)
        except ProofVerificationException as e:
            logger.warning(f"Proof rejected for request {request.request_id}: {e.message}")
            raise
        except Exception as e:
            logger.warning(f"Validator {request.validator} failed for request {request.request_id}: {e}")
            raise ProofVerificationException(
                "Proof verification failed",
                details={"request_id": request.request_id, "error": str(e)},
            ) from e

        if isinstance(result, bool):
            result = VerifierResult(valid=result)
        if result is None or not result.valid:
            logger.warning(f"Proof rejected for request {request.request_id}")
            raise ProofVerificationException(
                "Proof is not valid",
                details={"request_id": request.request_id},
            )
        return result

    @staticmethod
    def _requester_key(
        verifier: ProofVerifier,
        result: VerifierResult,
        request_id: int,
        requester_id: Optional[int],
    ) -> int:
        user_id = result.get(USER_ID_SIGNAL)
        if user_id is None:
            if requester_id is None:
                raise RegistryValidationException(
                    "requester_id is required when the proof carries no userID",
                    details={"request_id": request_id},
                )
            return requester_id
        if verifier.binds_sender and requester_id is not None and requester_id != user_id:
            logger.warning(f"Rejected response for request {request_id}: userID is not the sender")
            raise UserIdMismatchException(expected=requester_id, actual=user_id)
        return user_id

    # -------------------------------------------------------------------------
    # Linked proofs
    # -------------------------------------------------------------------------

    def verify_linked_proofs(self, request_ids: Sequence[int], requester: int) -> None:
        """
        Check that the requester's proofs for request_ids share one linkID.

        Raises:
            RegistryValidationException: LINKED_PROOF_ARITY for fewer than two ids
            LinkedProofException: A proof is missing or carries a different linkID
        """
        if len(request_ids) < 2:
            raise RegistryValidationException(
                "Linked proof verification needs more than 1 request",
                code=ErrorCodes.LINKED_PROOF_ARITY,
                details={"request_ids": list(request_ids)},
            )

        first_id = request_ids[0]
        first_link = self._link_id(first_id, requester)
        for request_id in request_ids[1:]:
            link = self._link_id(request_id, requester)
            if link != first_link:
                raise LinkedProofException(
                    "LinkedProofError",
                    request_id=first_id,
                    link_id=first_link,
                    other_request_id=request_id,
                    other_link_id=link,
                )

    def _link_id(self, request_id: int, requester: int) -> int:
        self._requests.get_request_full_info(request_id)
        status = self._statuses.get((requester, request_id))
        link = status.storage.get(LINK_ID_SIGNAL) if status is not None else None
        if link is None:
            raise LinkedProofException(
                "LinkedProofError",
                request_id=request_id,
                link_id=None,
                other_request_id=request_id,
                other_link_id=None,
            )
        return link

    # -------------------------------------------------------------------------
    # Proof status
    # -------------------------------------------------------------------------

    def add_storage_field_raw_value(
        self,
        request_id: int,
        field_name: str,
        raw_value: bytes,
        requester: int,
    ) -> ProofStatus:
        """Attach an opaque blob to an existing proof status (last write wins)."""
        with self._lock:
            key = (requester, request_id)
            status = self._statuses.get(key)
            if status is None:
                raise NotFoundException(
                    "Proof status does not exist",
                    code=ErrorCodes.PROOF_NOT_FOUND,
                    details={"request_id": request_id, "requester": str(requester)},
                )
            updated = status.model_copy(update={"raw_values": {**status.raw_values, field_name: raw_value}})
            self._statuses[key] = updated

            self._events.emit(StorageFieldRawValueAdded(
                caller=requester,
                request_id=request_id,
                field_name=field_name,
                raw_value=raw_value,
            ))
        return updated

    def get_proof_status(self, requester: int, request_id: int) -> ProofStatus:
        return self._statuses.get((requester, request_id)) or ProofStatus()

    def get_proof_storage_field(self, requester: int, request_id: int, key: str) -> int:
        return self.get_proof_status(requester, request_id).storage.get(key, 0)

    def get_proof_storage_raw_value(self, requester: int, request_id: int, key: str) -> bytes:
        return self.get_proof_status(requester, request_id).raw_values.get(key, b"")


__all__ = [
    "LINK_ID_SIGNAL",
    "USER_ID_SIGNAL",
    "ProofVerificationCoordinator",
]
