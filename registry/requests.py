"""
Module 07 - Proof Request Registry
Proof request lifecycle and the validator whitelist.

Request State Machine:
    Unset --set_request--> Enabled <--disable/enable--> Disabled

- set_request requires a whitelisted validator
- The first caller to set a request id becomes its controller for good;
  later updates need the controller or the owner
- disable_request / enable_request need the controller or the owner
- Whitelist changes need the owner
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from core.events import (
    EventLog,
    RequestDisabled,
    RequestEnabled,
    RequestSet,
    ValidatorRemoved,
    ValidatorWhitelisted,
)
from core.schemas.errors import (
    AuthorizationException,
    ErrorCodes,
    RegistryValidationException,
    RequestNotFoundException,
    ValidatorNotWhitelistedException,
)
from core.schemas.requests import ProofRequest, ProofRequestInfo, ProofRequestInput
from validators.base import ProofVerifier


logger = logging.getLogger(__name__)


def _page(items: list[int], offset: int, length: int) -> list[int]:
    """Slice [offset, offset + length) clamped to the tail; offset must be < len(items)."""
    if length < 0:
        raise RegistryValidationException(
            "Length must not be negative",
            details={"length": length},
        )
    if offset < 0 or offset >= len(items):
        raise RegistryValidationException(
            "Start index out of bounds",
            code=ErrorCodes.START_OUT_OF_BOUNDS,
            details={"offset": offset, "count": len(items)},
        )
    return items[offset:min(offset + length, len(items))]


class ProofRequestRegistry:
    """
    Registry of proof requests and whitelisted validators.

    Usage:
        registry = ProofRequestRegistry(owner="owner")
        registry.add_whitelisted_validator("stub", StubValidator(), caller="owner")
        registry.set_request(1, ProofRequestInput(validator="stub"), caller="alice")
    """

    def __init__(
        self,
        *,
        owner: str = "owner",
        events: Optional[EventLog] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._owner = owner
        self._events = events or EventLog()
        self._lock = lock or threading.RLock()

        self._whitelist: dict[str, ProofVerifier] = {}
        self._requests: dict[int, ProofRequestInfo] = {}
        self._request_ids: list[int] = []
        self._request_ids_by_controller: dict[str, list[int]] = {}

    @property
    def owner(self) -> str:
        return self._owner

    # -------------------------------------------------------------------------
    # Whitelist
    # -------------------------------------------------------------------------

    def add_whitelisted_validator(self, validator: str, verifier: ProofVerifier, caller: str) -> None:
        """
        Whitelist a verifier under a reference name.

        Raises:
            AuthorizationException: If caller is not the owner
            RegistryValidationException: If verifier does not implement ProofVerifier
        """
        self._require_owner(caller)
        if not validator:
            raise RegistryValidationException("Validator reference must not be empty")
        if not isinstance(verifier, ProofVerifier):
            raise RegistryValidationException(
                "Validator doesn't support relevant interface",
                details={"validator": validator, "type": type(verifier).__name__},
            )
        with self._lock:
            self._whitelist[validator] = verifier
            logger.info(f"Validator whitelisted: {validator} ({verifier.version})")
            self._events.emit(ValidatorWhitelisted(validator=validator))

    def remove_whitelisted_validator(self, validator: str, caller: str) -> None:
        self._require_owner(caller)
        with self._lock:
            if validator not in self._whitelist:
                raise ValidatorNotWhitelistedException(validator)
            del self._whitelist[validator]
            logger.info(f"Validator removed from whitelist: {validator}")
            self._events.emit(ValidatorRemoved(validator=validator))

    def is_whitelisted_validator(self, validator: str) -> bool:
        return validator in self._whitelist

    def get_whitelisted_validators(self) -> list[str]:
        return sorted(self._whitelist)

    def get_verifier(self, validator: str) -> ProofVerifier:
        verifier = self._whitelist.get(validator)
        if verifier is None:
            raise ValidatorNotWhitelistedException(validator)
        return verifier

    # -------------------------------------------------------------------------
    # Request lifecycle
    # -------------------------------------------------------------------------

    def set_request(self, request_id: int, request: ProofRequestInput, caller: str) -> ProofRequestInfo:
        """
        Create a request or update one the caller controls.

        Raises:
            ValidatorNotWhitelistedException: Unknown validator reference
            AuthorizationException: Existing request not controlled by caller
        """
        if request_id < 0:
            raise RegistryValidationException(
                "Request id must not be negative",
                details={"request_id": request_id},
            )

        with self._lock:
            if not self.is_whitelisted_validator(request.validator):
                logger.warning(f"Rejected request {request_id}: validator {request.validator} not whitelisted")
                raise ValidatorNotWhitelistedException(request.validator)

            existing = self._requests.get(request_id)
            if existing is not None:
                self._require_owner_or_controller(existing, caller)
                info = existing.model_copy(update={
                    "metadata": request.metadata,
                    "validator": request.validator,
                    "data": request.data,
                })
            else:
                info = ProofRequestInfo(
                    request_id=request_id,
                    metadata=request.metadata,
                    validator=request.validator,
                    data=request.data,
                    controller=caller,
                )
                self._request_ids.append(request_id)
                self._request_ids_by_controller.setdefault(caller, []).append(request_id)

            self._requests[request_id] = info

            logger.info(
                f"Request {request_id} {'updated' if existing else 'registered'} "
                f"validator={info.validator} controller={info.controller}"
            )
            self._events.emit(RequestSet(
                request_id=request_id,
                controller=info.controller,
                metadata=info.metadata,
                validator=info.validator,
                data=info.data,
            ))
        return info

    def disable_request(self, request_id: int, caller: str) -> None:
        self._set_disabled(request_id, True, caller)

    def enable_request(self, request_id: int, caller: str) -> None:
        self._set_disabled(request_id, False, caller)

    def _set_disabled(self, request_id: int, disabled: bool, caller: str) -> None:
        with self._lock:
            info = self.get_request_full_info(request_id)
            self._require_owner_or_controller(info, caller)
            self._requests[request_id] = info.model_copy(update={"is_disabled": disabled})

            logger.info(f"Request {request_id} disabled={disabled} by {caller}")
            if disabled:
                self._events.emit(RequestDisabled(request_id=request_id))
            else:
                self._events.emit(RequestEnabled(request_id=request_id))

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            logger.warning(f"Rejected owner-only call from {caller}")
            raise AuthorizationException(
                "Only owner can call this function",
                details={"caller": caller},
            )

    def _require_owner_or_controller(self, info: ProofRequestInfo, caller: str) -> None:
        if caller not in (self._owner, info.controller):
            logger.warning(f"Rejected call on request {info.request_id} from {caller}")
            raise AuthorizationException(
                "Only owner or controller can call this function",
                details={"request_id": info.request_id, "caller": caller},
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def request_id_exists(self, request_id: int) -> bool:
        return request_id in self._requests

    def get_request_full_info(self, request_id: int) -> ProofRequestInfo:
        info = self._requests.get(request_id)
        if info is None:
            raise RequestNotFoundException(request_id)
        return info

    def get_request(self, request_id: int) -> ProofRequest:
        return self.get_request_full_info(request_id).public_view()

    def is_request_disabled(self, request_id: int) -> bool:
        return self.get_request_full_info(request_id).is_disabled

    def get_requests_count(self) -> int:
        return len(self._request_ids)

    def get_requests(self, offset: int, length: int) -> list[ProofRequest]:
        """
        Requests in registration order.

        Raises:
            RegistryValidationException: START_OUT_OF_BOUNDS if offset >= count
        """
        ids = _page(self._request_ids, offset, length)
        return [self._requests[i].public_view() for i in ids]

    def get_requests_count_by_controller(self, controller: str) -> int:
        return len(self._request_ids_by_controller.get(controller, ()))

    def get_requests_by_controller(self, controller: str, offset: int, length: int) -> list[ProofRequest]:
        ids = _page(self._request_ids_by_controller.get(controller, []), offset, length)
        return [self._requests[i].public_view() for i in ids]


__all__ = [
    "ProofRequestRegistry",
]
