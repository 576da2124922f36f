"""
Module 01 - Schemas
File: errors.py

Purpose: Standard error taxonomy across the identity state registry.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every exception belongs to exactly one category (validation, not_found,
authorization, capacity, verification). Every failing mutation leaves the
tree, the root history and the request registry untouched.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


ErrorCategory = Literal[
    "validation",
    "not_found",
    "authorization",
    "capacity",
    "verification",
    "internal",
]


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the registry."""

    # Validation Errors
    LENGTH_ZERO = "LENGTH_ZERO"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    START_OUT_OF_BOUNDS = "START_OUT_OF_BOUNDS"
    INVALID_FIELD_ELEMENT = "INVALID_FIELD_ELEMENT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    LINKED_PROOF_ARITY = "LINKED_PROOF_ARITY"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    NON_MONOTONIC_HISTORY = "NON_MONOTONIC_HISTORY"
    DUPLICATE_LEAF = "DUPLICATE_LEAF"

    # Not Found Errors
    ROOT_NOT_FOUND = "ROOT_NOT_FOUND"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"
    IDENTITY_NOT_FOUND = "IDENTITY_NOT_FOUND"
    STATE_NOT_FOUND = "STATE_NOT_FOUND"
    PROOF_NOT_FOUND = "PROOF_NOT_FOUND"

    # Authorization Errors
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATOR_NOT_WHITELISTED = "VALIDATOR_NOT_WHITELISTED"
    USER_ID_MISMATCH = "USER_ID_MISMATCH"
    REQUEST_DISABLED = "REQUEST_DISABLED"

    # Capacity Errors
    MAX_DEPTH_REACHED = "MAX_DEPTH_REACHED"
    LENGTH_LIMIT_EXCEEDED = "LENGTH_LIMIT_EXCEEDED"

    # Verification Errors
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    LINKED_PROOF_ERROR = "LINKED_PROOF_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class RegistryError(BaseModel):
    """
    Error model for structured error communication.

    This is what the HTTP layer serializes; it never carries stack traces.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.REQUEST_NOT_FOUND],
    )
    category: ErrorCategory = Field(
        default="internal",
        description="Error category from the registry taxonomy",
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "RegistryException":
        """Convert this error model to a raised exception."""
        exc_type = _CATEGORY_EXCEPTIONS.get(self.category, RegistryException)
        return exc_type(self.message, code=self.code, details=self.details)


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class RegistryException(Exception):
    """
    Base exception for all registry errors.

    Carries structured error information and can be converted
    to a RegistryError model.
    """

    category: ErrorCategory = "internal"

    def __init__(
        self,
        message: str,
        code: str = "REGISTRY_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> RegistryError:
        """Convert this exception to a RegistryError model."""
        return RegistryError(
            code=self.code,
            category=self.category,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class RegistryValidationException(RegistryException):
    """Bad arguments: zero length, bad offsets, values outside the field."""

    category: ErrorCategory = "validation"

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INVALID_ARGUMENT,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class NotFoundException(RegistryException):
    """Unknown root, request, identity or leaf."""

    category: ErrorCategory = "not_found"


class AuthorizationException(RegistryException):
    """Caller is not allowed to perform the operation."""

    category: ErrorCategory = "authorization"

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.UNAUTHORIZED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class CapacityException(RegistryException):
    """Deterministic capacity limit hit (tree depth, page size)."""

    category: ErrorCategory = "capacity"


class ProofVerificationException(RegistryException):
    """A cryptographic check failed; nothing was recorded."""

    category: ErrorCategory = "verification"

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.VERIFICATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


# -----------------------------------------------------------------------------
# Specific exceptions
# -----------------------------------------------------------------------------

class DuplicateLeafException(RegistryValidationException):
    """Raised when adding a leaf whose index is already in the tree."""

    def __init__(self, index: int) -> None:
        super().__init__(
            "Leaf already exists",
            code=ErrorCodes.DUPLICATE_LEAF,
            details={"index": index},
        )


class MaxDepthReachedException(CapacityException):
    """Raised when an insertion would push a leaf past the tree's max depth."""

    def __init__(self, max_depth: int, index: int | None = None) -> None:
        details: dict[str, Any] = {"max_depth": max_depth}
        if index is not None:
            details["index"] = index
        super().__init__(
            "Max depth reached",
            code=ErrorCodes.MAX_DEPTH_REACHED,
            details=details,
        )


class RootNotFoundException(NotFoundException):
    """Raised when a root was never held by the tree."""

    def __init__(self, root: int) -> None:
        super().__init__(
            "Root does not exist",
            code=ErrorCodes.ROOT_NOT_FOUND,
            details={"root": str(root)},
        )


class RequestNotFoundException(NotFoundException):
    """Raised for an unknown request id."""

    def __init__(self, request_id: int) -> None:
        super().__init__(
            "request id doesn't exist",
            code=ErrorCodes.REQUEST_NOT_FOUND,
            details={"request_id": request_id},
        )


class RequestDisabledException(AuthorizationException):
    """Raised when submitting to or verifying against a disabled request."""

    def __init__(self, request_id: int) -> None:
        super().__init__(
            "Request is disabled",
            code=ErrorCodes.REQUEST_DISABLED,
            details={"request_id": request_id},
        )


class ValidatorNotWhitelistedException(AuthorizationException):
    """Raised when a request references a validator outside the whitelist."""

    def __init__(self, validator: str) -> None:
        super().__init__(
            "Validator is not whitelisted",
            code=ErrorCodes.VALIDATOR_NOT_WHITELISTED,
            details={"validator": validator},
        )


class UserIdMismatchException(AuthorizationException):
    """Raised when the identity in the public inputs is not the caller's."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            "UserID does not correspond to the sender",
            code=ErrorCodes.USER_ID_MISMATCH,
            details={"expected": str(expected), "actual": str(actual)},
        )


class LinkedProofException(ProofVerificationException):
    """Raised when two proofs in a linked set carry different link tags."""

    def __init__(
        self,
        message: str,
        request_id: int,
        link_id: int | None,
        other_request_id: int,
        other_link_id: int | None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCodes.LINKED_PROOF_ERROR,
            details={
                "request_id": request_id,
                "link_id": None if link_id is None else str(link_id),
                "other_request_id": other_request_id,
                "other_link_id": None if other_link_id is None else str(other_link_id),
            },
        )


_CATEGORY_EXCEPTIONS: dict[str, type[RegistryException]] = {
    "validation": RegistryValidationException,
    "not_found": NotFoundException,
    "authorization": AuthorizationException,
    "capacity": CapacityException,
    "verification": ProofVerificationException,
}
