"""
Module 01 - Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Error models and exceptions
from .errors import (
    AuthorizationException,
    CapacityException,
    DuplicateLeafException,
    ErrorCategory,
    ErrorCodes,
    LinkedProofException,
    MaxDepthReachedException,
    NotFoundException,
    ProofVerificationException,
    RegistryError,
    RegistryException,
    RegistryValidationException,
    RequestDisabledException,
    RequestNotFoundException,
    RootNotFoundException,
    UserIdMismatchException,
    ValidatorNotWhitelistedException,
)

# Root history
from .history import RootInfo

# Identity state
from .state import StateInfo, StateTransition

# Proof requests
from .requests import ProofRequest, ProofRequestInfo, ProofRequestInput, ProofStatus


__all__ = [
    # Errors
    "AuthorizationException",
    "CapacityException",
    "DuplicateLeafException",
    "ErrorCategory",
    "ErrorCodes",
    "LinkedProofException",
    "MaxDepthReachedException",
    "NotFoundException",
    "ProofVerificationException",
    "RegistryError",
    "RegistryException",
    "RegistryValidationException",
    "RequestDisabledException",
    "RequestNotFoundException",
    "RootNotFoundException",
    "UserIdMismatchException",
    "ValidatorNotWhitelistedException",
    # History
    "RootInfo",
    # State
    "StateInfo",
    "StateTransition",
    # Requests
    "ProofRequest",
    "ProofRequestInfo",
    "ProofRequestInput",
    "ProofStatus",
]
