"""
Validators

Proof verifier capability and the reference verifiers selectable through
the validator whitelist.
"""

from .base import BaseValidator, ProofChecker, ProofVerifier, VerifierResult
from .credential import (
    CredentialAtomicQueryV3Validator,
    CredentialAtomicQueryValidator,
    CredentialQueryParams,
)
from .state_transition import StateTransitionValidator
from .stub import StubValidator

__all__ = [
    "BaseValidator",
    "ProofChecker",
    "ProofVerifier",
    "VerifierResult",
    "CredentialAtomicQueryV3Validator",
    "CredentialAtomicQueryValidator",
    "CredentialQueryParams",
    "StateTransitionValidator",
    "StubValidator",
]
