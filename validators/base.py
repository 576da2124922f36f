"""
Validator Base Classes

Defines the proof verifier capability and a base implementation.

A proof verifier is consumed as an opaque capability: the registry never
looks inside a proof. Every verifier must:
1. Expose a version string (recorded on each proof status it produces)
2. Declare whether it binds the proof to the submitting identity
3. Return the named public signals of a valid proof (or a plain bool), or raise
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

from core.schemas.errors import ErrorCodes, ProofVerificationException


logger = logging.getLogger(__name__)

# Opaque circuit check: (public inputs, proof) -> valid
ProofChecker = Callable[[Sequence[int], Any], bool]


@dataclass
class VerifierResult:
    """
    Outcome of a successful verification.

    signals maps public signal names (userID, linkID, ...) to their values.
    """
    signals: dict[str, int] = field(default_factory=dict)
    valid: bool = True

    def get(self, name: str, default: Optional[int] = None) -> Optional[int]:
        return self.signals.get(name, default)


@runtime_checkable
class ProofVerifier(Protocol):
    """
    Protocol defining the proof verifier interface.

    Whitelisted validators must implement this protocol.
    """

    version: str
    binds_sender: bool

    def verify(self, inputs: Sequence[int], proof: Any, params: bytes) -> VerifierResult | bool:
        """Verify a proof; a plain bool reports validity without signals."""
        ...


class BaseValidator(ABC):
    """
    Abstract base class for validators with a positional signal layout.

    Subclasses define the names of their public signals in input order and
    implement _check, which raises or returns False on an invalid proof.
    """

    # Subclasses must define these
    _name: str
    _version: str
    signal_layout: tuple[str, ...] = ()
    binds_sender: bool = False

    def __init__(self, *, version: Optional[str] = None) -> None:
        self._version_override = version

    @property
    def name(self) -> str:
        return getattr(self, "_name", self.__class__.__name__)

    @property
    def version(self) -> str:
        return self._version_override or getattr(self, "_version", "v1")

    def extract_signals(self, inputs: Sequence[int]) -> dict[str, int]:
        """Map positional public inputs to their signal names."""
        if len(inputs) != len(self.signal_layout):
            raise ProofVerificationException(
                f"{self.name} expects {len(self.signal_layout)} public inputs, got {len(inputs)}",
                code=ErrorCodes.VERIFICATION_FAILED,
                details={"expected": len(self.signal_layout), "actual": len(inputs)},
            )
        return {name: int(value) for name, value in zip(self.signal_layout, inputs)}

    def verify(self, inputs: Sequence[int], proof: Any, params: bytes) -> VerifierResult:
        signals = self.extract_signals(inputs)
        if not self._check(inputs, signals, proof, params):
            logger.warning(f"{self.name} rejected proof")
            raise ProofVerificationException(
                "Proof is not valid",
                details={"validator": self.name},
            )
        return VerifierResult(signals=signals)

    @abstractmethod
    def _check(
        self,
        inputs: Sequence[int],
        signals: dict[str, int],
        proof: Any,
        params: bytes,
    ) -> bool:
        """Check the proof and any request params against the signals."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(version={self.version!r})"
