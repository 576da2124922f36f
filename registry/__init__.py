"""
Registry

Identity state registry, proof request registry and the proof
verification coordinator.
"""

from .coordinator import LINK_ID_SIGNAL, USER_ID_SIGNAL, ProofVerificationCoordinator
from .requests import ProofRequestRegistry
from .state_registry import DEFAULT_ID_TYPE, StateRegistry

__all__ = [
    "LINK_ID_SIGNAL",
    "USER_ID_SIGNAL",
    "ProofVerificationCoordinator",
    "ProofRequestRegistry",
    "DEFAULT_ID_TYPE",
    "StateRegistry",
]
