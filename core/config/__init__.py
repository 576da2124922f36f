"""
Runtime Configuration Module

Provides configuration loading and management for the identity state registry.
"""

from .runtime import (
    ApiConfig,
    HistoryConfig,
    RegistryConfig,
    RuntimeConfig,
    TreeConfig,
)

__all__ = [
    "ApiConfig",
    "HistoryConfig",
    "RegistryConfig",
    "RuntimeConfig",
    "TreeConfig",
]
