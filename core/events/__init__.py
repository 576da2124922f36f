"""
Core Events Module

Structured events emitted by every registry mutation.
"""

from .log import EventLog
from .models import (
    EVENT_SCHEMA_VERSION,
    SUPPORTED_EVENT_SCHEMA_VERSIONS,
    AnyRegistryEvent,
    RegistryEvent,
    RequestDisabled,
    RequestEnabled,
    RequestSet,
    ResponseSubmitted,
    RootUpdated,
    StateUpdated,
    StorageFieldRawValueAdded,
    ValidatorRemoved,
    ValidatorWhitelisted,
)

__all__ = [
    "EventLog",
    "EVENT_SCHEMA_VERSION",
    "SUPPORTED_EVENT_SCHEMA_VERSIONS",
    "AnyRegistryEvent",
    "RegistryEvent",
    "RequestDisabled",
    "RequestEnabled",
    "RequestSet",
    "ResponseSubmitted",
    "RootUpdated",
    "StateUpdated",
    "StorageFieldRawValueAdded",
    "ValidatorRemoved",
    "ValidatorWhitelisted",
]
