"""
Event Models

Structured events emitted on every registry mutation. Off-chain indexers
consume them, so field sets are part of the wire contract: dumping with
by_alias=True yields the camelCase names indexers expect
(requestId, fieldName, rawValue, ...).
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


EVENT_SCHEMA_VERSION: str = "v1"
SUPPORTED_EVENT_SCHEMA_VERSIONS: frozenset[str] = frozenset({EVENT_SCHEMA_VERSION})


class RegistryEvent(BaseModel):
    """Base class for all emitted events."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    schema_version: str = Field(default=EVENT_SCHEMA_VERSION, exclude=True)
    sequence: int = Field(default=0, ge=0, exclude=True, description="Position in the event log")


class RequestSet(RegistryEvent):
    event_type: Literal["RequestSet"] = Field(default="RequestSet", exclude=True)
    request_id: int
    controller: str
    metadata: str
    validator: str
    data: bytes


class ResponseSubmitted(RegistryEvent):
    event_type: Literal["ResponseSubmitted"] = Field(default="ResponseSubmitted", exclude=True)
    request_id: int
    caller: int


class StorageFieldRawValueAdded(RegistryEvent):
    event_type: Literal["StorageFieldRawValueAdded"] = Field(
        default="StorageFieldRawValueAdded", exclude=True
    )
    caller: int
    request_id: int
    field_name: str
    raw_value: bytes


class RequestDisabled(RegistryEvent):
    event_type: Literal["RequestDisabled"] = Field(default="RequestDisabled", exclude=True)
    request_id: int


class RequestEnabled(RegistryEvent):
    event_type: Literal["RequestEnabled"] = Field(default="RequestEnabled", exclude=True)
    request_id: int


class ValidatorWhitelisted(RegistryEvent):
    event_type: Literal["ValidatorWhitelisted"] = Field(default="ValidatorWhitelisted", exclude=True)
    validator: str


class ValidatorRemoved(RegistryEvent):
    event_type: Literal["ValidatorRemoved"] = Field(default="ValidatorRemoved", exclude=True)
    validator: str


class StateUpdated(RegistryEvent):
    event_type: Literal["StateUpdated"] = Field(default="StateUpdated", exclude=True)
    id: int
    block_n: int
    timestamp: int
    state: int


class RootUpdated(RegistryEvent):
    event_type: Literal["RootUpdated"] = Field(default="RootUpdated", exclude=True)
    root: int
    replaced_root: int
    timestamp: int
    block: int


AnyRegistryEvent = Union[
    RequestSet,
    ResponseSubmitted,
    StorageFieldRawValueAdded,
    RequestDisabled,
    RequestEnabled,
    ValidatorWhitelisted,
    ValidatorRemoved,
    StateUpdated,
    RootUpdated,
]
