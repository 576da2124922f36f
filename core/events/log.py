"""
Event Log

Records every emitted registry event in order and fans it out to
subscribers.

Usage:
    events = EventLog()

    @events.subscribe(RequestSet)
    def index_request(event):
        ...

    events.emit(RequestSet(request_id=1, ...))
    events.get_events(RequestSet)

Events are emitted only after the mutation that produced them has been
fully applied. A failing subscriber is logged and never undoes the
mutation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from core.schemas.errors import RegistryValidationException

from .models import SUPPORTED_EVENT_SCHEMA_VERSIONS, RegistryEvent


logger = logging.getLogger(__name__)

EventHandler = Callable[[RegistryEvent], None]
E = TypeVar("E", bound=RegistryEvent)


@dataclass
class _Subscription:
    handler: EventHandler
    event_types: tuple[type[RegistryEvent], ...]


class EventLog:
    """In-memory ordered event log with synchronous subscribers."""

    def __init__(self, on_error: Optional[Callable[[RegistryEvent, Exception], None]] = None) -> None:
        self._events: list[RegistryEvent] = []
        self._subscriptions: list[_Subscription] = []
        self._lock = threading.RLock()
        self._on_error = on_error
        self._error_count = 0

    def subscribe(self, *event_types: type[RegistryEvent]) -> Callable[[EventHandler], EventHandler]:
        """Decorator subscribing a handler to the given event types (all if none)."""
        def decorator(handler: EventHandler) -> EventHandler:
            with self._lock:
                self._subscriptions.append(
                    _Subscription(handler=handler, event_types=event_types or (RegistryEvent,))
                )
            return handler
        return decorator

    def unsubscribe(self, handler: EventHandler) -> bool:
        with self._lock:
            before = len(self._subscriptions)
            self._subscriptions = [s for s in self._subscriptions if s.handler != handler]
            return len(self._subscriptions) < before

    def emit(self, event: RegistryEvent) -> RegistryEvent:
        """Append an event to the log and notify subscribers."""
        if event.schema_version not in SUPPORTED_EVENT_SCHEMA_VERSIONS:
            raise RegistryValidationException(
                f"Unsupported event schema version: {event.schema_version}",
                details={"supported": sorted(SUPPORTED_EVENT_SCHEMA_VERSIONS)},
            )

        with self._lock:
            recorded = event.model_copy(update={"sequence": len(self._events)})
            self._events.append(recorded)
            handlers = [
                s.handler for s in self._subscriptions
                if isinstance(recorded, s.event_types)
            ]

        logger.debug(f"Event {type(recorded).__name__} #{recorded.sequence}")

        for handler in handlers:
            try:
                handler(recorded)
            except Exception as e:
                with self._lock:
                    self._error_count += 1
                logger.exception(
                    f"Event handler {getattr(handler, '__name__', handler)!r} failed "
                    f"for {type(recorded).__name__}"
                )
                if self._on_error:
                    self._on_error(recorded, e)

        return recorded

    def get_events(self, event_type: type[E] | None = None) -> list[E]:
        """Get recorded events, optionally filtered by type."""
        with self._lock:
            if event_type is None:
                return list(self._events)  # type: ignore[arg-type]
            return [e for e in self._events if isinstance(e, event_type)]

    def __len__(self) -> int:
        return len(self._events)

    @property
    def error_count(self) -> int:
        return self._error_count

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
