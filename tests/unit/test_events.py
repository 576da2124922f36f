"""
Event Log Unit Tests
Tests for core/events/ and core/clock.py
"""
import pytest

from core.clock import BlockClock, FrozenBlockClock, RealBlockClock
from core.events import (
    EventLog,
    RequestDisabled,
    RequestSet,
    StateUpdated,
    StorageFieldRawValueAdded,
)
from core.schemas.errors import RegistryValidationException


class TestEventModels:
    def test_wire_names_are_camel_case(self):
        event = StorageFieldRawValueAdded(
            caller=1, request_id=2, field_name="score", raw_value=b"\x01"
        )
        dumped = event.model_dump(by_alias=True)
        assert dumped == {"caller": 1, "requestId": 2, "fieldName": "score", "rawValue": b"\x01"}

    def test_block_n_alias(self):
        event = StateUpdated(id=1, block_n=5, timestamp=6, state=7)
        assert event.model_dump(by_alias=True)["blockN"] == 5


class TestEventLog:
    def test_emit_assigns_sequence(self):
        events = EventLog()
        first = events.emit(RequestDisabled(request_id=1))
        second = events.emit(RequestDisabled(request_id=2))
        assert (first.sequence, second.sequence) == (0, 1)
        assert len(events) == 2

    def test_filter_by_type(self):
        events = EventLog()
        events.emit(RequestDisabled(request_id=1))
        events.emit(
            RequestSet(request_id=1, controller="c", metadata="", validator="v", data=b"")
        )
        assert [e.request_id for e in events.get_events(RequestSet)] == [1]
        assert len(events.get_events()) == 2

    def test_subscribers_receive_matching_events(self):
        events = EventLog()
        seen = []

        @events.subscribe(RequestDisabled)
        def on_disabled(event):
            seen.append(event.request_id)

        events.emit(RequestDisabled(request_id=3))
        events.emit(StateUpdated(id=1, block_n=1, timestamp=1, state=1))

        assert seen == [3]
        assert events.unsubscribe(on_disabled)
        events.emit(RequestDisabled(request_id=4))
        assert seen == [3]

    def test_failing_handler_is_isolated(self):
        errors = []
        events = EventLog(on_error=lambda event, exc: errors.append(str(exc)))
        delivered = []

        @events.subscribe()
        def broken(event):
            raise RuntimeError("indexer down")

        @events.subscribe()
        def working(event):
            delivered.append(event)

        events.emit(RequestDisabled(request_id=1))

        assert errors == ["indexer down"]
        assert len(delivered) == 1
        assert events.error_count == 1
        assert len(events) == 1

    def test_rejects_unsupported_schema_version(self):
        events = EventLog()
        with pytest.raises(RegistryValidationException, match="Unsupported event schema version: v2"):
            events.emit(RequestDisabled(request_id=1, schema_version="v2"))
        assert len(events) == 0

    def test_clear(self):
        events = EventLog()
        events.emit(RequestDisabled(request_id=1))
        events.clear()
        assert len(events) == 0


class TestClocks:
    def test_frozen_clock(self):
        clock = FrozenBlockClock(timestamp=100, block=5)
        assert isinstance(clock, BlockClock)
        assert clock.now() == clock.now()

        clock.advance(seconds=10, blocks=2)
        assert (clock.now().timestamp, clock.now().block) == (110, 7)

        clock.set(block=50)
        assert (clock.now().timestamp, clock.now().block) == (110, 50)

    def test_real_clock_is_monotonic(self):
        clock = RealBlockClock(start_block=10)
        first = clock.now()
        second = clock.now()
        assert first.block == 10
        assert second.block == 11
        assert second.timestamp >= first.timestamp > 0

    def test_peek_does_not_consume_blocks(self):
        clock = RealBlockClock(start_block=10)
        clock.now()
        assert clock.peek().block == 10
        assert clock.peek().block == 10
        assert clock.now().block == 11

        frozen = FrozenBlockClock(timestamp=100, block=5)
        assert frozen.peek() == frozen.now()
