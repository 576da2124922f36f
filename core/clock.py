"""
Block Clock

Time source for registry mutations. Every mutation is stamped with a
(timestamp, block) pair; both must be non-decreasing across mutations.

Can be real time or frozen for deterministic testing.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class BlockStamp:
    """Unix timestamp (seconds) and block number of one mutation."""
    timestamp: int
    block: int


@runtime_checkable
class BlockClock(Protocol):
    """Protocol for the mutation time source."""

    def now(self) -> BlockStamp:
        """Stamp for the mutation about to be applied."""
        ...

    def peek(self) -> BlockStamp:
        """Current time and latest block, without consuming a stamp."""
        ...


class RealBlockClock:
    """
    Wall-clock timestamps with one block per stamp.

    Timestamps never go backwards even if the system clock does.
    """

    def __init__(self, start_block: int = 1) -> None:
        self._block = start_block - 1
        self._last_timestamp = 0
        self._lock = threading.Lock()

    def now(self) -> BlockStamp:
        with self._lock:
            self._block += 1
            self._last_timestamp = max(self._last_timestamp, int(time.time()))
            return BlockStamp(timestamp=self._last_timestamp, block=self._block)

    def peek(self) -> BlockStamp:
        with self._lock:
            timestamp = max(self._last_timestamp, int(time.time()))
            return BlockStamp(timestamp=timestamp, block=max(self._block, 0))


class FrozenBlockClock:
    """
    Frozen clock for deterministic testing.

    Always returns the same stamp until set or advanced.
    """

    def __init__(self, timestamp: int = 1_767_225_600, block: int = 1) -> None:
        self._stamp = BlockStamp(timestamp=timestamp, block=block)

    def now(self) -> BlockStamp:
        return self._stamp

    def peek(self) -> BlockStamp:
        return self._stamp

    def set(self, timestamp: Optional[int] = None, block: Optional[int] = None) -> None:
        """Set the frozen stamp."""
        self._stamp = BlockStamp(
            timestamp=self._stamp.timestamp if timestamp is None else timestamp,
            block=self._stamp.block if block is None else block,
        )

    def advance(self, seconds: int = 1, blocks: int = 1) -> BlockStamp:
        self._stamp = BlockStamp(
            timestamp=self._stamp.timestamp + seconds,
            block=self._stamp.block + blocks,
        )
        return self._stamp


__all__ = [
    "BlockClock",
    "BlockStamp",
    "FrozenBlockClock",
    "RealBlockClock",
]
