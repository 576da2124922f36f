"""
Module 04 - Root History Index
Append-only log of tree roots, searchable by timestamp and by block.

Lookup Rules:
- get_root_by_time / get_root_by_block return the root of the LAST entry
  whose key is <= the query
- A query that precedes the first entry, or any query on an empty log,
  returns 0
- Entries sharing a key resolve to the most recently appended one

Only the tail of the log is ever rewritten: appending a root seals the
previous tail with the replacing root, timestamp and block.
"""

from __future__ import annotations

import logging
import threading
from bisect import bisect_right
from typing import Optional

from core.schemas.errors import (
    CapacityException,
    ErrorCodes,
    RegistryValidationException,
    RootNotFoundException,
)
from core.schemas.history import RootInfo


logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 1000


def check_page(start: int, length: int, total: int, page_limit: int) -> None:
    """
    Validate a (start, length) page over a collection of size total.

    Raises:
        RegistryValidationException: length is zero, or the page runs past total
        CapacityException: length exceeds page_limit
    """
    if length <= 0:
        raise RegistryValidationException(
            "Length should be greater than 0",
            code=ErrorCodes.LENGTH_ZERO,
            details={"length": length},
        )
    if length > page_limit:
        raise CapacityException(
            "History length limit exceeded",
            code=ErrorCodes.LENGTH_LIMIT_EXCEEDED,
            details={"length": length, "limit": page_limit},
        )
    if start < 0 or start + length > total:
        raise RegistryValidationException(
            "Out of bounds of root history",
            code=ErrorCodes.OUT_OF_BOUNDS,
            details={"start": start, "length": length, "total": total},
        )


class RootHistoryIndex:
    """
    Ordered root history with O(log n) time / block lookup.

    Usage:
        history = RootHistoryIndex()
        history.append(root=1100, timestamp=1, block=1)
        history.get_root_by_time(5)  # 1100
    """

    def __init__(
        self,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        *,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        if page_limit <= 0:
            raise RegistryValidationException(
                "page_limit must be positive",
                details={"page_limit": page_limit},
            )
        self._page_limit = page_limit
        self._lock = lock or threading.RLock()

        self._entries: list[RootInfo] = []
        # Parallel key columns for bisect
        self._timestamps: list[int] = []
        self._blocks: list[int] = []
        self._positions_by_root: dict[int, list[int]] = {}

    @property
    def page_limit(self) -> int:
        return self._page_limit

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def check_append(self, timestamp: int, block: int) -> None:
        """
        Raise if (timestamp, block) cannot follow the current tail.

        Raises:
            RegistryValidationException: NON_MONOTONIC_HISTORY
        """
        tail = self.latest()
        if tail is None:
            return
        if timestamp < tail.created_at_timestamp or block < tail.created_at_block:
            logger.warning(
                f"Rejected non-monotonic root append: ({timestamp}, {block}) "
                f"< ({tail.created_at_timestamp}, {tail.created_at_block})"
            )
            raise RegistryValidationException(
                "Root history must be non-decreasing in timestamp and block",
                code=ErrorCodes.NON_MONOTONIC_HISTORY,
                details={
                    "timestamp": timestamp,
                    "block": block,
                    "tail_timestamp": tail.created_at_timestamp,
                    "tail_block": tail.created_at_block,
                },
            )

    def append(self, root: int, timestamp: int, block: int) -> RootInfo:
        """
        Append a root, sealing the current tail.

        Raises:
            RegistryValidationException: If timestamp or block is lower than the tail's
        """
        with self._lock:
            self.check_append(timestamp, block)

            entry = RootInfo(root=root, created_at_timestamp=timestamp, created_at_block=block)

            if self._entries:
                self._entries[-1] = self._entries[-1].sealed(root, timestamp, block)
            position = len(self._entries)
            self._timestamps.append(timestamp)
            self._blocks.append(block)
            self._entries.append(entry)
            self._positions_by_root.setdefault(root, []).append(position)

        logger.debug(f"Root #{position} appended: root={root} ts={timestamp} block={block}")
        return entry

    # -------------------------------------------------------------------------
    # Paged reads
    # -------------------------------------------------------------------------

    def get_history_length(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_history(self, start: int, length: int) -> list[RootInfo]:
        """
        Return entries [start, start + length).

        Raises:
            RegistryValidationException: LENGTH_ZERO / OUT_OF_BOUNDS
            CapacityException: LENGTH_LIMIT_EXCEEDED
        """
        entries = self._entries
        check_page(start, length, len(entries), self._page_limit)
        return entries[start:start + length]

    def latest(self) -> Optional[RootInfo]:
        """The current tail, or None for an empty log."""
        entries = self._entries
        return entries[-1] if entries else None

    # -------------------------------------------------------------------------
    # Key lookups
    # -------------------------------------------------------------------------

    def get_root_by_time(self, timestamp: int) -> int:
        info = self.get_root_info_by_time(timestamp)
        return info.root if info is not None else 0

    def get_root_by_block(self, block: int) -> int:
        info = self.get_root_info_by_block(block)
        return info.root if info is not None else 0

    def get_root_info_by_time(self, timestamp: int) -> Optional[RootInfo]:
        """Last entry created at or before timestamp, or None."""
        return self._search(self._timestamps, timestamp)

    def get_root_info_by_block(self, block: int) -> Optional[RootInfo]:
        """Last entry created at or before block, or None."""
        return self._search(self._blocks, block)

    def _search(self, keys: list[int], query: int) -> Optional[RootInfo]:
        # Snapshot the length so a concurrent append cannot skew the columns
        size = len(self._entries)
        position = bisect_right(keys, query, 0, size) - 1
        if position < 0:
            return None
        return self._entries[position]

    # -------------------------------------------------------------------------
    # Root lookups
    # -------------------------------------------------------------------------

    def root_exists(self, root: int) -> bool:
        return root in self._positions_by_root

    def get_root_info(self, root: int) -> RootInfo:
        """
        Latest entry for root.

        Raises:
            RootNotFoundException: If root was never appended
        """
        positions = self._positions_by_root.get(root)
        if not positions:
            raise RootNotFoundException(root)
        return self._entries[positions[-1]]

    def get_root_info_list_length_by_root(self, root: int) -> int:
        return len(self._positions_by_root.get(root, ()))

    def get_root_info_list_by_root(self, root: int, start: int, length: int) -> list[RootInfo]:
        """Page through every entry recorded for root, oldest first."""
        positions = self._positions_by_root.get(root)
        if not positions:
            raise RootNotFoundException(root)
        check_page(start, length, len(positions), self._page_limit)
        return [self._entries[p] for p in positions[start:start + length]]


__all__ = [
    "DEFAULT_PAGE_LIMIT",
    "RootHistoryIndex",
    "check_page",
]
