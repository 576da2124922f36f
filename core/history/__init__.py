"""
Core History Module

Append-only root history with time / block lookup.
"""

from .root_history import DEFAULT_PAGE_LIMIT, RootHistoryIndex, check_page

__all__ = [
    "DEFAULT_PAGE_LIMIT",
    "RootHistoryIndex",
    "check_page",
]
