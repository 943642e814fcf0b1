"""
In-process memoization table for computed field paths.
"""

from __future__ import annotations

import threading
from typing import Optional


class FieldPathCache:
    """
    Entity name -> frozenset of field paths, guarded by a lock.

    Concurrent computations of the same entity are not deduplicated; the
    value is deterministic for a schema snapshot and config, so the last
    write simply wins.
    """

    def __init__(self):
        self._entries: dict[str, frozenset[str]] = {}
        self._lock = threading.Lock()

    def get(self, entity_name: str) -> Optional[frozenset[str]]:
        with self._lock:
            return self._entries.get(entity_name)

    def set(self, entity_name: str, paths: frozenset[str]) -> None:
        with self._lock:
            self._entries[entity_name] = paths

    def invalidate(self, entity_name: str) -> bool:
        """Drop one entry. Returns True if it was cached."""
        with self._lock:
            return self._entries.pop(entity_name, None) is not None

    def clear(self) -> int:
        """Drop every entry. Returns number of entries dropped."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, entity_name: object) -> bool:
        with self._lock:
            return entity_name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
