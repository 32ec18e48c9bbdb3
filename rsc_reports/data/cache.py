"""In-memory lookup cache shared between reports.

Some reports join against tables another report already fetched (the SLA
domain list, the object inventory). Instead of module-level variables, the
tables live in an explicit cache object that callers pass around and
refresh or invalidate on purpose.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

Loader = Callable[[], List[Dict[str, Any]]]


@dataclass
class _Entry:
    records: List[Dict[str, Any]]
    loaded_at: float


class InventoryCache:
    """Named record lists with an optional maximum age.

    Not thread-safe; one cache per single-threaded session.
    """

    def __init__(self, max_age: Optional[timedelta] = None, clock: Callable[[], float] = time.monotonic):
        self.max_age = max_age
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}

    def get(self, name: str, loader: Loader) -> List[Dict[str, Any]]:
        """Return cached records, loading them if absent or expired."""
        entry = self._entries.get(name)
        if entry is not None and not self._is_expired(entry):
            return entry.records
        return self.refresh(name, loader)

    def refresh(self, name: str, loader: Loader) -> List[Dict[str, Any]]:
        """Load records unconditionally and overwrite the cached copy.

        A failing loader leaves the previous entry untouched.
        """
        records = loader()
        self._entries[name] = _Entry(records=records, loaded_at=self._clock())
        return records

    def peek(self, name: str) -> Optional[List[Dict[str, Any]]]:
        """Cached records without loading, or None if absent/expired."""
        entry = self._entries.get(name)
        if entry is None or self._is_expired(entry):
            return None
        return entry.records

    def age(self, name: str) -> Optional[float]:
        """Age of an entry in seconds, or None if absent."""
        entry = self._entries.get(name)
        if entry is None:
            return None
        return self._clock() - entry.loaded_at

    def invalidate(self, name: Optional[str] = None) -> None:
        """Drop one entry, or all of them when ``name`` is None."""
        if name is not None:
            self._entries.pop(name, None)
        else:
            self._entries.clear()

    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: str) -> bool:
        return self.peek(name) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: _Entry) -> bool:
        if self.max_age is None:
            return False
        return (self._clock() - entry.loaded_at) > self.max_age.total_seconds()
