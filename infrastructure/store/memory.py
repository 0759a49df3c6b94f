"""Process-local EphemeralStore.

Used when no Redis is configured and in tests. Entries carry their own
deadline on an injectable monotonic clock; reads re-check it, so correctness
never depends on the sweeper having run.

Every operation holds one ``threading.Lock`` for its whole read-modify-write,
which makes the compare-and-* primitives atomic for both asyncio tasks and
worker threads.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from shared.logging import get_logger

log = get_logger(__name__)


class MemoryStore:
    native_expiry = False

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str, now: float) -> Optional[tuple[str, float]]:
        """Return the entry for *key* if unexpired; drop it otherwise. Lock held."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now >= entry[1]:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._live(key, self._clock())
            return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> bool:
        with self._lock:
            entry = self._live(key, self._clock())
            if entry is None:
                return False
            del self._entries[key]
            return True

    async def remaining_ttl(self, key: str) -> Optional[float]:
        with self._lock:
            now = self._clock()
            entry = self._live(key, now)
            return entry[1] - now if entry else None

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        with self._lock:
            entry = self._live(key, self._clock())
            if entry is None or entry[0] != expected:
                return False
            del self._entries[key]
            return True

    async def compare_and_swap(self, key: str, expected: str, value: str) -> bool:
        with self._lock:
            entry = self._live(key, self._clock())
            if entry is None or entry[0] != expected:
                return False
            self._entries[key] = (value, entry[1])
            return True

    async def increment(self, key: str, ttl: int) -> int:
        with self._lock:
            now = self._clock()
            entry = self._live(key, now)
            if entry is None:
                self._entries[key] = ("1", now + ttl)
                return 1
            count = int(entry[0]) + 1
            self._entries[key] = (str(count), entry[1])
            return count

    async def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [key for key, (_, deadline) in self._entries.items() if now >= deadline]
            for key in stale:
                del self._entries[key]
        if stale:
            log.debug("memory_store_purged", removed=len(stale))
        return len(stale)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        """Raw entry count, including expired entries not yet purged."""
        with self._lock:
            return len(self._entries)
