"""EphemeralStore protocol: services depend on this, not the concrete backend.

Values are opaque strings (callers serialise to JSON). An expired entry and an
absent one are indistinguishable to callers: every read returns ``None``.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class EphemeralStore(Protocol):
    # True when the backend expires keys itself and needs no sweeping
    native_expiry: bool

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def remaining_ttl(self, key: str) -> Optional[float]: ...

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Atomically delete *key* only if it currently holds *expected*."""
        ...

    async def compare_and_swap(self, key: str, expected: str, value: str) -> bool:
        """Atomically replace *expected* with *value*, keeping the remaining TTL."""
        ...

    async def increment(self, key: str, ttl: int) -> int:
        """Atomically add one; a newly created counter expires after *ttl*."""
        ...

    async def purge_expired(self) -> int: ...

    async def ping(self) -> bool:
        """True when the backend is reachable; may raise instead of returning False."""
        ...
