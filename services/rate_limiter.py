"""Fixed-window rate limiter over the ephemeral store.

The first hit from a client opens a window of ``window_seconds``; the counter
key expires with the window, so the next hit after that starts again at one.
Rejected hits still count, which keeps a hammering client locked out until the
window closes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from infrastructure.store.protocol import EphemeralStore
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

CODE_REQUEST_LIMIT = 20
CODE_REQUEST_WINDOW_SECONDS = 900


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_in: Optional[float]


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: EphemeralStore,
        *,
        limit: int = CODE_REQUEST_LIMIT,
        window_seconds: int = CODE_REQUEST_WINDOW_SECONDS,
        scope: str = "code_request",
    ) -> None:
        if limit <= 0 or window_seconds <= 0:
            raise ValueError("limit and window_seconds must be positive")
        self._store = store
        self.limit = limit
        self.window_seconds = window_seconds
        self.scope = scope

    async def hit(self, client_id: str) -> RateLimitResult:
        """Count one request from *client_id* and say whether it is admitted."""
        bucket = f"ratelimit:{self.scope}:{client_id}"
        count = await self._store.increment(bucket, self.window_seconds)
        reset_in = await self._store.remaining_ttl(bucket)
        result = RateLimitResult(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(self.limit - count, 0),
            reset_in=reset_in,
        )
        if not result.allowed:
            log.warning(
                "rate_limit_exceeded",
                scope=self.scope,
                client=hash_ip(client_id),
                count=count,
                limit=self.limit,
            )
        return result
