"""Background expiry sweeper for stores without native TTL.

Runs as an asyncio task owned by the application lifespan: ``start()`` at
startup, ``stop()`` at shutdown. A failed sweep is logged and retried on the
next tick; reads re-check expiry themselves, so a missed cycle only delays
memory reclamation.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

from infrastructure.store.protocol import EphemeralStore
from shared.logging import get_logger

log = get_logger(__name__)

SWEEP_INTERVAL_SECONDS = 300.0


class ExpirySweeper:
    def __init__(
        self, store: EphemeralStore, interval_seconds: float = SWEEP_INTERVAL_SECONDS
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Start the loop. Returns False when the store expires keys natively."""
        if self._store.native_expiry:
            log.info("store_sweeper_skipped", reason="native_expiry")
            return False
        if self.running:
            return True
        self._task = asyncio.create_task(self._run(), name="ephemeral-store-sweeper")
        log.info("store_sweeper_started", interval_seconds=self.interval_seconds)
        return True

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("store_sweeper_stopped")

    async def sweep_once(self) -> int:
        removed = await self._store.purge_expired()
        if removed:
            log.info("store_sweep_completed", removed=removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception as e:
                log.error(
                    "store_sweep_failed", error=str(e), error_type=type(e).__name__
                )
