"""
Single-use state of issued reset tokens, keyed by ``jti``.

The registry answers one question for downstream consumers: is this jti live
and unused? Signature checks are separate (see services.reset_tokens).

``mark_used`` is a compare-and-swap loop. A lost swap means another caller
changed the entry first; since ``used`` never reverts, the re-read then shows
the token as used (or gone) and the call returns without writing again. The
swap keeps the store TTL, so a used entry still disappears when the token
would have expired anyway.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from infrastructure.store.protocol import EphemeralStore
from schemas.models.credentials import ResetTokenRecord
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class TokenState(str, Enum):
    NOT_FOUND = "not_found"
    UNUSED = "unused"
    USED = "used"


class MarkOutcome(str, Enum):
    MARKED = "marked"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class TokenStatus:
    state: TokenState
    email: Optional[str] = None
    used_at: Optional[datetime] = None

    @property
    def is_live(self) -> bool:
        return self.state is TokenState.UNUSED


class ResetTokenRegistry:
    def __init__(self, store: EphemeralStore, *, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock

    @staticmethod
    def _key(jti: str) -> str:
        return f"token:{jti}"

    async def register(self, jti: str, email: str, ttl: int) -> None:
        """Record a freshly minted token. *ttl* must match the token's own expiry."""
        record = ResetTokenRecord(email=email, created_at=self._clock())
        await self._store.set(self._key(jti), record.model_dump_json(), ttl)
        log.info("reset_token_registered", jti=jti, email=email, ttl_seconds=ttl)

    async def status(self, jti: str) -> TokenStatus:
        raw = await self._store.get(self._key(jti))
        if raw is None:
            return TokenStatus(TokenState.NOT_FOUND)
        record = ResetTokenRecord.model_validate_json(raw)
        if record.used:
            return TokenStatus(TokenState.USED, email=record.email, used_at=record.used_at)
        return TokenStatus(TokenState.UNUSED, email=record.email)

    async def mark_used(self, jti: str) -> MarkOutcome:
        """Flip ``used`` to True. Idempotent: repeat calls only refresh ``used_at``."""
        key = self._key(jti)
        raw = await self._store.get(key)
        while raw is not None:
            record = ResetTokenRecord.model_validate_json(raw)
            updated = record.model_copy(update={"used": True, "used_at": self._clock()})
            if await self._store.compare_and_swap(key, raw, updated.model_dump_json()):
                log.info(
                    "reset_token_marked_used",
                    jti=jti,
                    email=record.email,
                    first_use=not record.used,
                )
                return MarkOutcome.MARKED

            raw = await self._store.get(key)
            if raw is not None and ResetTokenRecord.model_validate_json(raw).used:
                # A concurrent call marked it between our read and the swap
                log.info("reset_token_marked_used", jti=jti, concurrent=True)
                return MarkOutcome.MARKED

        log.info("reset_token_mark_rejected", jti=jti, reason="not_found")
        return MarkOutcome.NOT_FOUND
