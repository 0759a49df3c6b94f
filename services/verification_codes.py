"""
One-time verification codes, one live code per email.

Lifecycle of ``code:<email>``:

* ``issue`` writes a fresh record, replacing any earlier one (last write wins).
* ``verify`` with the right code consumes the record with a compare-and-delete,
  so of several concurrent correct submissions exactly one sees VALID.
* A wrong code leaves the record in place; the client may retry until expiry.
* Past ``expires_at`` the record is reported EXPIRED once and deleted.

The store TTL is the code TTL plus a short retention period, so an expired
record is still readable for a while and reported as EXPIRED rather than
NO_PENDING_CODE.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Optional

from infrastructure.store.protocol import EphemeralStore
from schemas.models.credentials import VerificationCodeRecord
from shared.crypto import hash_token, token_matches
from shared.datetime_utils import Clock, utcnow
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)

CODE_TTL_SECONDS = 300
EXPIRED_RETENTION_SECONDS = 60


class CodeCheck(str, Enum):
    VALID = "valid"
    NO_PENDING_CODE = "no_pending_code"
    MISMATCH = "mismatch"
    EXPIRED = "expired"


class VerificationCodeService:
    def __init__(
        self,
        store: EphemeralStore,
        *,
        ttl_seconds: int = CODE_TTL_SECONDS,
        retention_seconds: int = EXPIRED_RETENTION_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self.ttl_seconds = ttl_seconds
        self.retention_seconds = retention_seconds
        self._clock = clock

    @staticmethod
    def _key(email: str) -> str:
        return f"code:{email}"

    async def issue(self, email: str) -> str:
        """Generate, store and return a new code for *email*.

        Does not deliver it; the caller sends it and calls ``discard`` if the
        delivery fails.
        """
        code = generate_otp_code()
        now = self._clock()
        record = VerificationCodeRecord(
            code_hash=hash_token(code),
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        # The code itself is valid for ttl_seconds (expires_at); the store entry
        # outlives it by retention_seconds, so its TTL is not the code lifetime.
        # Retention 0 makes the two equal, at the cost of never reporting EXPIRED.
        await self._store.set(
            self._key(email),
            record.model_dump_json(),
            self.ttl_seconds + self.retention_seconds,
        )
        log.info("verification_code_issued", email=email, ttl_seconds=self.ttl_seconds)
        return code

    async def verify(self, email: str, submitted_code: str) -> CodeCheck:
        key = self._key(email)
        raw = await self._store.get(key)
        if raw is None:
            log.info("verification_code_rejected", email=email, reason="no_pending_code")
            return CodeCheck.NO_PENDING_CODE

        record = VerificationCodeRecord.model_validate_json(raw)

        if record.is_expired(self._clock()):
            await self._store.compare_and_delete(key, raw)
            log.info("verification_code_rejected", email=email, reason="expired")
            return CodeCheck.EXPIRED

        if not token_matches(submitted_code, record.code_hash):
            log.info("verification_code_rejected", email=email, reason="mismatch")
            return CodeCheck.MISMATCH

        if not await self._store.compare_and_delete(key, raw):
            # Consumed or replaced between our read and the delete
            log.info("verification_code_rejected", email=email, reason="lost_race")
            return CodeCheck.NO_PENDING_CODE

        log.info("verification_code_accepted", email=email)
        return CodeCheck.VALID

    async def discard(self, email: str, code: Optional[str] = None) -> bool:
        """Drop the pending code for *email*.

        With *code*, only drops the record if it still holds that code, so a
        rollback never removes a newer code issued concurrently.
        """
        key = self._key(email)
        if code is None:
            removed = await self._store.delete(key)
        else:
            raw = await self._store.get(key)
            removed = False
            if raw is not None:
                record = VerificationCodeRecord.model_validate_json(raw)
                if token_matches(code, record.code_hash):
                    removed = await self._store.compare_and_delete(key, raw)
        log.info("verification_code_discarded", email=email, removed=removed)
        return removed
