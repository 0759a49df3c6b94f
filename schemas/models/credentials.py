"""
Records persisted in the ephemeral store.

VerificationCodeRecord  stored at ``code:<email>``
ResetTokenRecord        stored at ``token:<jti>``

Both round-trip through JSON (model_dump_json / model_validate_json) so entries
are readable with redis-cli and the raw string doubles as the compare value
for the store's atomic primitives.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class VerificationCodeRecord(BaseModel):
    """A pending code. Only the SHA-256 of the code is kept."""

    model_config = ConfigDict(frozen=True)

    code_hash: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class ResetTokenRecord(BaseModel):
    """Live state of an issued reset token. ``used`` only ever goes False → True."""

    model_config = ConfigDict(frozen=True)

    email: str
    used: bool = False
    created_at: datetime
    used_at: Optional[datetime] = None
