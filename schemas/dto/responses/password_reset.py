"""
Response DTOs for the password reset endpoints.

ResetTokenResponse   POST /password-reset/verify  (200)
TokenStatusResponse  GET  /password-reset/tokens/{jti}  (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from services.reset_tokens import MintedResetToken
from services.token_registry import TokenStatus


class ResetTokenResponse(BaseModel):
    """A freshly minted reset token."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    jti: str
    expires_in: int

    @classmethod
    def from_minted(cls, minted: MintedResetToken) -> "ResetTokenResponse":
        return cls(token=minted.token, jti=minted.jti, expires_in=minted.expires_in)


class TokenStatusResponse(BaseModel):
    """Liveness of a reset token; ``email`` is only present while it is live."""

    model_config = ConfigDict(populate_by_name=True)

    jti: str
    live: bool
    state: str
    email: Optional[str] = None

    @classmethod
    def from_status(cls, jti: str, status: TokenStatus) -> "TokenStatusResponse":
        return cls(
            jti=jti,
            live=status.is_live,
            state=status.state.value,
            email=status.email if status.is_live else None,
        )
