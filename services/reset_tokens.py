"""
Reset token minting.

A reset token is a signed JWT carrying ``sub`` (the email), ``purpose`` and
``jti``. The signature and ``exp`` make the identity claims tamper-evident; the
live used/unused state lives only in the ResetTokenRegistry. Minting does not
register the token, the caller does that with the same TTL.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from errors import AuthenticationError
from infrastructure.signing.protocol import TokenSigner
from shared.datetime_utils import Clock, to_epoch, utcnow
from shared.generators import generate_jti

PURPOSE_PASSWORD_RESET = "password_reset"
RESET_TOKEN_TTL_SECONDS = 900


@dataclass(frozen=True)
class MintedResetToken:
    token: str
    jti: str
    subject: str
    expires_in: int
    issued_at: datetime
    expires_at: datetime


class ResetTokenIssuer:
    def __init__(
        self,
        signer: TokenSigner,
        *,
        ttl_seconds: int = RESET_TOKEN_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._signer = signer
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def mint(self, email: str) -> MintedResetToken:
        jti = generate_jti()
        issued_at = self._clock()
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        token = self._signer.sign(
            {
                "sub": email,
                "purpose": PURPOSE_PASSWORD_RESET,
                "jti": jti,
                "iat": to_epoch(issued_at),
                "exp": to_epoch(expires_at),
            }
        )
        return MintedResetToken(
            token=token,
            jti=jti,
            subject=email,
            expires_in=self.ttl_seconds,
            issued_at=issued_at,
            expires_at=expires_at,
        )


def verify_reset_token(signer: TokenSigner, token: str) -> dict[str, Any]:
    """Check signature, expiry and purpose of *token*; return its claims.

    For downstream consumers. Passing this check says nothing about whether the
    token was already used; ask the registry for that.
    """
    claims = signer.verify(token)
    if claims.get("purpose") != PURPOSE_PASSWORD_RESET:
        raise AuthenticationError("Token is not a password reset token.")
    return claims
