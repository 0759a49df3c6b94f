"""
Password reset flow.

request_code:    rate limit → identity lookup → issue code → email it
verify_code:     check code → mint token → register jti → hand to token sink
token_status:    liveness lookup for downstream consumers
mark_token_used: single-use consumption for downstream consumers

Compensation rules:
- If the email cannot be delivered the pending code is discarded, so a later
  resend is not blocked by a code nobody received.
- If the token sink fails after registration the registry entry is left to
  expire. The caller may already hold the signed token; deleting the entry
  would not revoke it safely.
"""

from __future__ import annotations

from errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from infrastructure.directory.protocol import IdentityResolver, TokenSink
from infrastructure.email.protocol import Notifier
from services.rate_limiter import FixedWindowRateLimiter
from services.reset_tokens import MintedResetToken, ResetTokenIssuer
from services.token_registry import (
    MarkOutcome,
    ResetTokenRegistry,
    TokenState,
    TokenStatus,
)
from services.verification_codes import CodeCheck, VerificationCodeService
from shared.logging import get_logger, hash_ip
from shared.validators import validate_email, validate_jti, validate_otp_code

log = get_logger(__name__)

_REJECTION_MESSAGES = {
    CodeCheck.NO_PENDING_CODE: "No verification code is pending for this email.",
    CodeCheck.MISMATCH: "Verification code is incorrect.",
    CodeCheck.EXPIRED: "Verification code has expired.",
}


class PasswordResetService:
    def __init__(
        self,
        codes: VerificationCodeService,
        issuer: ResetTokenIssuer,
        registry: ResetTokenRegistry,
        rate_limiter: FixedWindowRateLimiter,
        identity: IdentityResolver,
        notifier: Notifier,
        token_sink: TokenSink,
    ) -> None:
        self._codes = codes
        self._issuer = issuer
        self._registry = registry
        self._rate_limiter = rate_limiter
        self._identity = identity
        self._notifier = notifier
        self._token_sink = token_sink

    async def request_code(self, email: str, client_id: str) -> None:
        """Issue and deliver a code for *email*. The code itself is never returned."""
        if not validate_email(email):
            raise ValidationError("A valid email address is required.", field="email")

        limit = await self._rate_limiter.hit(client_id)
        if not limit.allowed:
            raise RateLimitError(
                "Too many verification code requests. Please try again later.",
                details={"retry_after": int(limit.reset_in or 0)},
            )

        if not await self._identity.exists(email):
            log.info("reset_code_request_rejected", email=email, reason="unknown_identity")
            raise NotFoundError("No account is registered for this email.", field="email")

        code = await self._codes.issue(email)
        try:
            delivered = await self._notifier.send_reset_code(
                email, code, expires_in_minutes=max(self._codes.ttl_seconds // 60, 1)
            )
        except Exception as e:
            log.error(
                "reset_code_delivery_error",
                email=email,
                error=str(e),
                error_type=type(e).__name__,
            )
            delivered = False

        if not delivered:
            await self._codes.discard(email, code)
            raise DependencyError("Could not send the verification email.")

        log.info("reset_code_sent", email=email, client=hash_ip(client_id))

    async def verify_code(self, email: str, code: str) -> MintedResetToken:
        """Consume *code* and return a freshly minted, registered reset token."""
        if not validate_email(email):
            raise ValidationError("A valid email address is required.", field="email")
        if not validate_otp_code(code):
            raise ValidationError("Verification code must be 6 digits.", field="code")

        outcome = await self._codes.verify(email, code)
        if outcome is not CodeCheck.VALID:
            raise ConflictError(
                _REJECTION_MESSAGES[outcome], field="code", details={"reason": outcome.value}
            )

        minted = self._issuer.mint(email)
        await self._registry.register(minted.jti, email, minted.expires_in)
        await self._token_sink.store(email, minted.token, minted.jti)
        log.info("reset_token_issued", email=email, jti=minted.jti)
        return minted

    async def token_status(self, jti: str) -> TokenStatus:
        # A malformed id cannot have been minted here; answer like any unknown id
        if not validate_jti(jti):
            return TokenStatus(TokenState.NOT_FOUND)
        return await self._registry.status(jti)

    async def mark_token_used(self, jti: str) -> None:
        if not validate_jti(jti):
            raise ValidationError("Malformed token identifier.", field="jti")
        if await self._registry.mark_used(jti) is MarkOutcome.NOT_FOUND:
            raise NotFoundError("Reset token is unknown or expired.", field="jti")
