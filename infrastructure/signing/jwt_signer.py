"""PyJWT implementation of TokenSigner.

RS256 when a key pair is configured, HS256 with a shared secret otherwise.
Keys may be supplied through the environment with literal ``\\n`` sequences.
"""

from __future__ import annotations

from typing import Any

import jwt

from config import ResetTokenSettings
from errors import AuthenticationError
from shared.logging import get_logger

log = get_logger(__name__)

_REQUIRED_CLAIMS = ["exp", "iat", "sub", "jti"]


class JWTSigner:
    def __init__(self, settings: ResetTokenSettings) -> None:
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        if settings.use_rs256:
            self.algorithm = "RS256"
            self._signing_key: Any = settings.jwt_private_key.replace("\\n", "\n").encode("utf-8")
            self._verifying_key: Any = settings.jwt_public_key.replace("\\n", "\n").encode("utf-8")
        else:
            if not settings.jwt_secret:
                raise RuntimeError("JWT_SECRET must be set when RS256 keys are not provided")
            self.algorithm = "HS256"
            self._signing_key = settings.jwt_secret
            self._verifying_key = settings.jwt_secret

    def sign(self, claims: dict[str, Any]) -> str:
        payload = {"iss": self._issuer, "aud": self._audience, **claims}
        return jwt.encode(payload, self._signing_key, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._verifying_key,
                algorithms=[self.algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            log.info("reset_jwt_rejected", reason="expired")
            raise AuthenticationError("Reset token has expired.") from e
        except jwt.InvalidTokenError as e:
            log.warning("reset_jwt_rejected", reason="invalid", error_type=type(e).__name__)
            raise AuthenticationError("Reset token is invalid.") from e
