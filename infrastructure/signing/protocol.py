"""TokenSigner protocol: the issuer signs through this, downstream consumers verify.

Swapping the algorithm or rotating the secret only touches the implementation.
"""

from typing import Any, Protocol


class TokenSigner(Protocol):
    def sign(self, claims: dict[str, Any]) -> str: ...

    def verify(self, token: str) -> dict[str, Any]:
        """Return the claims, or raise AuthenticationError if the token is bad."""
        ...
