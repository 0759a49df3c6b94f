"""HTTP implementations of IdentityResolver and TokenSink.

Both talk JSON to an internal service. The bearer API key is set once as a
default header on the shared HttpClient (see ``bearer_headers``):

* ``GET  {identity_resolver_url}?email=...`` → 200 exists, 404 unknown
* ``POST {token_sink_url}`` with ``{email, token, jti}`` → any 2xx accepted

Transport errors and unexpected statuses become DependencyError.
"""

from __future__ import annotations

import httpx

from errors import DependencyError
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)


def bearer_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"} if api_key else {}


class HttpIdentityResolver:
    def __init__(self, url: str, http_client: HttpClient) -> None:
        self._url = url
        self._http = http_client

    async def exists(self, email: str) -> bool:
        if not self._url:
            log.error("identity_lookup_failed", reason="url_not_configured")
            raise DependencyError("Identity directory is not configured.")
        try:
            response = await self._http.get(self._url, params={"email": email})
        except httpx.HTTPError as e:
            log.error(
                "identity_lookup_failed", error=str(e), error_type=type(e).__name__
            )
            raise DependencyError("Identity directory is unreachable.") from e

        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        log.error(
            "identity_lookup_failed",
            status_code=response.status_code,
            response=response.text[:200],
        )
        raise DependencyError("Identity directory returned an error.")


class HttpTokenSink:
    def __init__(self, url: str, http_client: HttpClient) -> None:
        self._url = url
        self._http = http_client

    async def store(self, email: str, token: str, jti: str) -> None:
        if not self._url:
            log.error("token_sink_failed", jti=jti, reason="url_not_configured")
            raise DependencyError("Token sink is not configured.")
        try:
            response = await self._http.post(
                self._url,
                json={"email": email, "token": token, "jti": jti},
            )
        except httpx.HTTPError as e:
            log.error(
                "token_sink_failed", jti=jti, error=str(e), error_type=type(e).__name__
            )
            raise DependencyError("Token sink is unreachable.") from e

        if not response.is_success:
            log.error(
                "token_sink_failed",
                jti=jti,
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise DependencyError("Token sink rejected the reset token.")
        log.info("token_sink_stored", jti=jti)
