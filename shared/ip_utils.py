"""
Client identity resolution for FastAPI requests.

The rate limiter buckets code requests by network origin; this module decides
what that origin is.
"""

from __future__ import annotations

from fastapi import Request

# Checked in priority order before falling back to the socket peer
PROXY_IP_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",  # Cloudflare
    "True-Client-IP",  # Akamai and others
    "X-Forwarded-For",  # first IP in the list
    "X-Real-IP",  # nginx
    "X-Client-IP",
)


def get_client_ip(request: Request) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in PROXY_IP_HEADERS:
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip: str = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""


def client_identity(request: Request) -> str:
    """Rate-limit bucket key for *request*; ``"unknown"`` when no IP resolves."""
    return get_client_ip(request) or "unknown"
