"""
Cryptographic helpers for one-time codes.

Codes are stored as SHA-256 digests so a store dump never reveals a usable
code; comparisons run in constant time.
"""

from __future__ import annotations

import hashlib
import hmac


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Args:
        token: The plaintext code or token string to hash.

    Returns:
        64-character lowercase hex string.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches(plain: str, token_hash: str) -> bool:
    """Constant-time check that *plain* hashes to *token_hash*."""
    return hmac.compare_digest(hash_token(plain), token_hash)
