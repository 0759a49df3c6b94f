"""
Random code and identifier generators: pure, side-effect-free functions.

All generators use cryptographically secure sources (``secrets`` module).
"""

from __future__ import annotations

import secrets
import uuid

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp_code() -> str:
    """Generate a 6-digit numeric code, uniform over ``[100000, 999999]``.

    The lower bound keeps every code exactly six digits long with no leading
    zero, so the value is unambiguous when read aloud or typed.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_jti() -> str:
    """Return a fresh globally unique token identifier (UUID4, hex form)."""
    return uuid.uuid4().hex
