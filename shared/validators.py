"""
Input validators: framework-agnostic, pure functions.

Emails are validated but never normalised: the address is a case-sensitive
key exactly as the client sent it.
"""

from __future__ import annotations

import re

import validators as _validators

_OTP_PATTERN = re.compile(r"^[0-9]{6}$")
_JTI_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def validate_email(email: str) -> bool:
    """Return True if *email* is a syntactically valid address.

    Surrounding whitespace makes the address invalid rather than being
    stripped, since the value is used verbatim as a store key.
    """
    if not email or email != email.strip():
        return False
    return bool(_validators.email(email))


def validate_otp_code(code: str) -> bool:
    """Return True if *code* is exactly six ASCII digits."""
    return bool(code) and bool(_OTP_PATTERN.fullmatch(code))


def validate_jti(jti: str) -> bool:
    """Return True if *jti* looks like an identifier this service could mint."""
    return bool(jti) and bool(_JTI_PATTERN.fullmatch(jti))
