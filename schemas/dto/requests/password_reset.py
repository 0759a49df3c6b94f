"""
Request DTOs for the password reset endpoints.

RequestCodeRequest  POST /password-reset/code
VerifyCodeRequest   POST /password-reset/verify

Fields are plain ``str`` rather than ``EmailStr``: the email is a
case-sensitive key and must reach the service exactly as sent. Format checks
happen in shared.validators.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RequestCodeRequest(BaseModel):
    """Request body for POST /password-reset/code."""

    model_config = ConfigDict(populate_by_name=True)

    email: str


class VerifyCodeRequest(BaseModel):
    """Request body for POST /password-reset/verify.

    ``code`` is the 6-digit code delivered by email.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str
    code: str
