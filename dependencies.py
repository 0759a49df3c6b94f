"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The objects themselves are built once in the
application lifespan and live on app.state.
"""

from __future__ import annotations

from fastapi import Request

from infrastructure.store.protocol import EphemeralStore
from services.password_reset import PasswordResetService


def get_store(request: Request) -> EphemeralStore:
    """Return the EphemeralStore backing codes, tokens and rate limits."""
    return request.app.state.store


def get_password_reset_service(request: Request) -> PasswordResetService:
    """Return the PasswordResetService wired in the lifespan."""
    return request.app.state.password_reset
