"""
Password reset endpoints.

POST /password-reset/code              email a verification code
POST /password-reset/verify            exchange a code for a reset token
GET  /password-reset/tokens/{jti}      token liveness (downstream)
POST /password-reset/tokens/{jti}/use  consume a token (downstream)

Errors are raised as AppError subclasses and rendered by the global handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from dependencies import get_password_reset_service
from schemas.dto.requests.password_reset import RequestCodeRequest, VerifyCodeRequest
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.dto.responses.password_reset import (
    ResetTokenResponse,
    TokenStatusResponse,
)
from services.password_reset import PasswordResetService
from shared.ip_utils import client_identity

router = APIRouter(
    prefix="/password-reset",
    tags=["password-reset"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.post("/code", response_model=MessageResponse)
async def request_code(
    body: RequestCodeRequest,
    request: Request,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    await service.request_code(body.email, client_identity(request))
    return MessageResponse(success=True, message="Verification code sent.")


@router.post("/verify", response_model=ResetTokenResponse)
async def verify_code(
    body: VerifyCodeRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> ResetTokenResponse:
    minted = await service.verify_code(body.email, body.code)
    return ResetTokenResponse.from_minted(minted)


@router.get(
    "/tokens/{jti}", response_model=TokenStatusResponse, response_model_exclude_none=True
)
async def token_status(
    jti: str,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> TokenStatusResponse:
    status = await service.token_status(jti)
    return TokenStatusResponse.from_status(jti, status)


@router.post("/tokens/{jti}/use", response_model=MessageResponse)
async def mark_token_used(
    jti: str,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    await service.mark_token_used(jti)
    return MessageResponse(success=True, message="Reset token marked as used.")
