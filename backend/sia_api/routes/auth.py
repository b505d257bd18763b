"""
SIA API: Authentication Routes
==============================

What:  Public endpoints for registering, logging in and refreshing tokens.
       These are the only /api routes the access guard lets through without
       a bearer token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from sia_api.schemas.account import AccountCreate
from sia_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterResponse,
    TokenPairResponse,
)
from sia_api.schemas.common import ErrorResponse
from sia_api.services.auth_service import AuthService, get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Invalid input or email already registered", "model": ErrorResponse},
    },
    summary="Register a new account",
)
async def register(
    payload: AccountCreate,
    auth: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Creates the account and returns an access token valid for 10 minutes."""
    return await auth.register(payload)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing email or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange credentials for access and refresh tokens",
)
async def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    return await auth.login(payload.email, payload.password)


@router.post(
    "/refresh-token",
    response_model=TokenPairResponse,
    responses={
        401: {"description": "Missing, expired or invalid refresh token", "model": ErrorResponse},
        404: {"description": "The token's account no longer exists", "model": ErrorResponse},
    },
    summary="Exchange a refresh token for a new token pair",
)
async def refresh_token(
    payload: Optional[RefreshRequest] = Body(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> TokenPairResponse:
    """
    Body: `{"refreshToken": "<token>"}`.

    An absent body or field is answered by the service with
    401 "Refresh token is required", not a validation error.
    """
    return await auth.refresh(payload.refresh_token if payload else None)
