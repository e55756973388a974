"""
RecipePlanner Backend - Authentication Route Handlers
======================================================

What:  POST /api/auth/register, POST /api/auth/login and the caller's own
       profile at /api/auth/profile (GET, PUT, DELETE).
How:   Thin wrappers around AuthService; the service and the token codec
       come from app.state through dependencies.

Public:     register, login
Protected:  everything under /profile (x-auth-token header)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.database import get_db_session
from recipeplanner.middleware.auth_guard import CurrentUser, get_auth_service, require_user
from recipeplanner.schemas.auth import (
    LoginRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
)
from recipeplanner.schemas.common import ErrorResponse, MessageResponse
from recipeplanner.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={
        400: {"description": "Invalid fields or email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Register and log in at once: the response carries a token that is valid
    immediately.
    """
    result = await auth.register(db, email=body.email, password=body.password, name=body.name)
    return TokenResponse(token=result.token, expires_in=result.expires_in)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        400: {"description": "Invalid fields or wrong email/password", "model": ErrorResponse},
    },
    summary="Exchange email and password for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    result = await auth.login(db, email=body.email, password=body.password)
    return TokenResponse(token=result.token, expires_in=result.expires_in)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Account no longer exists", "model": ErrorResponse},
    },
    summary="Read the caller's profile",
)
async def get_profile(
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    account = await auth.get_profile(db, user.id)
    return ProfileResponse.model_validate(account)


@router.put(
    "/profile",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid fields or wrong current password", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Change the display name and/or password",
)
async def update_profile(
    body: ProfileUpdateRequest,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Tokens issued before a password change stay valid until they expire;
    there is no revocation list.
    """
    await auth.update_profile(
        db,
        user.id,
        name=body.name,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return MessageResponse(message="Profile updated successfully")


@router.delete(
    "/profile",
    response_model=MessageResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Account already deleted", "model": ErrorResponse},
    },
    summary="Delete the account and everything it owns",
)
async def delete_profile(
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.delete_account(db, user.id)
    return MessageResponse(message="User deleted successfully")
