"""
ResourcePulse Backend - Auth Routes
===================================

Login and refresh are public. Registration is public for the `user` role;
an admin token is needed to create accounts with any other role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, get_optional_user
from resource_pulse.models.user import User
from resource_pulse.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from resource_pulse.schemas.common import ErrorResponse
from resource_pulse.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create a user account",
)
async def register(
    payload: RegisterRequest,
    actor: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """
    What:  Creates a user account.
    Who:   Anyone for the `user` role; elevated roles need an admin token.
    """
    return await auth_service.register(db, payload, actor=actor)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Exchange email and password for tokens",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    """Returns an access and refresh token pair."""
    return await auth_service.login(db, payload)


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Exchange a refresh token for a new access token",
)
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AccessTokenResponse:
    """Issues a new access token for a valid refresh token."""
    return await auth_service.refresh(db, payload.refresh_token)


@router.get("/me", response_model=UserResponse, summary="Current user profile")
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Profile of the caller."""
    return UserResponse.model_validate(user)
