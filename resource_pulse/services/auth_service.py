"""
ResourcePulse Backend - Auth Service
====================================

What:  Registration, login and token refresh.
Who:   Called by routes/auth.py.

Login failure messages are deliberately identical for "no such email" and
"wrong password" so the endpoint cannot be used to enumerate accounts.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import AuthenticationError, ConflictError, PermissionDeniedError
from resource_pulse.models.mixins import utcnow
from resource_pulse.models.user import User
from resource_pulse.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from resource_pulse.security import auth_manager
from resource_pulse.services.base import translate_db_errors

logger = logging.getLogger(__name__)


class AuthService:

    async def register(
        self,
        db: AsyncSession,
        payload: RegisterRequest,
        actor: Optional[User] = None,
    ) -> UserResponse:
        """
        Creates an account.

        Anyone may self-register as `user`; any other role has to be granted
        by an authenticated admin.
        """
        if payload.role != "user" and (actor is None or actor.role != "admin"):
            raise PermissionDeniedError(
                message="Only administrators can assign elevated roles",
                required_roles=["admin"],
            )

        with translate_db_errors("register user"):
            existing = await db.execute(select(User.id).where(User.email == payload.email))
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(message="A user with this email already exists")

            user = User(
                email=payload.email,
                password_hash=auth_manager.hash_password(payload.password),
                first_name=payload.first_name,
                last_name=payload.last_name,
                role=payload.role,
                is_active=True,
            )
            db.add(user)
            await db.flush()

        logger.info("Registered user %s (role=%s)", user.id, user.role)
        return UserResponse.model_validate(user)

    async def login(self, db: AsyncSession, payload: LoginRequest) -> TokenResponse:
        with translate_db_errors("log in"):
            result = await db.execute(select(User).where(User.email == payload.email))
            user = result.scalar_one_or_none()

            if user is None or not auth_manager.verify_password(
                payload.password, user.password_hash
            ):
                raise AuthenticationError("Invalid credentials")
            if not user.is_active:
                raise AuthenticationError("Account is deactivated")

            user.last_login = utcnow()
            await db.flush()

        logger.info("User %s logged in", user.id)
        return TokenResponse(
            access_token=auth_manager.create_access_token(user.id, user.email, user.role),
            refresh_token=auth_manager.create_refresh_token(user.id),
            user=UserResponse.model_validate(user),
        )

    async def refresh(self, db: AsyncSession, refresh_token: str) -> AccessTokenResponse:
        """Exchanges a refresh token for a new access token."""
        payload = auth_manager.decode_refresh_token(refresh_token)
        try:
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Invalid token")

        with translate_db_errors("refresh token"):
            user = await db.get(User, user_id)

        if user is None:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        return AccessTokenResponse(
            access_token=auth_manager.create_access_token(user.id, user.email, user.role),
        )


auth_service = AuthService()
