"""
ResourcePulse Backend - Authentication Dependencies
===================================================

What:  FastAPI dependencies that resolve the caller and enforce roles.
How:   `get_current_user` decodes the bearer token and loads the user row;
       `require_roles(...)` wraps it with a role check. Failures raise
       application exceptions, rendered by the handlers in main.py.

Usage:
    @router.post("", dependencies=[Depends(require_roles("resource_manager"))])
    async def create_resource(...): ...

    @router.get("/me")
    async def me(user: User = Depends(get_current_user)): ...
"""

from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.exceptions import AuthenticationError, PermissionDeniedError
from resource_pulse.models.user import User
from resource_pulse.security import auth_manager, extract_bearer_token


async def _load_user(token: str, db: AsyncSession) -> User:
    payload = auth_manager.decode_access_token(token)
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Resolves the authenticated user or raises 401."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise AuthenticationError("Access denied. No token provided")
    return await _load_user(token, db)


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """
    Like `get_current_user`, but anonymous callers get None.

    A token that is present but invalid still fails with 401.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        return None
    return await _load_user(token, db)


def require_roles(*roles: str) -> Callable:
    """
    Builds a dependency that admits users whose role is in `roles`.

    `admin` is always admitted.
    """
    allowed = set(roles) | {"admin"}

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise PermissionDeniedError(required_roles=sorted(allowed))
        return user

    return checker


# Role groups used by the routers
require_admin = require_roles("admin")
require_resource_manager = require_roles("resource_manager")
require_project_staff = require_roles("resource_manager", "project_manager")
