"""
ResourcePulse Backend - Authentication Manager
==============================================

What:  Password hashing and JWT issuing/validation in one place.
How:   Argon2id (argon2-cffi) for passwords; PyJWT HS256 for tokens.
       Access and refresh tokens are signed with different secrets and
       carry a `type` claim so one can never stand in for the other.
Who:   AuthService (register, login, refresh), `get_current_user`,
       AuditMiddleware (reads the caller id from the bearer token).

Token structure:
    access:  {"sub": "42", "email": "...", "role": "admin", "type": "access", "iat", "exp"}
    refresh: {"sub": "42", "type": "refresh", "iat", "exp"}

    `sub` is a string: PyJWT validates it as one.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

from resource_pulse.config import settings
from resource_pulse.exceptions import AuthenticationError

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class AuthManager:
    """
    JWT (stateless sessions) + Argon2 (password storage).

    Secrets shorter than 32 characters are rejected at construction time:
    HS256 keys that short are brute-forceable.
    """

    def __init__(
        self,
        secret_key: str,
        refresh_secret_key: str,
        access_token_expiry: timedelta = timedelta(hours=24),
        refresh_token_expiry: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ):
        for name, key in (("secret_key", secret_key), ("refresh_secret_key", refresh_secret_key)):
            if not key or len(key) < 32:
                raise ValueError(f"JWT {name} must be at least 32 characters")

        self.secret_key = secret_key
        self.refresh_secret_key = refresh_secret_key
        self.access_token_expiry = access_token_expiry
        self.refresh_token_expiry = refresh_token_expiry
        self.algorithm = algorithm

        self.password_hasher = PasswordHasher(
            time_cost=3,
            memory_cost=65536,  # KiB
            parallelism=4,
            hash_len=32,
            salt_len=16,
            type=Type.ID,
        )

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        """Returns an encoded `$argon2id$...` hash string."""
        if not password:
            raise ValueError("Password cannot be empty")
        return self.password_hasher.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        """True when `password` matches; False on mismatch or a malformed hash."""
        if not password or not password_hash:
            return False
        try:
            return self.password_hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    # ── Tokens ────────────────────────────────────────────────────────────

    def create_access_token(self, user_id: int, email: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": ACCESS_TOKEN,
            "iat": now,
            "exp": now + self.access_token_expiry,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_refresh_token(self, user_id: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": REFRESH_TOKEN,
            "iat": now,
            "exp": now + self.refresh_token_expiry,
        }
        return jwt.encode(payload, self.refresh_secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """
        Validates signature, expiry and token type.

        Raises:
            AuthenticationError("Token expired") for expired tokens
            AuthenticationError("Invalid token") for anything else
        """
        return self._decode(token, self.secret_key, ACCESS_TOKEN)

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self.refresh_secret_key, REFRESH_TOKEN)

    def peek_user_id(self, token: str) -> Optional[str]:
        """
        Returns the `sub` of a valid access token, or None.

        Used where a missing identity is acceptable (audit attribution).
        """
        try:
            return self.decode_access_token(token).get("sub")
        except AuthenticationError:
            return None

    def _decode(self, token: str, key: str, expected_type: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid token")
        return payload


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Pulls the token out of an `Authorization: Bearer <token>` header value.

    Returns None when the header is missing or uses another scheme.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


auth_manager = AuthManager(
    secret_key=settings.jwt_secret,
    refresh_secret_key=settings.jwt_refresh_secret,
    access_token_expiry=timedelta(minutes=settings.access_token_expire_minutes),
    refresh_token_expiry=timedelta(days=settings.refresh_token_expire_days),
    algorithm=settings.jwt_algorithm,
)
