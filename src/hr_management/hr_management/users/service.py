from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt

from ..core.constants import SESSION_TOKEN_LIFETIME
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class TokenService:
    """Signed, time-boxed bearer tokens carrying only an email claim."""

    algorithm = "HS256"

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("TOKEN_SECRET must be configured")
        self._secret = secret

    def issue(self, email: str, *, lifetime: timedelta = SESSION_TOKEN_LIFETIME, now: datetime | None = None) -> str:
        if not email:
            raise ValidationError("Email is required")
        now = now or datetime.now(timezone.utc)
        payload = {"email": email, "iat": now, "exp": now + lifetime}
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Invalid or expired token")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid or expired token")


class UserService:
    """Use case: resolve a token's email to a user and its role."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, email: str) -> Optional[User]:
        return self._users.get_by_email(email)

    def get_role(self, email: str) -> Optional[Role]:
        user = self._users.get_by_email(email)
        return user.role if user else None

    def require_role(self, email: str, allowed: Iterable[Role]) -> Role:
        allowed = frozenset(allowed)
        role = self.get_role(email)
        if role is None or role not in allowed:
            logger.info("Role check failed for %s (role=%s, allowed=%s)", email, role, sorted(r.value for r in allowed))
            raise AuthorizationError("You do not have permission to perform this action.")
        return role
