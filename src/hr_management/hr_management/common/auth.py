from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.service import TokenService, UserService


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split(" ")
    return parts[1] if len(parts) > 1 and parts[1] else ""


class Guards:
    """Route decorators shared by every controller.

    ``token_required`` puts the token's email on ``g.user_email``;
    ``roles_required`` additionally resolves ``g.user_role`` and checks it against an allow-list.
    """

    def __init__(self, tokens: TokenService, users: UserService):
        self._tokens = tokens
        self._users = users

    def _authenticate(self) -> str:
        token = bearer_token()
        if token is None:
            raise AuthenticationError("Access forbidden")
        if not token:
            raise AuthenticationError("No authorization")
        try:
            payload = self._tokens.decode(token)
        except AuthenticationError:
            raise AuthorizationError("Forbidden: Invalid token")
        g.user_email = str(payload.get("email", "")).lower()
        return g.user_email

    def token_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            self._authenticate()
            return view(*args, **kwargs)

        return wrapper

    def roles_required(self, *roles: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                email = self._authenticate()
                g.user_role = self._users.require_role(email, roles)
                return view(*args, **kwargs)

            return wrapper

        return decorator


def self_match(query_email: Optional[str]) -> str:
    """GET routes take ``userEmail`` and must match the token's email."""
    if not query_email or query_email.strip().lower() != g.get("user_email"):
        raise AuthenticationError("Forbidden Access")
    return g.user_email
