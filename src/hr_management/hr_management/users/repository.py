from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for auth identities.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, email: str, username: str, role: Role, branch: Optional[str]) -> int:
        raise NotImplementedError

    def activate(self, email: str) -> bool:
        raise NotImplementedError
