from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Auth identity; shares its email key with the Employee record."""

    user_id: int
    email: str
    username: str
    role: Optional[Role]
    branch: Optional[str] = None
    is_active: bool = False
    email_verified: bool = False
