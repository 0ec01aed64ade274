from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Notice:
    notice_id: int
    title: str
    description: str
    attachment_path: Optional[str] = None
    author_email: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Notification:
    """In-app notification; ``email=None`` is a broadcast to everyone."""

    notification_id: int
    email: Optional[str]
    title: str
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None
