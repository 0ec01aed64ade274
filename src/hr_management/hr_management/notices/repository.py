from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Notice, Notification


class NoticeRepository(Protocol):
    def create(self, *, title: str, description: str, attachment_path: Optional[str], author_email: Optional[str]) -> int:
        raise NotImplementedError

    def list(self) -> Sequence[Notice]:
        raise NotImplementedError

    def delete(self, notice_id: int) -> bool:
        raise NotImplementedError


class NotificationRepository(Protocol):
    def create(self, *, email: Optional[str], title: str, message: str) -> int:
        raise NotImplementedError

    def list_for(self, email: str) -> Sequence[Notification]:
        """Own notifications plus broadcasts, newest first."""
        raise NotImplementedError

    def mark_read(self, notification_id: int) -> bool:
        raise NotImplementedError
