from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Notice, Notification
from .repository import NoticeRepository, NotificationRepository


class MySQLNoticeRepository(NoticeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, title: str, description: str, attachment_path: Optional[str], author_email: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notices(title, description, attachment_path, author_email) VALUES(%s,%s,%s,%s)",
                (title, description, attachment_path, author_email),
            )
            return int(cur.lastrowid)

    def list(self) -> Sequence[Notice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT notice_id, title, description, attachment_path, author_email, created_at
                FROM notices ORDER BY created_at DESC, notice_id DESC
                """
            )
            return [Notice(**r) for r in fetchall(cur)]

    def delete(self, notice_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notices WHERE notice_id=%s", (int(notice_id),))
            return cur.rowcount > 0


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, email: Optional[str], title: str, message: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notifications(email, title, message) VALUES(%s,%s,%s)",
                (email, title, message),
            )
            return int(cur.lastrowid)

    def list_for(self, email: str) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT notification_id, email, title, message, is_read, created_at
                FROM notifications
                WHERE email=%s OR email IS NULL
                ORDER BY created_at DESC, notification_id DESC
                """,
                (email,),
            )
            return [
                Notification(
                    notification_id=int(r["notification_id"]),
                    email=r.get("email"),
                    title=r["title"],
                    message=r["message"],
                    is_read=bool(r["is_read"]),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]

    def mark_read(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # rowcount is 0 for rows that were already read, so check existence first.
            cur.execute("SELECT notification_id FROM notifications WHERE notification_id=%s", (int(notification_id),))
            if not cur.fetchone():
                return False
            cur.execute("UPDATE notifications SET is_read=1 WHERE notification_id=%s", (int(notification_id),))
            return True
