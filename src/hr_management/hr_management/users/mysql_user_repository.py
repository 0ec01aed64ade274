from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, email, username, role, branch, is_active, email_verified
                FROM users
                WHERE email=%s
                """,
                (email,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return User(
                user_id=int(row["user_id"]),
                email=row["email"],
                username=row["username"],
                role=Role.parse(row.get("role")),
                branch=row.get("branch"),
                is_active=bool(row.get("is_active")),
                email_verified=bool(row.get("email_verified")),
            )

    def create_user(self, *, email: str, username: str, role: Role, branch: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, username, role, branch, is_active, email_verified)
                VALUES(%s,%s,%s,%s,0,0)
                """,
                (email, username, role.value, branch),
            )
            return int(cur.lastrowid)

    def activate(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            if not fetchone(cur):
                return False
            cur.execute("UPDATE users SET is_active=1, email_verified=1 WHERE email=%s", (email,))
            return True
