from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import DEFAULT_CASUAL_LEAVE_DAYS, DEFAULT_SICK_LEAVE_DAYS
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveApplication, LeaveBalance
from .repository import LeaveRepository

_BALANCE_COLUMN = {LeaveType.CASUAL: "casual_leave", LeaveType.SICK: "sick_leave"}


def _to_application(r: dict) -> LeaveApplication:
    return LeaveApplication(
        leave_id=int(r["leave_id"]),
        email=r["email"],
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=int(r["total_days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        created_at=r.get("created_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_or_create_balance(self, email: str) -> LeaveBalance:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO leave_balances(email, casual_leave, sick_leave) VALUES(%s,%s,%s)",
                (email, DEFAULT_CASUAL_LEAVE_DAYS, DEFAULT_SICK_LEAVE_DAYS),
            )
            cur.execute("SELECT email, casual_leave, sick_leave FROM leave_balances WHERE email=%s", (email,))
            r = fetchone(cur)
            return LeaveBalance(email=r["email"], casual_leave=int(r["casual_leave"]), sick_leave=int(r["sick_leave"]))

    def has_pending(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 FROM leave_applications WHERE email=%s AND status=%s LIMIT 1",
                (email, LeaveStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def create_application(
        self,
        *,
        email: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(email, leave_type, start_date, end_date, total_days, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (email, leave_type.value, start_date, end_date, int(total_days), reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_application(self, leave_id: int) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM leave_applications WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_application(r) if r else None

    def decide(self, leave_id: int, *, status: LeaveStatus, decided_by: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT email, leave_type, total_days, status FROM leave_applications WHERE leave_id=%s FOR UPDATE",
                (int(leave_id),),
            )
            r = fetchone(cur)
            if not r or r["status"] != LeaveStatus.PENDING.value:
                return False

            cur.execute(
                "UPDATE leave_applications SET status=%s, decided_by=%s, decided_at=NOW() WHERE leave_id=%s",
                (status.value, decided_by, int(leave_id)),
            )
            if status == LeaveStatus.APPROVED:
                column = _BALANCE_COLUMN[LeaveType(r["leave_type"])]
                cur.execute(
                    f"UPDATE leave_balances SET {column} = {column} - %s WHERE email=%s",
                    (int(r["total_days"]), r["email"]),
                )
            return True

    def list_applications(
        self, *, email: Optional[str] = None, status: Optional[LeaveStatus] = None
    ) -> Sequence[LeaveApplication]:
        clauses, params = [], []
        if email:
            clauses.append("email=%s")
            params.append(email)
        if status:
            clauses.append("status=%s")
            params.append(status.value)
        sql = "SELECT * FROM leave_applications"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC, leave_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_application(r) for r in fetchall(cur)]
