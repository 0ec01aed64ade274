from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, as_time
from .model import ShiftAssignment, WorkingShift
from .repository import ShiftRepository


def _to_assignment(r: dict) -> ShiftAssignment:
    return ShiftAssignment(
        assignment_key=r["assignment_key"],
        email=r["email"],
        shift_name=r["shift_name"],
        entry_time=r.get("entry_time"),
        created_at=r.get("created_at"),
    )


def _to_working_shift(r: dict) -> WorkingShift:
    return WorkingShift(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        branch=r["branch"],
        start_time=as_time(r["start_time"]),
        end_time=as_time(r["end_time"]),
        late_after_minutes=int(r.get("late_after_minutes") or 0),
        absent_after_minutes=int(r.get("absent_after_minutes") or 0),
        allow_ot=bool(r.get("allow_ot")),
        created_by=r.get("created_by"),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_assignment(self, assignment_key: str) -> Optional[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_key, email, shift_name, entry_time, created_at
                FROM shift_assignments
                WHERE assignment_key=%s
                """,
                (assignment_key,),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def upsert_assignment(self, *, assignment_key: str, email: str, shift_name: str, entry_time: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_assignments(assignment_key, email, shift_name, entry_time)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE shift_name=VALUES(shift_name), entry_time=VALUES(entry_time)
                """,
                (assignment_key, email, shift_name, entry_time),
            )

    def delete_assignment(self, assignment_key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_assignments WHERE assignment_key=%s", (assignment_key,))
            return cur.rowcount > 0

    def list_assignments(self) -> Sequence[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_key, email, shift_name, entry_time, created_at
                FROM shift_assignments
                ORDER BY shift_name, email
                """
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def find_working_shift(self, *, shift_name: str, branch: str) -> Optional[WorkingShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_id, shift_name, branch, start_time, end_time,
                       late_after_minutes, absent_after_minutes, allow_ot, created_by
                FROM working_shifts
                WHERE shift_name=%s AND branch=%s
                """,
                (shift_name, branch),
            )
            r = fetchone(cur)
            return _to_working_shift(r) if r else None

    def create_working_shift(
        self,
        *,
        shift_name: str,
        branch: str,
        start_time: time,
        end_time: time,
        late_after_minutes: int,
        absent_after_minutes: int,
        allow_ot: bool,
        created_by: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO working_shifts(
                    shift_name, branch, start_time, end_time,
                    late_after_minutes, absent_after_minutes, allow_ot, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    shift_name,
                    branch,
                    start_time,
                    end_time,
                    int(late_after_minutes),
                    int(absent_after_minutes),
                    1 if allow_ot else 0,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def list_working_shifts(self, *, branch: Optional[str] = None) -> Sequence[WorkingShift]:
        sql = """
            SELECT shift_id, shift_name, branch, start_time, end_time,
                   late_after_minutes, absent_after_minutes, allow_ot, created_by
            FROM working_shifts
        """
        params: tuple = ()
        if branch:
            sql += " WHERE branch=%s"
            params = (branch,)
        sql += " ORDER BY branch, start_time"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_working_shift(r) for r in fetchall(cur)]
