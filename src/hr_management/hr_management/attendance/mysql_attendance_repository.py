from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import PunchKind
from mysql.connector.errors import IntegrityError

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceSnapshot, Punch, SnapshotUpdate
from .repository import AttendanceRepository

SNAPSHOT_COLUMNS = (
    "email",
    "work_date",
    "month",
    "year",
    "shift_name",
    "full_name",
    "eid",
    "designation",
    "branch",
    "photo_url",
    "check_in_time",
    "late_check_in",
    "check_out_time",
    "working_display",
    "working_seconds",
    "ot_start_time",
    "ot_stop_time",
    "ot_display",
    "ot_seconds",
)

_PUNCH_SELECT = """
    SELECT email, work_date, kind, punch_time_ms, display_time, late_by,
           duration, duration_seconds, created_at
    FROM attendance_punches
"""


def _to_punch(r: dict) -> Punch:
    return Punch(
        email=r["email"],
        work_date=r["work_date"],
        kind=PunchKind(r["kind"]),
        punch_time_ms=int(r["punch_time_ms"]),
        display_time=r.get("display_time"),
        late_by=r.get("late_by"),
        duration=r.get("duration"),
        duration_seconds=r.get("duration_seconds"),
        created_at=r.get("created_at"),
    )


def _to_snapshot(r: dict) -> AttendanceSnapshot:
    data = {c: r.get(c) for c in SNAPSHOT_COLUMNS}
    data["year"] = int(data["year"])
    data["working_seconds"] = int(data["working_seconds"] or 0)
    data["ot_seconds"] = int(data["ot_seconds"] or 0)
    return AttendanceSnapshot(**data)


def _upsert_snapshot_sql(update: SnapshotUpdate) -> tuple[str, tuple]:
    values = {**update.on_insert, **update.always}
    unknown = set(values) - set(SNAPSHOT_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown snapshot columns: {sorted(unknown)}")

    columns = list(values)
    sql = (
        f"INSERT INTO attendance_snapshots({', '.join(columns)}) "
        f"VALUES({', '.join(['%s'] * len(columns))})"
    )
    if update.always:
        sql += " ON DUPLICATE KEY UPDATE " + ", ".join(f"{c}=VALUES({c})" for c in update.always)
    else:
        sql += " ON DUPLICATE KEY UPDATE email=email"
    return sql, tuple(values[c] for c in columns)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_punch(self, email: str, work_date: date, kind: PunchKind) -> Optional[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _PUNCH_SELECT + " WHERE email=%s AND work_date=%s AND kind=%s",
                (email, work_date, kind.value),
            )
            r = fetchone(cur)
            return _to_punch(r) if r else None

    def list_punches(self, email: str, work_date: date) -> Sequence[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _PUNCH_SELECT + " WHERE email=%s AND work_date=%s ORDER BY punch_time_ms",
                (email, work_date),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def record_punch(self, punch: Punch, *, snapshot: Optional[SnapshotUpdate] = None) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_punches(
                        email, work_date, kind, punch_time_ms, display_time,
                        late_by, duration, duration_seconds
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        punch.email,
                        punch.work_date,
                        punch.kind.value,
                        int(punch.punch_time_ms),
                        punch.display_time,
                        punch.late_by,
                        punch.duration,
                        punch.duration_seconds,
                    ),
                )
                if snapshot is not None:
                    sql, params = _upsert_snapshot_sql(snapshot)
                    cur.execute(sql, params)
        except IntegrityError as e:
            # uq_punch(email, work_date, kind) is the duplicate guard.
            if is_duplicate_key(e):
                return False
            raise
        return True

    def get_snapshot(self, email: str, work_date: date) -> Optional[AttendanceSnapshot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {', '.join(SNAPSHOT_COLUMNS)} FROM attendance_snapshots WHERE email=%s AND work_date=%s",
                (email, work_date),
            )
            r = fetchone(cur)
            return _to_snapshot(r) if r else None

    def list_snapshots(
        self,
        *,
        work_date: Optional[date] = None,
        month: Optional[str] = None,
        year: Optional[int] = None,
        email: Optional[str] = None,
    ) -> Sequence[AttendanceSnapshot]:
        clauses = []
        params: list = []
        if work_date:
            clauses.append("work_date=%s")
            params.append(work_date)
        if month:
            clauses.append("month=%s")
            params.append(month)
        if year:
            clauses.append("year=%s")
            params.append(int(year))
        if email:
            clauses.append("email=%s")
            params.append(email)

        sql = f"SELECT {', '.join(SNAPSHOT_COLUMNS)} FROM attendance_snapshots"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY work_date DESC, email"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_snapshot(r) for r in fetchall(cur)]
