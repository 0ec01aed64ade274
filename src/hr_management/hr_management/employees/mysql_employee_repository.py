from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PROFILE_FIELDS, Employee
from .repository import EmployeeRepository

_COLUMNS = (
    "employee_id, email, eid, salary, role, branch, status, full_name, phone, designation, address, "
    "photo_url, dob, gender, blood_group, emergency_contact, firebase_uid, salary_pin_hash, created_at"
)


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        email=r["email"],
        eid=r["eid"],
        salary=float(r.get("salary") or 0),
        role=r["role"],
        branch=r.get("branch"),
        status=EmployeeStatus(r["status"]),
        full_name=r.get("full_name"),
        phone=r.get("phone"),
        designation=r.get("designation"),
        address=r.get("address"),
        photo_url=r.get("photo_url"),
        dob=r.get("dob"),
        gender=r.get("gender"),
        blood_group=r.get("blood_group"),
        emergency_contact=r.get("emergency_contact"),
        firebase_uid=r.get("firebase_uid"),
        salary_pin_hash=r.get("salary_pin_hash"),
        created_at=r.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email", email)

    def get_by_eid(self, eid: str) -> Optional[Employee]:
        return self._get_one("eid", eid)

    def create(
        self,
        *,
        email: str,
        eid: str,
        salary: float,
        role: str,
        branch: Optional[str],
        activation_token: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(email, eid, salary, role, branch, status, activation_token)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (email, eid, salary, role, branch, EmployeeStatus.PENDING.value, activation_token),
            )
            return int(cur.lastrowid)

    def activate(self, email: str, *, firebase_uid: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET firebase_uid=%s, status=%s WHERE email=%s",
                (firebase_uid, EmployeeStatus.ACTIVE.value, email),
            )
            return cur.rowcount > 0

    def update_profile(self, email: str, fields: dict) -> bool:
        fields = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        if not fields:
            return False
        assignments = ", ".join(f"{k}=%s" for k in fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET {assignments} WHERE email=%s",
                (*fields.values(), email),
            )
            return cur.rowcount > 0

    def set_status(self, email: str, status: EmployeeStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET status=%s WHERE email=%s", (status.value, email))
            return cur.rowcount > 0

    def set_salary_pin_hash(self, email: str, pin_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET salary_pin_hash=%s WHERE email=%s", (pin_hash, email))
            return cur.rowcount > 0

    def list(self, *, status: Optional[EmployeeStatus] = None) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY employee_id DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM employees WHERE status=%s ORDER BY employee_id DESC",
                    (status.value,),
                )
            return [_to_employee(r) for r in fetchall(cur)]

    def list_emails(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT email FROM employees WHERE status<>%s ORDER BY email",
                (EmployeeStatus.DEACTIVATED.value,),
            )
            return [r["email"] for r in fetchall(cur)]
