from __future__ import annotations

from datetime import date
from typing import Optional, Sequence, Tuple

from ..core.constants import LOAN_BALANCE
from ..core.enums import LoanType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Loan, LoanBalance, LoanPerson, LoanStats
from .repository import LoanRepository

LOAN_COLUMNS = ("name", "phone", "address", "amount", "type", "loan_date")


def _to_loan(r: dict) -> Loan:
    return Loan(
        loan_id=int(r["loan_id"]),
        name=r["name"],
        phone=r["phone"],
        address=r.get("address") or "",
        amount=float(r["amount"]),
        type=LoanType(r["type"]),
        loan_date=r["loan_date"],
        created_at=r.get("created_at"),
    )


def _filter(search: Optional[str], on_date: Optional[date]) -> Tuple[str, list]:
    clauses, params = [], []
    if search:
        like = f"%{search}%"
        clauses.append("(name LIKE %s OR phone LIKE %s OR type LIKE %s)")
        params.extend([like, like, like])
    if on_date:
        clauses.append("DATE(loan_date)=%s")
        params.append(on_date)
    return (" WHERE " + " AND ".join(clauses)) if clauses else "", params


def _move_balance(cur, delta: float) -> None:
    cur.execute(
        """
        INSERT INTO balances(name, total) VALUES(%s, %s)
        ON DUPLICATE KEY UPDATE total = total + VALUES(total)
        """,
        (LOAN_BALANCE, delta),
    )


class MySQLLoanRepository(LoanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def person_exists(self, *, name: str, phone: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 FROM loan_persons WHERE phone=%s OR name=%s LIMIT 1", (phone, name))
            return fetchone(cur) is not None

    def create_person(self, *, name: str, phone: str, address: str, description: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO loan_persons(name, phone, address, description) VALUES(%s,%s,%s,%s)",
                (name, phone, address, description),
            )
            return int(cur.lastrowid)

    def search_persons(self, query: str, *, limit: int = 10) -> Sequence[LoanPerson]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT person_id, name, phone, address, description, created_at
                FROM loan_persons
                WHERE phone=%s OR LOWER(name) LIKE LOWER(%s)
                ORDER BY created_at DESC, person_id DESC
                LIMIT %s
                """,
                (query, f"%{query}%", int(limit)),
            )
            return [LoanPerson(**r) for r in fetchall(cur)]

    def create_loan(self, fields: dict, *, balance_delta: float) -> int:
        columns = [c for c in LOAN_COLUMNS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO loans({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                tuple(fields[c].value if isinstance(fields[c], LoanType) else fields[c] for c in columns),
            )
            loan_id = int(cur.lastrowid)
            _move_balance(cur, balance_delta)
            return loan_id

    def get_loan(self, loan_id: int) -> Optional[Loan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM loans WHERE loan_id=%s", (int(loan_id),))
            r = fetchone(cur)
            return _to_loan(r) if r else None

    def update_loan(self, loan_id: int, fields: dict, *, balance_delta: float) -> None:
        columns = [c for c in LOAN_COLUMNS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            if columns:
                cur.execute(
                    f"UPDATE loans SET {', '.join(f'{c}=%s' for c in columns)} WHERE loan_id=%s",
                    (
                        *(fields[c].value if isinstance(fields[c], LoanType) else fields[c] for c in columns),
                        int(loan_id),
                    ),
                )
            if balance_delta:
                _move_balance(cur, balance_delta)

    def delete_loan(self, loan_id: int, *, balance_delta: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM loans WHERE loan_id=%s", (int(loan_id),))
            _move_balance(cur, balance_delta)

    def list_loans(
        self, *, search: Optional[str], on_date: Optional[date], offset: int, limit: int
    ) -> Tuple[Sequence[Loan], int]:
        where, params = _filter(search, on_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT * FROM loans{where} ORDER BY created_at DESC, loan_id DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            items = [_to_loan(r) for r in fetchall(cur)]
            cur.execute(f"SELECT COUNT(*) AS n FROM loans{where}", tuple(params))
            total = int(fetchone(cur)["n"])
            return items, total

    def loan_stats(self, *, search: Optional[str] = None, on_date: Optional[date] = None) -> LoanStats:
        where, params = _filter(search, on_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    COALESCE(SUM(CASE WHEN type='borrow' THEN amount ELSE 0 END), 0) AS borrowed,
                    COALESCE(SUM(CASE WHEN type='return' THEN amount ELSE 0 END), 0) AS returned
                FROM loans{where}
                """,
                tuple(params),
            )
            r = fetchone(cur) or {}
            return LoanStats(borrowed=float(r.get("borrowed") or 0), returned=float(r.get("returned") or 0))

    def get_loan_balance(self) -> Optional[LoanBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT total, created_at, updated_at FROM balances WHERE name=%s", (LOAN_BALANCE,))
            r = fetchone(cur)
            if not r:
                return None
            return LoanBalance(total=float(r["total"]), created_at=r.get("created_at"), updated_at=r.get("updated_at"))
