from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional, Sequence

from ..core.constants import MAIN_BALANCE
from ..core.enums import EarningStatus, TransactionType
from ..core.exceptions import BusinessRuleError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BucketDelta, Earning, Expense, LedgerPosting, LedgerTransaction, MonthlyProfit, ProfitShare
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

EXPENSE_COLUMNS = (
    "user_name",
    "expense_date",
    "expense_name",
    "expense_category",
    "expense_amount",
    "expense_status",
    "expense_note",
)
EARNING_COLUMNS = (
    "client_id",
    "month",
    "year",
    "usd_amount",
    "charge",
    "receivable",
    "rate",
    "converted_bdt",
    "status",
    "note",
)

INSUFFICIENT_BALANCE = "Insufficient balance"


def _f(value) -> float:
    return float(value or 0)


def _to_expense(r: dict) -> Expense:
    return Expense(
        expense_id=int(r["expense_id"]),
        user_name=r.get("user_name"),
        expense_date=r["expense_date"],
        expense_name=r["expense_name"],
        expense_category=r.get("expense_category"),
        expense_amount=_f(r["expense_amount"]),
        expense_status=r.get("expense_status"),
        expense_note=r.get("expense_note"),
        created_at=r.get("created_at"),
    )


def _to_earning(r: dict) -> Earning:
    return Earning(
        earning_id=int(r["earning_id"]),
        client_id=r["client_id"],
        month=r["month"],
        year=int(r["year"]),
        usd_amount=_f(r["usd_amount"]),
        charge=_f(r["charge"]),
        receivable=_f(r["receivable"]),
        rate=_f(r["rate"]),
        converted_bdt=_f(r["converted_bdt"]),
        status=EarningStatus(r["status"]),
        note=r.get("note"),
        created_at=r.get("created_at"),
    )


def _to_profit(r: dict, shares: Sequence[ProfitShare] = ()) -> MonthlyProfit:
    return MonthlyProfit(
        month=r["month"],
        year=int(r["year"]),
        earnings=_f(r["earnings"]),
        expense=_f(r["expense"]),
        profit=_f(r["profit"]),
        remaining=_f(r["remaining"]),
        shared=tuple(shares),
    )


def _checked(fields: dict, allowed: tuple) -> dict:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown columns: {sorted(unknown)}")
    return {k: (v.value if isinstance(v, EarningStatus) else v) for k, v in fields.items()}


class MySQLLedgerRepository(LedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # ------------------------------------------------------------------ posting

    def _lock_main(self, cur) -> float:
        cur.execute("SELECT total FROM balances WHERE name=%s FOR UPDATE", (MAIN_BALANCE,))
        row = fetchone(cur)
        return _f(row["total"] if row else 0)

    def _apply_bucket(self, cur, b: BucketDelta, main: float) -> None:
        cur.execute(
            "SELECT month FROM monthly_profits WHERE month=%s AND year=%s FOR UPDATE",
            (b.month, b.year),
        )
        if fetchone(cur) is None and main < b.amount:
            logger.warning(
                "Profit bucket %s %s not opened: main balance %.2f does not cover %.2f",
                b.month, b.year, main, b.amount,
            )
            return
        cur.execute(
            """
            INSERT INTO monthly_profits(month, year, earnings, expense, profit, remaining)
            VALUES(%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                earnings  = earnings  + VALUES(earnings),
                expense   = expense   + VALUES(expense),
                profit    = profit    + VALUES(profit),
                remaining = remaining + VALUES(remaining)
            """,
            (b.month, b.year, b.earnings, b.expense, b.profit, b.profit),
        )

    def _apply(self, cur, posting: LedgerPosting) -> None:
        main = 0.0
        if posting.main_floor is not None or posting.buckets:
            main = self._lock_main(cur)
            if posting.main_floor is not None and main < posting.main_floor:
                raise BusinessRuleError(INSUFFICIENT_BALANCE)

        for name, delta in posting.balances.items():
            cur.execute(
                """
                INSERT INTO balances(name, total) VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE total = total + VALUES(total)
                """,
                (name, delta),
            )

        for b in posting.buckets:
            self._apply_bucket(cur, b, main)

        for (month, year), delta in posting.unpaid.items():
            cur.execute(
                """
                INSERT INTO unpaid_earnings(month, year, total_converted_bdt) VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE total_converted_bdt = total_converted_bdt + VALUES(total_converted_bdt)
                """,
                (month, year, delta),
            )

        for e in posting.entries:
            cur.execute(
                """
                INSERT INTO ledger_transactions(account, type, amount, note, reference)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (e.account, e.type.value, e.amount, e.note, e.reference),
            )

        p = posting.client_payment
        if p is not None:
            cur.execute(
                """
                INSERT INTO client_payment_history(client_id, earning_id, month, year, amount)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (p.client_id, p.earning_id, p.month, p.year, p.amount),
            )

    def apply(self, posting: LedgerPosting) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._apply(cur, posting)

    def get_balances(self) -> Dict[str, float]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT name, total FROM balances")
            return {r["name"]: _f(r["total"]) for r in fetchall(cur)}

    # ------------------------------------------------------------------ expenses

    def create_expense(self, fields: dict, posting: LedgerPosting) -> int:
        values = _checked(fields, EXPENSE_COLUMNS)
        columns = list(values)
        with db_cursor(self._conn_factory) as (_, cur):
            self._apply(cur, posting)
            cur.execute(
                f"INSERT INTO expenses({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                tuple(values[c] for c in columns),
            )
            expense_id = int(cur.lastrowid)
            if values.get("expense_category"):
                cur.execute(
                    "INSERT IGNORE INTO expense_categories(category) VALUES(%s)",
                    (values["expense_category"],),
                )
            return expense_id

    def update_expense(
        self, expense_id: int, fields: dict, build_posting: Callable[[Expense], LedgerPosting]
    ) -> Expense:
        values = _checked(fields, EXPENSE_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM expenses WHERE expense_id=%s FOR UPDATE", (int(expense_id),))
            r = fetchone(cur)
            if not r:
                raise NotFoundError("Expense not found")
            old = _to_expense(r)
            self._apply(cur, build_posting(old))
            if values:
                assignments = ", ".join(f"{c}=%s" for c in values)
                cur.execute(
                    f"UPDATE expenses SET {assignments} WHERE expense_id=%s",
                    (*values.values(), int(expense_id)),
                )
            if values.get("expense_category"):
                cur.execute(
                    "INSERT IGNORE INTO expense_categories(category) VALUES(%s)",
                    (values["expense_category"],),
                )
            return old

    def list_expenses(self) -> Sequence[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM expenses ORDER BY expense_date DESC, expense_id DESC")
            return [_to_expense(r) for r in fetchall(cur)]

    def list_categories(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT category FROM expense_categories ORDER BY category")
            return [r["category"] for r in fetchall(cur)]

    # ------------------------------------------------------------------ earnings

    def create_earning(self, fields: dict, posting: LedgerPosting) -> int:
        values = _checked(fields, EARNING_COLUMNS)
        columns = list(values)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO earnings({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                tuple(values[c] for c in columns),
            )
            earning_id = int(cur.lastrowid)
            if posting.client_payment is not None:
                posting.client_payment = replace(posting.client_payment, earning_id=earning_id)
            self._apply(cur, posting)
            return earning_id

    def update_earning(
        self, earning_id: int, fields: dict, build_posting: Callable[[Earning], LedgerPosting]
    ) -> Earning:
        values = _checked(fields, EARNING_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM earnings WHERE earning_id=%s FOR UPDATE", (int(earning_id),))
            r = fetchone(cur)
            if not r:
                raise NotFoundError("Earning not found")
            old = _to_earning(r)
            self._apply(cur, build_posting(old))
            if values:
                assignments = ", ".join(f"{c}=%s" for c in values)
                cur.execute(
                    f"UPDATE earnings SET {assignments} WHERE earning_id=%s",
                    (*values.values(), int(earning_id)),
                )
            return old

    def list_earnings(
        self, *, month: Optional[str] = None, year: Optional[int] = None, client_id: Optional[str] = None
    ) -> Sequence[Earning]:
        clauses, params = [], []
        for column, value in (("month", month), ("year", year), ("client_id", client_id)):
            if value:
                clauses.append(f"{column}=%s")
                params.append(value)
        sql = "SELECT * FROM earnings"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY year DESC, earning_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_earning(r) for r in fetchall(cur)]

    # ------------------------------------------------------------------ buckets

    def _shares(self, cur, month: str, year: int) -> list[ProfitShare]:
        cur.execute(
            "SELECT name, amount, note, shared_at FROM profit_shares WHERE month=%s AND year=%s ORDER BY share_id",
            (month, year),
        )
        return [
            ProfitShare(name=r["name"], amount=_f(r["amount"]), note=r.get("note"), shared_at=r.get("shared_at"))
            for r in fetchall(cur)
        ]

    def get_monthly_profit(self, month: str, year: int) -> Optional[MonthlyProfit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM monthly_profits WHERE month=%s AND year=%s", (month, int(year)))
            r = fetchone(cur)
            if not r:
                return None
            return _to_profit(r, self._shares(cur, month, int(year)))

    def list_monthly_profits(self, *, year: Optional[int] = None) -> Sequence[MonthlyProfit]:
        sql = "SELECT * FROM monthly_profits"
        params: tuple = ()
        if year:
            sql += " WHERE year=%s"
            params = (int(year),)
        sql += " ORDER BY year DESC, month"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            rows = fetchall(cur)
            return [_to_profit(r, self._shares(cur, r["month"], int(r["year"]))) for r in rows]

    def apply_profit_shares(self, month: str, year: int, shares: Sequence[ProfitShare]) -> None:
        total = sum(s.amount for s in shares)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE monthly_profits SET remaining = remaining - %s WHERE month=%s AND year=%s AND remaining >= %s",
                (total, month, int(year), total),
            )
            if cur.rowcount == 0:
                raise BusinessRuleError("Not enough remaining profit to share")
            for s in shares:
                cur.execute(
                    "INSERT INTO profit_shares(month, year, name, amount, note) VALUES(%s,%s,%s,%s,%s)",
                    (month, int(year), s.name, s.amount, s.note),
                )

    def get_unpaid(self, month: str, year: int) -> float:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT total_converted_bdt FROM unpaid_earnings WHERE month=%s AND year=%s",
                (month, int(year)),
            )
            r = fetchone(cur)
            return _f(r["total_converted_bdt"]) if r else 0.0

    def list_transactions(self, *, limit: int) -> Sequence[LedgerTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT * FROM ledger_transactions ORDER BY txn_date DESC, transaction_id DESC LIMIT %s",
                (int(limit),),
            )
            return [
                LedgerTransaction(
                    transaction_id=int(r["transaction_id"]),
                    account=r["account"],
                    type=TransactionType(r["type"]),
                    amount=_f(r["amount"]),
                    note=r.get("note"),
                    reference=r.get("reference"),
                    txn_date=r.get("txn_date"),
                )
                for r in fetchall(cur)
            ]
