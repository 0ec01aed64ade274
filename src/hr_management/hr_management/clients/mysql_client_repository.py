from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Client, OrderHistoryEntry, PaymentHistoryEntry
from .repository import ClientRepository


def _to_client(r: dict, orders=(), payments=()) -> Client:
    return Client(
        client_id=r["client_id"],
        client_name=r.get("client_name"),
        country=r.get("country"),
        source=r.get("source"),
        created_at=r.get("created_at"),
        order_history=tuple(orders),
        payment_history=tuple(payments),
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, client_id: str, *, with_history: bool = False) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM clients WHERE client_id=%s", (client_id,))
            r = fetchone(cur)
            if not r:
                return None
            if not with_history:
                return _to_client(r)

            cur.execute(
                """
                SELECT order_id, order_name, amount, recorded_at
                FROM client_order_history WHERE client_id=%s ORDER BY history_id
                """,
                (client_id,),
            )
            orders = [
                OrderHistoryEntry(
                    order_id=int(o["order_id"]),
                    order_name=o["order_name"],
                    amount=float(o["amount"] or 0),
                    recorded_at=o.get("recorded_at"),
                )
                for o in fetchall(cur)
            ]
            cur.execute(
                """
                SELECT earning_id, month, year, amount, recorded_at
                FROM client_payment_history WHERE client_id=%s ORDER BY payment_id
                """,
                (client_id,),
            )
            payments = [
                PaymentHistoryEntry(
                    month=p["month"],
                    year=int(p["year"]),
                    amount=float(p["amount"] or 0),
                    earning_id=p.get("earning_id"),
                    recorded_at=p.get("recorded_at"),
                )
                for p in fetchall(cur)
            ]
            return _to_client(r, orders, payments)

    def create(self, *, client_id: str, client_name: Optional[str], country: Optional[str], source: Optional[str]) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO clients(client_id, client_name, country, source) VALUES(%s,%s,%s,%s)",
                    (client_id, client_name, country, source),
                )
        except IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise
        return True

    def list(self) -> Sequence[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM clients ORDER BY created_at DESC, client_id")
            return [_to_client(r) for r in fetchall(cur)]

    def append_order_history(self, client_id: str, *, order_id: int, order_name: str, amount: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO client_order_history(client_id, order_id, order_name, amount)
                VALUES(%s,%s,%s,%s)
                """,
                (client_id, int(order_id), order_name, amount),
            )
