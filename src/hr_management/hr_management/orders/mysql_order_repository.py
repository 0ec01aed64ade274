from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import OrderStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LocalOrder
from .repository import OrderRepository


def _to_order(r: dict) -> LocalOrder:
    return LocalOrder(
        order_id=int(r["order_id"]),
        client_id=r["client_id"],
        order_name=r["order_name"],
        order_qty=int(r["order_qty"] or 0),
        order_price=float(r["order_price"] or 0),
        deadline=r.get("deadline"),
        order_status=OrderStatus(r["order_status"]),
        is_locked=bool(r["is_locked"]),
        instructions=r.get("instructions"),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLOrderRepository(OrderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        client_id: str,
        order_name: str,
        order_qty: int,
        order_price: float,
        deadline: Optional[str],
        instructions: Optional[str],
        created_by: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO local_orders(
                    client_id, order_name, order_qty, order_price, deadline,
                    instructions, created_by, order_status, is_locked
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    client_id,
                    order_name,
                    int(order_qty),
                    order_price,
                    deadline,
                    instructions,
                    created_by,
                    OrderStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get(self, order_id: int) -> Optional[LocalOrder]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM local_orders WHERE order_id=%s", (int(order_id),))
            r = fetchone(cur)
            return _to_order(r) if r else None

    def update_status_if_unlocked(self, order_id: int, status: OrderStatus, *, lock: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT is_locked FROM local_orders WHERE order_id=%s FOR UPDATE", (int(order_id),))
            r = fetchone(cur)
            if not r or r["is_locked"]:
                return False
            cur.execute(
                "UPDATE local_orders SET order_status=%s, is_locked=%s WHERE order_id=%s",
                (status.value, 1 if lock else 0, int(order_id)),
            )
            return True

    def reopen(self, order_id: int, *, deadline: Optional[str] = None) -> None:
        sql = "UPDATE local_orders SET order_status=%s, is_locked=0"
        params: list = [OrderStatus.PENDING.value]
        if deadline is not None:
            sql += ", deadline=%s"
            params.append(deadline)
        sql += " WHERE order_id=%s"
        params.append(int(order_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))

    def list(self, *, status: Optional[OrderStatus] = None, client_id: Optional[str] = None) -> Sequence[LocalOrder]:
        clauses, params = [], []
        if status:
            clauses.append("order_status=%s")
            params.append(status.value)
        if client_id:
            clauses.append("client_id=%s")
            params.append(client_id)
        sql = "SELECT * FROM local_orders"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC, order_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_order(r) for r in fetchall(cur)]
