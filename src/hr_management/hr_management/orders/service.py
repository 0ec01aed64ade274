from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..clients.repository import ClientRepository
from ..common.validators import require_amount, require_fields, require_non_empty
from ..core.enums import LOCKING_ORDER_STATUSES, OrderStatus
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from .model import LocalOrder
from .repository import OrderRepository

logger = logging.getLogger(__name__)

ORDER_LOCKED = "Order is locked. Extend the deadline or restore it first."


def parse_order_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"Unknown order status: {value}")


class OrderService:
    """Local orders: any unlocked order may move to any status.

    ``Completed`` and ``Cancel`` lock the order; only ``extend_deadline`` and
    ``restore`` reopen it (status back to Pending).
    """

    def __init__(self, orders: OrderRepository, clients: ClientRepository):
        self._orders = orders
        self._clients = clients

    def create_order(
        self,
        *,
        client_id: str,
        order_name: str,
        order_qty,
        order_price,
        deadline: Optional[str] = None,
        instructions: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> LocalOrder:
        require_fields(
            {"clientId": client_id, "orderName": order_name, "orderQTY": order_qty, "orderPrice": order_price},
            "clientId",
            "orderName",
            "orderQTY",
            "orderPrice",
        )
        try:
            qty = int(order_qty)
        except (TypeError, ValueError):
            raise ValidationError("orderQTY must be a whole number")
        price = require_amount(order_price, "orderPrice", allow_zero=True)

        if not self._clients.get(client_id):
            raise NotFoundError("Client not found")

        order_id = self._orders.create(
            client_id=client_id,
            order_name=order_name.strip(),
            order_qty=qty,
            order_price=price,
            deadline=deadline,
            instructions=instructions,
            created_by=created_by,
        )
        self._clients.append_order_history(client_id, order_id=order_id, order_name=order_name.strip(), amount=qty * price)
        logger.info("Order #%s created for client %s", order_id, client_id)
        return LocalOrder(
            order_id=order_id,
            client_id=client_id,
            order_name=order_name.strip(),
            order_qty=qty,
            order_price=price,
            deadline=deadline,
            order_status=OrderStatus.PENDING,
            is_locked=False,
            instructions=instructions,
            created_by=created_by,
        )

    def get_order(self, order_id: int) -> LocalOrder:
        order = self._orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def change_status(self, order_id: int, status) -> LocalOrder:
        target = parse_order_status(status)
        order = self.get_order(order_id)
        if order.is_locked:
            raise BusinessRuleError(ORDER_LOCKED)

        lock = target in LOCKING_ORDER_STATUSES
        if not self._orders.update_status_if_unlocked(order_id, target, lock=lock):
            raise BusinessRuleError(ORDER_LOCKED)
        if lock:
            logger.info("Order #%s locked on %s", order_id, target.value)
        return replace(order, order_status=target, is_locked=lock)

    def extend_deadline(self, order_id: int, new_deadline: str) -> LocalOrder:
        new_deadline = require_non_empty(new_deadline, "newDeadline")
        order = self.get_order(order_id)
        self._orders.reopen(order_id, deadline=new_deadline)
        logger.info("Order #%s deadline extended to %s; unlocked", order_id, new_deadline)
        return replace(order, deadline=new_deadline, order_status=OrderStatus.PENDING, is_locked=False)

    def restore(self, order_id: int) -> LocalOrder:
        order = self.get_order(order_id)
        self._orders.reopen(order_id)
        logger.info("Order #%s restored; unlocked", order_id)
        return replace(order, order_status=OrderStatus.PENDING, is_locked=False)

    def list_orders(self, *, status=None, client_id: Optional[str] = None) -> Sequence[LocalOrder]:
        return self._orders.list(status=parse_order_status(status) if status else None, client_id=client_id or None)
