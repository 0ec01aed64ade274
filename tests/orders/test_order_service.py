from __future__ import annotations

from dataclasses import replace
from typing import Optional

import pytest

from src.hr_management.hr_management.clients.model import Client, OrderHistoryEntry
from src.hr_management.hr_management.clients.service import ClientService
from src.hr_management.hr_management.core.enums import OrderStatus
from src.hr_management.hr_management.core.exceptions import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.hr_management.hr_management.orders.model import LocalOrder
from src.hr_management.hr_management.orders.service import OrderService


class InMemoryClients:
    def __init__(self):
        self.clients: dict[str, Client] = {}

    def get(self, client_id: str, *, with_history: bool = False) -> Optional[Client]:
        return self.clients.get(client_id)

    def create(self, *, client_id: str, client_name=None, country=None, source=None) -> bool:
        if client_id in self.clients:
            return False
        self.clients[client_id] = Client(client_id=client_id, client_name=client_name, country=country, source=source)
        return True

    def list(self):
        return list(self.clients.values())

    def append_order_history(self, client_id: str, *, order_id: int, order_name: str, amount: float) -> None:
        client = self.clients[client_id]
        entry = OrderHistoryEntry(order_id=order_id, order_name=order_name, amount=amount)
        self.clients[client_id] = replace(client, order_history=client.order_history + (entry,))


class InMemoryOrders:
    def __init__(self):
        self.orders: dict[int, LocalOrder] = {}
        self._id = 0

    def create(self, *, client_id, order_name, order_qty, order_price, deadline, instructions, created_by) -> int:
        self._id += 1
        self.orders[self._id] = LocalOrder(
            order_id=self._id,
            client_id=client_id,
            order_name=order_name,
            order_qty=order_qty,
            order_price=order_price,
            deadline=deadline,
            order_status=OrderStatus.PENDING,
            is_locked=False,
            instructions=instructions,
            created_by=created_by,
        )
        return self._id

    def get(self, order_id: int) -> Optional[LocalOrder]:
        return self.orders.get(int(order_id))

    def update_status_if_unlocked(self, order_id: int, status: OrderStatus, *, lock: bool) -> bool:
        order = self.orders.get(order_id)
        if not order or order.is_locked:
            return False
        self.orders[order_id] = replace(order, order_status=status, is_locked=lock)
        return True

    def reopen(self, order_id: int, *, deadline: Optional[str] = None) -> None:
        order = self.orders[order_id]
        self.orders[order_id] = replace(
            order, order_status=OrderStatus.PENDING, is_locked=False, deadline=deadline or order.deadline
        )

    def list(self, *, status=None, client_id=None):
        return [
            o
            for o in self.orders.values()
            if (status is None or o.order_status == status) and (client_id is None or o.client_id == client_id)
        ]


@pytest.fixture()
def stores():
    clients = InMemoryClients()
    clients.create(client_id="C-100", client_name="Acme")
    return clients, InMemoryOrders()


def _new_order(svc: OrderService) -> LocalOrder:
    return svc.create_order(client_id="C-100", order_name=" Photo retouch ", order_qty=10, order_price="2.5", deadline="2025-08-10")


def test_create_order_starts_pending_and_records_client_history(stores):
    clients, orders = stores
    svc = OrderService(orders, clients)

    order = _new_order(svc)

    assert order.order_status == OrderStatus.PENDING
    assert not order.is_locked
    assert order.order_name == "Photo retouch"
    history = clients.clients["C-100"].order_history
    assert history[0].order_id == order.order_id
    assert history[0].amount == pytest.approx(25.0)


def test_create_order_for_unknown_client_is_not_found(stores):
    _, orders = stores
    svc = OrderService(orders, InMemoryClients())
    with pytest.raises(NotFoundError):
        _new_order(svc)
    assert orders.orders == {}


def test_create_order_validates_quantity(stores):
    svc = OrderService(stores[1], stores[0])
    with pytest.raises(ValidationError):
        svc.create_order(client_id="C-100", order_name="x", order_qty="many", order_price=1)


@pytest.mark.parametrize("terminal", ["Completed", "Cancel"])
def test_terminal_status_locks_order(stores, terminal):
    clients, orders = stores
    svc = OrderService(orders, clients)
    order = _new_order(svc)

    svc.change_status(order.order_id, "In-progress")
    locked = svc.change_status(order.order_id, terminal)

    assert locked.is_locked
    assert orders.get(order.order_id).is_locked
    assert orders.get(order.order_id).order_status == OrderStatus(terminal)


@pytest.mark.parametrize("terminal", ["Completed", "Cancel"])
@pytest.mark.parametrize("target", list(OrderStatus))
def test_locked_order_rejects_every_status(stores, terminal, target):
    clients, orders = stores
    svc = OrderService(orders, clients)
    order = _new_order(svc)
    svc.change_status(order.order_id, terminal)

    with pytest.raises(BusinessRuleError, match="locked"):
        svc.change_status(order.order_id, target.value)

    stored = orders.get(order.order_id)
    assert stored.order_status == OrderStatus(terminal)
    assert stored.is_locked


def test_extend_deadline_unlocks_and_resets_to_pending(stores):
    clients, orders = stores
    svc = OrderService(orders, clients)
    order = _new_order(svc)
    svc.change_status(order.order_id, "Completed")

    reopened = svc.extend_deadline(order.order_id, "2025-09-01")

    assert reopened.order_status == OrderStatus.PENDING
    assert not orders.get(order.order_id).is_locked
    assert orders.get(order.order_id).deadline == "2025-09-01"
    assert svc.change_status(order.order_id, "Hold").order_status == OrderStatus.HOLD


def test_restore_unlocks_cancelled_order(stores):
    clients, orders = stores
    svc = OrderService(orders, clients)
    order = _new_order(svc)
    svc.change_status(order.order_id, "Cancel")

    svc.restore(order.order_id)

    stored = orders.get(order.order_id)
    assert stored.order_status == OrderStatus.PENDING
    assert not stored.is_locked
    assert stored.deadline == "2025-08-10"


def test_any_unlocked_status_change_is_allowed(stores):
    clients, orders = stores
    svc = OrderService(orders, clients)
    order = _new_order(svc)
    for status in ["Ready to Upload", "Pending", "Delivered", "Ready to QC"]:
        assert svc.change_status(order.order_id, status).order_status.value == status


def test_unknown_status_is_rejected(stores):
    svc = OrderService(stores[1], stores[0])
    order = _new_order(svc)
    with pytest.raises(ValidationError):
        svc.change_status(order.order_id, "Shipped")


def test_lock_taken_concurrently_is_reported(stores):
    clients, orders = stores
    svc = OrderService(orders, clients)
    order = _new_order(svc)
    orders.update_status_if_unlocked = lambda *args, **kwargs: False

    with pytest.raises(BusinessRuleError):
        svc.change_status(order.order_id, "Completed")


def test_list_orders_filters(stores):
    clients, orders = stores
    svc = OrderService(orders, clients)
    a = _new_order(svc)
    _new_order(svc)
    svc.change_status(a.order_id, "Hold")

    assert [o.order_id for o in svc.list_orders(status="Hold")] == [a.order_id]
    assert len(svc.list_orders(client_id="C-100")) == 2


def test_client_service_rejects_duplicates_and_missing():
    svc = ClientService(InMemoryClients())
    svc.create_client(client_id=" C-1 ", client_name="One")

    with pytest.raises(ConflictError):
        svc.create_client(client_id="C-1")
    with pytest.raises(NotFoundError):
        svc.get_client("C-2")
    assert svc.get_client("C-1").client_name == "One"
