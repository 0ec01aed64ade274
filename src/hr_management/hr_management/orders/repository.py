from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import OrderStatus
from .model import LocalOrder


class OrderRepository(Protocol):
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
        raise NotImplementedError

    def get(self, order_id: int) -> Optional[LocalOrder]:
        raise NotImplementedError

    def update_status_if_unlocked(self, order_id: int, status: OrderStatus, *, lock: bool) -> bool:
        """Set status (and lock) only while the order is unlocked; False when it is locked."""
        raise NotImplementedError

    def reopen(self, order_id: int, *, deadline: Optional[str] = None) -> None:
        """Clear the lock and reset to Pending, optionally moving the deadline."""
        raise NotImplementedError

    def list(self, *, status: Optional[OrderStatus] = None, client_id: Optional[str] = None) -> Sequence[LocalOrder]:
        raise NotImplementedError
