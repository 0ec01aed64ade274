from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import OrderStatus


@dataclass(frozen=True)
class LocalOrder:
    order_id: int
    client_id: str
    order_name: str
    order_qty: int
    order_price: float
    deadline: Optional[str]
    order_status: OrderStatus
    is_locked: bool
    instructions: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def amount(self) -> float:
        return self.order_qty * self.order_price
