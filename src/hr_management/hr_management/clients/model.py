from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class OrderHistoryEntry:
    order_id: int
    order_name: str
    amount: float
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentHistoryEntry:
    month: str
    year: int
    amount: float
    earning_id: Optional[int] = None
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class Client:
    client_id: str
    client_name: Optional[str] = None
    country: Optional[str] = None
    source: Optional[str] = None
    created_at: Optional[datetime] = None
    order_history: Tuple[OrderHistoryEntry, ...] = ()
    payment_history: Tuple[PaymentHistoryEntry, ...] = ()
