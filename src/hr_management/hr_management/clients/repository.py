from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Client


class ClientRepository(Protocol):
    def get(self, client_id: str, *, with_history: bool = False) -> Optional[Client]:
        raise NotImplementedError

    def create(self, *, client_id: str, client_name: Optional[str], country: Optional[str], source: Optional[str]) -> bool:
        """False when the client id is already taken."""
        raise NotImplementedError

    def list(self) -> Sequence[Client]:
        raise NotImplementedError

    def append_order_history(self, client_id: str, *, order_id: int, order_name: str, amount: float) -> None:
        raise NotImplementedError
