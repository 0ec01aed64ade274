from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import ConflictError, NotFoundError
from .model import Client
from .repository import ClientRepository

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self, clients: ClientRepository):
        self._clients = clients

    def create_client(
        self,
        *,
        client_id: str,
        client_name: Optional[str] = None,
        country: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Client:
        client_id = require_non_empty(client_id, "clientId")
        if not self._clients.create(client_id=client_id, client_name=client_name, country=country, source=source):
            raise ConflictError("Client already exists")
        logger.info("Client %s created", client_id)
        return Client(client_id=client_id, client_name=client_name, country=country, source=source)

    def get_client(self, client_id: str) -> Client:
        client = self._clients.get(client_id, with_history=True)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def list_clients(self) -> Sequence[Client]:
        return self._clients.list()
