from __future__ import annotations

from flask import Flask, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.client_service

    @app.route("/clients", methods=["POST"], endpoint="create_client")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def create_client():
        data = json_body()
        client = service.create_client(
            client_id=data.get("clientId"),
            client_name=data.get("clientName"),
            country=data.get("country"),
            source=data.get("source"),
        )
        return ok("Client created", status=201, data=client)

    @app.route("/clients", methods=["GET"], endpoint="list_clients")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def list_clients():
        self_match(request.args.get("userEmail"))
        return ok(data=service.list_clients())

    @app.route("/clients/<client_id>", methods=["GET"], endpoint="get_client")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def get_client(client_id: str):
        return ok(data=service.get_client(client_id))
