from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES, Role
from ..container import Container

ORDER_ROLES = (*MANAGEMENT_ROLES, Role.TEAM_LEADER)


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.order_service

    @app.route("/orders", methods=["POST"], endpoint="create_order")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def create_order():
        data = json_body()
        order = service.create_order(
            client_id=data.get("clientId"),
            order_name=data.get("orderName"),
            order_qty=data.get("orderQTY"),
            order_price=data.get("orderPrice"),
            deadline=data.get("orderDeadline"),
            instructions=data.get("orderInstructions"),
            created_by=g.user_email,
        )
        return ok("Order created", status=201, data=order)

    @app.route("/orders", methods=["GET"], endpoint="list_orders")
    @guards.roles_required(*ORDER_ROLES)
    def list_orders():
        self_match(request.args.get("userEmail"))
        rows = service.list_orders(status=request.args.get("status"), client_id=request.args.get("clientId"))
        return ok(data=rows)

    @app.route("/orders/<int:order_id>", methods=["GET"], endpoint="get_order")
    @guards.roles_required(*ORDER_ROLES)
    def get_order(order_id: int):
        return ok(data=service.get_order(order_id))

    @app.route("/orders/<int:order_id>/status", methods=["PUT"], endpoint="change_order_status")
    @guards.roles_required(*ORDER_ROLES)
    def change_order_status(order_id: int):
        order = service.change_status(order_id, json_body().get("orderStatus"))
        return ok(f"Order status changed to {order.order_status.value}", data=order)

    @app.route("/orders/<int:order_id>/extend-deadline", methods=["PUT"], endpoint="extend_order_deadline")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def extend_order_deadline(order_id: int):
        order = service.extend_deadline(order_id, json_body().get("newDeadline"))
        return ok("Deadline extended", data=order)

    @app.route("/orders/<int:order_id>/restore", methods=["PUT"], endpoint="restore_order")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def restore_order(order_id: int):
        return ok("Order restored", data=service.restore(order_id))
