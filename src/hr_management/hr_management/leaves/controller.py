from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.leave_service

    @app.route("/leaves", methods=["POST"], endpoint="apply_leave")
    @guards.token_required
    def apply_leave():
        data = json_body()
        leave_id = service.apply(
            email=g.user_email,
            leave_type=data.get("leaveType"),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            reason=data.get("reason"),
        )
        return ok("Leave application submitted", status=201, leave_id=leave_id)

    @app.route("/leaves/<int:leave_id>/approve", methods=["PATCH"], endpoint="approve_leave")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def approve_leave(leave_id: int):
        service.approve(leave_id, decided_by=g.user_email)
        return ok("Leave approved")

    @app.route("/leaves/<int:leave_id>/decline", methods=["PATCH"], endpoint="decline_leave")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def decline_leave(leave_id: int):
        service.decline(leave_id, decided_by=g.user_email)
        return ok("Leave declined")

    @app.route("/leaves", methods=["GET"], endpoint="list_leaves")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def list_leaves():
        self_match(request.args.get("userEmail"))
        rows = service.list_applications(email=request.args.get("email"), status=request.args.get("status"))
        return ok(data=rows)

    @app.route("/leaves/me", methods=["GET"], endpoint="my_leaves")
    @guards.token_required
    def my_leaves():
        email = self_match(request.args.get("userEmail"))
        return ok(data=service.list_applications(email=email), balance=service.get_balance(email))
