from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.shift_service

    @app.route("/shifts/assign", methods=["POST"], endpoint="assign_shift")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def assign_shift():
        data = json_body()
        assignment = service.assign(
            email=data.get("email"),
            shift_name=data.get("shiftName"),
            entry_time=data.get("entryTime"),
        )
        return ok(f"{assignment.email} assigned to {assignment.shift_name}", data=assignment)

    @app.route("/shifts/ot-list", methods=["POST"], endpoint="enroll_ot")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def enroll_ot():
        data = json_body()
        ticket = service.enroll_ot(email=data.get("email"), entry_time=data.get("entryTime"))
        return ok(f"{ticket.email} added to OT list", data=ticket)

    @app.route("/shifts", methods=["GET"], endpoint="list_shift_assignments")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def list_shift_assignments():
        self_match(request.args.get("userEmail"))
        return ok(data=service.list_assignments())

    @app.route("/shifts/me", methods=["GET"], endpoint="my_shift")
    @guards.token_required
    def my_shift():
        email = self_match(request.args.get("userEmail"))
        return ok(data=service.get_assignment(email), ot=service.get_ot_ticket(email))

    @app.route("/shifts/<path:assignment_key>", methods=["DELETE"], endpoint="remove_shift_assignment")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def remove_shift_assignment(assignment_key: str):
        service.remove_assignment(assignment_key)
        return ok("Shift assignment removed")

    @app.route("/shifts/new-shift", methods=["POST"], endpoint="create_working_shift")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def create_working_shift():
        data = json_body()
        shift_id = service.create_working_shift(
            shift_name=data.get("shiftName"),
            branch=data.get("branch"),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            late_after_minutes=data.get("lateAfterMinutes", 5),
            absent_after_minutes=data.get("absentAfterMinutes", 60),
            allow_ot=data.get("allowOT", True),
            created_by=g.user_email,
        )
        return ok("Shift created successfully", status=201, shift_id=shift_id)

    @app.route("/shifts/working-shifts", methods=["GET"], endpoint="list_working_shifts")
    @guards.token_required
    def list_working_shifts():
        return ok(data=service.list_working_shifts(branch=request.args.get("branch")))
