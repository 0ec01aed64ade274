from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES
from ..core.exceptions import AuthorizationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.employee_service

    def _own_or_management(email: str) -> None:
        if (email or "").strip().lower() == g.user_email:
            return
        container.user_service.require_role(g.user_email, MANAGEMENT_ROLES)

    @app.route("/employees/add-employee", methods=["POST"], endpoint="add_employee")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def add_employee():
        data = json_body()
        ids = service.add_employee(
            email=data.get("email"),
            eid=data.get("eid"),
            salary=data.get("salary"),
            role=data.get("role"),
            branch=data.get("branch"),
        )
        return ok("Employee added and activation email sent.", status=201, **ids)

    @app.route("/employees/activate-user", methods=["POST"], endpoint="activate_user")
    @guards.token_required
    def activate_user():
        data = json_body()
        if (data.get("email") or "").strip().lower() != g.user_email:
            raise AuthorizationError("Token does not belong to this account")
        service.activate_user(email=data.get("email"), firebase_uid=data.get("firebaseUID"))
        return ok("User activated")

    @app.route("/employees/complete-profile", methods=["POST"], endpoint="complete_profile")
    @guards.token_required
    def complete_profile():
        data = json_body()
        email = data.pop("email", None)
        _own_or_management(email)
        service.complete_profile(email=email, profile=data)
        return ok("Profile completed successfully.")

    @app.route("/employees", methods=["GET"], endpoint="list_employees")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def list_employees():
        self_match(request.args.get("userEmail"))
        items = service.list_employees(status=request.args.get("status"))
        return ok(data=[e.to_public_dict() for e in items])

    @app.route("/employees/<email>", methods=["GET"], endpoint="get_employee")
    @guards.token_required
    def get_employee(email: str):
        _own_or_management(email)
        return ok(data=service.get_employee(email).to_public_dict())

    @app.route("/employees/<email>/status", methods=["PATCH"], endpoint="set_employee_status")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def set_employee_status(email: str):
        status = service.set_status(email=email, status=json_body().get("status"))
        return ok(f"Employee status changed to {status.value}")

    @app.route("/employees/salary-pin", methods=["POST"], endpoint="set_salary_pin")
    @guards.token_required
    def set_salary_pin():
        service.set_salary_pin(email=g.user_email, pin=json_body().get("pin"))
        return ok("Salary PIN saved")

    @app.route("/employees/salary-pin/verify", methods=["POST"], endpoint="verify_salary_pin")
    @guards.token_required
    def verify_salary_pin():
        valid = service.verify_salary_pin(email=g.user_email, pin=json_body().get("pin"))
        return ok(valid=valid)
