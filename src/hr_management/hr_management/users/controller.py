from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.auth import Guards, bearer_token, self_match
from ..common.http import json_body, ok
from ..core.exceptions import AuthenticationError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)

    @app.route("/jwt", methods=["POST"], endpoint="issue_token")
    def issue_token():
        email = (json_body().get("email") or "").strip().lower()
        if not email:
            raise ValidationError("Email is required")
        return ok(token=container.token_service.issue(email))

    @app.route("/validate-token", methods=["POST"], endpoint="validate_token")
    def validate_token():
        token = bearer_token()
        if not token:
            return jsonify({"success": False, "message": "Forbidden access"}), 400
        try:
            payload = container.token_service.decode(token)
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        return ok(user=payload)

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        response, status = ok("Logged out successfully")
        response.delete_cookie("token")
        return response, status

    @app.route("/users/role", methods=["GET"], endpoint="get_user_role")
    @guards.token_required
    def get_user_role():
        self_match(request.args.get("userEmail"))
        role = container.user_service.get_role(g.user_email)
        return ok(role=role.value if role else None)
