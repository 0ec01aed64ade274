from __future__ import annotations

from flask import Flask, request

from ..common.auth import Guards
from ..common.http import ok
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from .iprn import fetch_otp_from_iprn


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)

    @app.route("/integrations/iprn-otp", methods=["GET"], endpoint="iprn_otp")
    @guards.roles_required(Role.ADMIN, Role.DEVELOPER)
    def iprn_otp():
        phone = require_non_empty(request.args.get("phone"), "phone")
        token = app.config.get("IPRN_TOKEN")
        if not token:
            raise ValidationError("IPRN_TOKEN is not configured")
        otp = fetch_otp_from_iprn(phone, token)
        if otp is None:
            raise NotFoundError(f"No OTP found for {phone}")
        return ok(otp=otp)
