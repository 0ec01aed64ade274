from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES, CheckInVerdict
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container


def _optional_ms(data: dict, key: str):
    value = data.get(key)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be epoch milliseconds")


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.attendance_service

    def _own_email(data: dict) -> str:
        email = (data.get("email") or g.user_email).strip().lower()
        if email != g.user_email:
            raise AuthorizationError("You can only punch for yourself")
        return email

    @app.route("/attendance/check-in", methods=["POST"], endpoint="check_in")
    @guards.token_required
    def check_in():
        data = json_body()
        decision = service.check_in(_own_email(data), check_in_time_ms=_optional_ms(data, "checkInTime"))
        if decision.verdict == CheckInVerdict.LATE:
            return ok(f"Checked in late by {decision.late_by}", lateCheckIn=decision.late_by)
        return ok("Checked in successfully", lateCheckIn=None)

    @app.route("/attendance/check-out", methods=["POST"], endpoint="check_out")
    @guards.token_required
    def check_out():
        data = json_body()
        punch = service.check_out(_own_email(data), check_out_time_ms=_optional_ms(data, "checkOutTime"))
        return ok("Checked out successfully", workingHours=punch.duration, workingSeconds=punch.duration_seconds)

    @app.route("/attendance/ot-start", methods=["POST"], endpoint="start_overtime")
    @guards.token_required
    def start_overtime():
        data = json_body()
        service.start_overtime(_own_email(data), start_time_ms=_optional_ms(data, "startTime"))
        return ok("Overtime started")

    @app.route("/attendance/ot-stop", methods=["POST"], endpoint="stop_overtime")
    @guards.token_required
    def stop_overtime():
        data = json_body()
        punch = service.stop_overtime(_own_email(data), stop_time_ms=_optional_ms(data, "stopTime"))
        return ok("Overtime stopped", otHours=punch.duration, otSeconds=punch.duration_seconds)

    @app.route("/attendance/today", methods=["GET"], endpoint="attendance_today")
    @guards.token_required
    def attendance_today():
        email = self_match(request.args.get("userEmail"))
        return ok(data=service.get_today_status(email))

    @app.route("/attendance", methods=["GET"], endpoint="list_attendance")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def list_attendance():
        self_match(request.args.get("userEmail"))
        raw_date = request.args.get("date")
        rows = service.list_snapshots(
            work_date=parse_iso_date(raw_date) if raw_date else None,
            month=request.args.get("month"),
            year=request.args.get("year"),
            email=request.args.get("email"),
        )
        return ok(data=rows)
