from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES
from ..container import Container

TRUTHY = {"1", "true", "yes", "on"}


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    notices = container.notice_service
    notifications = container.notification_service

    @app.route("/notices", methods=["POST"], endpoint="create_notice")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def create_notice():
        data = json_body()
        notice_id = notices.create_notice(
            title=data.get("title"),
            description=data.get("description"),
            author_email=g.user_email,
            attachment=request.files.get("file"),
            send_email=str(data.get("sendEmail", "")).strip().lower() in TRUTHY,
        )
        return ok("Notice published", status=201, notice_id=notice_id)

    @app.route("/notices", methods=["GET"], endpoint="list_notices")
    @guards.token_required
    def list_notices():
        return ok(data=notices.list_notices())

    @app.route("/notices/<int:notice_id>", methods=["DELETE"], endpoint="delete_notice")
    @guards.roles_required(*MANAGEMENT_ROLES)
    def delete_notice(notice_id: int):
        notices.delete_notice(notice_id)
        return ok("Notice deleted")

    @app.route("/notifications", methods=["GET"], endpoint="list_notifications")
    @guards.token_required
    def list_notifications():
        email = self_match(request.args.get("userEmail"))
        return ok(data=notifications.list_for(email))

    @app.route("/notifications/<int:notification_id>/read", methods=["PATCH"], endpoint="mark_notification_read")
    @guards.token_required
    def mark_notification_read(notification_id: int):
        notifications.mark_read(notification_id)
        return ok("Notification marked as read")
