from __future__ import annotations

import os
from io import BytesIO

import pytest
from werkzeug.datastructures import FileStorage

from src.hr_management.hr_management.core.exceptions import NotFoundError, ValidationError
from src.hr_management.hr_management.notices.model import Notice, Notification
from src.hr_management.hr_management.notices.service import NoticeService, NotificationService


class InMemoryNotices:
    def __init__(self):
        self.notices: dict[int, Notice] = {}

    def create(self, *, title, description, attachment_path, author_email) -> int:
        notice_id = len(self.notices) + 1
        self.notices[notice_id] = Notice(
            notice_id=notice_id,
            title=title,
            description=description,
            attachment_path=attachment_path,
            author_email=author_email,
        )
        return notice_id

    def list(self):
        return list(self.notices.values())

    def delete(self, notice_id: int) -> bool:
        return self.notices.pop(int(notice_id), None) is not None


class InMemoryNotifications:
    def __init__(self):
        self.items: dict[int, Notification] = {}

    def create(self, *, email, title, message) -> int:
        notification_id = len(self.items) + 1
        self.items[notification_id] = Notification(notification_id=notification_id, email=email, title=title, message=message)
        return notification_id

    def list_for(self, email: str):
        return [n for n in self.items.values() if n.email in (email, None)]

    def mark_read(self, notification_id: int) -> bool:
        return int(notification_id) in self.items


class StaticEmployees:
    def list_emails(self):
        return ["a@example.com", "b@example.com"]


class RecordingMailer:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.broadcasts = []
        self.bodies = []

    def send(self, *, to, subject, html):
        raise AssertionError("notices only broadcast")

    def send_bcc(self, *, recipients, subject, html):
        if self.fail:
            raise ConnectionError("smtp down")
        self.broadcasts.append((list(recipients), subject))
        self.bodies.append(html)
        return 1


def _service(tmp_path, mailer=None):
    notices = InMemoryNotices()
    notifications = InMemoryNotifications()
    svc = NoticeService(
        notices,
        NotificationService(notifications),
        StaticEmployees(),
        mailer or RecordingMailer(),
        upload_folder=str(tmp_path / "uploads"),
    )
    return svc, notices, notifications


def _pdf(name="Holiday Policy.pdf", content_type="application/pdf") -> FileStorage:
    return FileStorage(stream=BytesIO(b"%PDF-1.4 test"), filename=name, content_type=content_type)


def test_notice_with_pdf_is_saved_and_broadcast(tmp_path):
    mailer = RecordingMailer()
    svc, notices, notifications = _service(tmp_path, mailer)

    notice_id = svc.create_notice(
        title=" Eid holidays ",
        description="Office closed",
        author_email="hr@example.com",
        attachment=_pdf(),
        send_email=True,
    )

    stored = notices.notices[notice_id]
    assert stored.title == "Eid holidays"
    assert os.path.isfile(stored.attachment_path)
    assert os.path.basename(stored.attachment_path).endswith("_Holiday_Policy.pdf")
    assert notifications.items[1].email is None
    assert notifications.items[1].message == "Eid holidays"
    assert mailer.broadcasts == [(["a@example.com", "b@example.com"], "Notice: Eid holidays")]


def test_broadcast_mail_escapes_notice_text(tmp_path):
    mailer = RecordingMailer()
    svc, _, _ = _service(tmp_path, mailer)

    svc.create_notice(
        title="<b>Eid</b>",
        description="Bring <script>alert(1)</script> & snacks",
        author_email=None,
        send_email=True,
    )

    html = mailer.bodies[-1]
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; snacks" in html
    assert "<h2>&lt;b&gt;Eid&lt;/b&gt;</h2>" in html


def test_non_pdf_attachment_is_rejected(tmp_path):
    svc, notices, _ = _service(tmp_path)
    with pytest.raises(ValidationError, match="Only PDF"):
        svc.create_notice(
            title="Menu",
            description="Lunch",
            author_email=None,
            attachment=_pdf("menu.png", "image/png"),
        )
    assert notices.notices == {}


def test_mail_failure_does_not_undo_notice(tmp_path):
    svc, notices, _ = _service(tmp_path, RecordingMailer(fail=True))

    notice_id = svc.create_notice(title="Drill", description="Fire drill at 3pm", author_email=None, send_email=True)

    assert notice_id in notices.notices


def test_notice_requires_title_and_description(tmp_path):
    svc, _, _ = _service(tmp_path)
    with pytest.raises(ValidationError):
        svc.create_notice(title="", description="", author_email=None)


def test_delete_unknown_notice_is_not_found(tmp_path):
    svc, _, _ = _service(tmp_path)
    with pytest.raises(NotFoundError):
        svc.delete_notice(7)


def test_broadcasts_reach_every_user_and_targeted_only_owner():
    repo = InMemoryNotifications()
    svc = NotificationService(repo)
    svc.notify(email=None, title="All", message="hi")
    svc.notify(email="A@Example.com", title="Yours", message="hi")

    assert [n.title for n in svc.list_for("a@example.com")] == ["All", "Yours"]
    assert [n.title for n in svc.list_for("b@example.com")] == ["All"]

    svc.mark_read(2)
    with pytest.raises(NotFoundError):
        svc.mark_read(99)
