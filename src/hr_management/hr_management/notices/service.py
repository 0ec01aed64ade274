from __future__ import annotations

import logging
import os
import time
from typing import Optional, Sequence

from markupsafe import escape
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..common.mailer import Mailer
from ..common.validators import normalize_email, require_fields
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import Notice, Notification
from .repository import NoticeRepository, NotificationRepository

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"

NOTICE_HTML = """
<div style="font-family:sans-serif;">
    <h2>{title}</h2>
    <p>{description}</p>
    <p style="margin-top:20px;color:#7F00FF;">Open the HR portal to see the full notice.</p>
</div>
"""


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(self, *, email: Optional[str], title: str, message: str) -> int:
        """Write an in-app notification; ``email=None`` reaches everyone."""
        return self._notifications.create(
            email=normalize_email(email) if email else None,
            title=title,
            message=message,
        )

    def list_for(self, email: str) -> Sequence[Notification]:
        return self._notifications.list_for(normalize_email(email))

    def mark_read(self, notification_id: int) -> None:
        if not self._notifications.mark_read(notification_id):
            raise NotFoundError("Notification not found")


class NoticeService:
    def __init__(
        self,
        notices: NoticeRepository,
        notifications: NotificationService,
        employees: EmployeeRepository,
        mailer: Mailer,
        *,
        upload_folder: str,
    ):
        self._notices = notices
        self._notifications = notifications
        self._employees = employees
        self._mailer = mailer
        self._upload_folder = upload_folder

    def _save_attachment(self, attachment: FileStorage) -> str:
        if attachment.mimetype != PDF_MIMETYPE:
            raise ValidationError("Only PDF files are allowed")
        filename = secure_filename(attachment.filename or "") or "notice.pdf"
        os.makedirs(self._upload_folder, exist_ok=True)
        path = os.path.join(self._upload_folder, f"{int(time.time() * 1000)}_{filename}")
        attachment.save(path)
        return path

    def create_notice(
        self,
        *,
        title: str,
        description: str,
        author_email: Optional[str],
        attachment: Optional[FileStorage] = None,
        send_email: bool = False,
    ) -> int:
        require_fields({"title": title, "description": description}, "title", "description")
        attachment_path = self._save_attachment(attachment) if attachment else None

        notice_id = self._notices.create(
            title=title.strip(),
            description=description,
            attachment_path=attachment_path,
            author_email=author_email,
        )
        self._notifications.notify(email=None, title="New notice", message=title.strip())

        if send_email:
            recipients = list(self._employees.list_emails())
            try:
                self._mailer.send_bcc(
                    recipients=recipients,
                    subject=f"Notice: {title.strip()}",
                    html=NOTICE_HTML.format(title=escape(title.strip()), description=escape(description)),
                )
            except Exception:
                # The notice is already stored; a broadcast failure must not undo it.
                logger.warning("Notice #%s e-mail broadcast failed", notice_id, exc_info=True)

        logger.info("Notice #%s published by %s", notice_id, author_email)
        return notice_id

    def list_notices(self) -> Sequence[Notice]:
        return self._notices.list()

    def delete_notice(self, notice_id: int) -> None:
        if not self._notices.delete(notice_id):
            raise NotFoundError("Notice not found")
