from __future__ import annotations

import logging
from typing import Protocol, Sequence

from flask_mail import Mail, Message

from ..core.constants import MAIL_BATCH_SIZE

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, html: str) -> None:
        raise NotImplementedError

    def send_bcc(self, *, recipients: Sequence[str], subject: str, html: str) -> int:
        raise NotImplementedError


class FlaskMailer(Mailer):
    """Flask-Mail backed sender; must be used inside an app context."""

    def __init__(self, mail: Mail, *, batch_size: int = MAIL_BATCH_SIZE):
        self._mail = mail
        self._batch_size = max(int(batch_size), 1)

    def send(self, *, to: str, subject: str, html: str) -> None:
        self._mail.send(Message(subject=subject, recipients=[to], html=html))
        logger.info("Mail '%s' sent to %s", subject, to)

    def send_bcc(self, *, recipients: Sequence[str], subject: str, html: str) -> int:
        """BCC everyone in batches; returns the number of batches sent."""
        batches = 0
        with self._mail.connect() as conn:
            for start in range(0, len(recipients), self._batch_size):
                chunk = list(recipients[start : start + self._batch_size])
                conn.send(Message(subject=subject, recipients=[], bcc=chunk, html=html))
                batches += 1
        logger.info("Mail '%s' sent to %d recipients in %d batches", subject, len(recipients), batches)
        return batches
