from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import normalize_email, require_fields
from ..core.enums import EmployeeStatus, LeaveStatus, LeaveType
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..notices.service import NotificationService
from .model import LeaveApplication, LeaveBalance
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


def _parse_type(value) -> LeaveType:
    try:
        return LeaveType(str(value or LeaveType.CASUAL.value).strip().lower())
    except ValueError:
        raise ValidationError("leaveType must be casual or sick")


def _parse_status(value) -> Optional[LeaveStatus]:
    if not value:
        return None
    try:
        return LeaveStatus(str(value).strip().capitalize())
    except ValueError:
        raise ValidationError(f"Unknown leave status: {value}")


class LeaveService:
    """Leave applications: Pending -> Approved | Declined.

    Balances only move on approval; nothing restores the employee's status
    when the leave ends.
    """

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, notifications: NotificationService):
        self._leaves = leaves
        self._employees = employees
        self._notifications = notifications

    def apply(self, *, email: str, leave_type, start_date, end_date, reason: str) -> int:
        require_fields(
            {"email": email, "startDate": start_date, "endDate": end_date, "reason": reason},
            "email",
            "startDate",
            "endDate",
            "reason",
        )
        email = normalize_email(email)
        kind = _parse_type(leave_type)
        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)
        if end < start:
            raise ValidationError("endDate must not be before startDate")
        days = (end - start).days + 1

        if self._leaves.has_pending(email):
            raise BusinessRuleError("You already have a pending leave request")
        balance = self._leaves.get_or_create_balance(email)
        if balance.remaining(kind) < days:
            raise BusinessRuleError(f"Insufficient {kind.value} leave balance")

        leave_id = self._leaves.create_application(
            email=email,
            leave_type=kind,
            start_date=start,
            end_date=end,
            total_days=days,
            reason=reason.strip(),
        )
        logger.info("Leave #%s applied by %s for %d day(s)", leave_id, email, days)
        return leave_id

    def _require(self, leave_id: int) -> LeaveApplication:
        application = self._leaves.get_application(leave_id)
        if not application:
            raise NotFoundError("Leave application not found")
        return application

    def approve(self, leave_id: int, *, decided_by: Optional[str] = None) -> LeaveApplication:
        application = self._require(leave_id)
        if not self._leaves.decide(leave_id, status=LeaveStatus.APPROVED, decided_by=decided_by):
            raise BusinessRuleError("Leave application is already decided")

        self._employees.set_status(application.email, EmployeeStatus.ON_LEAVE)
        self._notifications.notify(
            email=application.email,
            title="Leave approved",
            message=f"Your leave from {application.start_date} to {application.end_date} has been approved.",
        )
        logger.info("Leave #%s approved by %s", leave_id, decided_by)
        return replace(application, status=LeaveStatus.APPROVED, decided_by=decided_by)

    def decline(self, leave_id: int, *, decided_by: Optional[str] = None) -> LeaveApplication:
        application = self._require(leave_id)
        if not self._leaves.decide(leave_id, status=LeaveStatus.DECLINED, decided_by=decided_by):
            raise BusinessRuleError("Leave application is already decided")

        self._notifications.notify(
            email=application.email,
            title="Leave declined",
            message=f"Your leave from {application.start_date} to {application.end_date} has been declined.",
        )
        logger.info("Leave #%s declined by %s", leave_id, decided_by)
        return replace(application, status=LeaveStatus.DECLINED, decided_by=decided_by)

    def list_applications(self, *, email: Optional[str] = None, status=None) -> Sequence[LeaveApplication]:
        return self._leaves.list_applications(
            email=normalize_email(email) if email else None,
            status=_parse_status(status),
        )

    def get_balance(self, email: str) -> LeaveBalance:
        return self._leaves.get_or_create_balance(normalize_email(email))
