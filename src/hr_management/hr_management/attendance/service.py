from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_duration, month_name, ms_since_midnight, normalize_month, now_local
from ..common.validators import normalize_email
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import CheckInVerdict, PunchKind
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..shifts.repository import ShiftRepository
from ..shifts.service import ot_key
from .factory import CheckInStrategyFactory
from .model import AttendanceSnapshot, Punch, SnapshotUpdate
from .repository import AttendanceRepository
from .strategies.base import CheckInDecision

logger = logging.getLogger(__name__)

ALREADY_CHECKED_IN = "You have already checked in today"
ALREADY_CHECKED_OUT = "You have already checked out today"
ALREADY_STARTED_OT = "Overtime already started today"
ALREADY_STOPPED_OT = "Overtime already stopped today"
NOT_ELIGIBLE = "You are not eligible to check in at this time."


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _display(value: datetime) -> str:
    return value.strftime("%I:%M:%S %p")


def _parse_year(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("year must be a number")


class AttendanceService:
    """Check-in / check-out and the overtime start/stop pair.

    Window decisions use the server's clock in the business timezone; worked and
    overtime durations subtract the client-supplied epoch millis as received.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        *,
        strategy_factory: CheckInStrategyFactory | None = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._attendance = attendance
        self._shifts = shifts
        self._employees = employees
        self._factory = strategy_factory or CheckInStrategyFactory()
        self._timezone = timezone

    def _now(self, now: datetime | None) -> datetime:
        return now or now_local(self._timezone)

    def _bucket_fields(self, email: str, work_date: date, shift_name: Optional[str]) -> dict:
        return {
            "email": email,
            "work_date": work_date,
            "month": month_name(work_date),
            "year": work_date.year,
            "shift_name": shift_name,
        }

    def check_in(
        self,
        email: str,
        *,
        check_in_time_ms: int | None = None,
        now: datetime | None = None,
    ) -> CheckInDecision:
        email = normalize_email(email)
        now = self._now(now)
        today = now.date()

        assignment = self._shifts.get_assignment(email)
        if not assignment:
            raise BusinessRuleError("No shift assigned to you")

        if self._attendance.get_punch(email, today, PunchKind.CHECK_IN):
            raise BusinessRuleError(ALREADY_CHECKED_IN)

        now_ms = ms_since_midnight(now)
        strategy = self._factory.for_check_in(shift_name=assignment.shift_name, now_ms=now_ms)
        decision = strategy.decide(now_ms=now_ms, window=self._factory.window_for(assignment.shift_name))
        if decision.verdict == CheckInVerdict.INELIGIBLE:
            logger.info("Check-in rejected for %s (%s shift at %s)", email, assignment.shift_name, now.time())
            raise BusinessRuleError(NOT_ELIGIBLE)

        display = _display(now)
        punch = Punch(
            email=email,
            work_date=today,
            kind=PunchKind.CHECK_IN,
            punch_time_ms=int(check_in_time_ms) if check_in_time_ms is not None else _epoch_ms(now),
            display_time=display,
            late_by=decision.late_by,
        )
        snapshot = SnapshotUpdate(
            on_insert=self._bucket_fields(email, today, assignment.shift_name),
            always={"check_in_time": display, "late_check_in": decision.late_by},
        )
        if not self._attendance.record_punch(punch, snapshot=snapshot):
            raise BusinessRuleError(ALREADY_CHECKED_IN)

        logger.info("%s checked in %s (%s)", email, decision.verdict.value, decision.late_by or "on time")
        return decision

    def check_out(
        self,
        email: str,
        *,
        check_out_time_ms: int | None = None,
        now: datetime | None = None,
    ) -> Punch:
        email = normalize_email(email)
        now = self._now(now)
        today = now.date()

        check_in = self._attendance.get_punch(email, today, PunchKind.CHECK_IN)
        if not check_in:
            raise NotFoundError("No check-in found for today")
        if self._attendance.get_punch(email, today, PunchKind.CHECK_OUT):
            raise BusinessRuleError(ALREADY_CHECKED_OUT)

        out_ms = int(check_out_time_ms) if check_out_time_ms is not None else _epoch_ms(now)
        elapsed_ms = out_ms - check_in.punch_time_ms
        display = _display(now)
        punch = Punch(
            email=email,
            work_date=today,
            kind=PunchKind.CHECK_OUT,
            punch_time_ms=out_ms,
            display_time=display,
            duration=format_duration(elapsed_ms),
            duration_seconds=max(elapsed_ms, 0) // 1000,
        )

        assignment = self._shifts.get_assignment(email)
        employee = self._employees.get_by_email(email)
        always = {
            "check_out_time": display,
            "working_display": punch.duration,
            "working_seconds": punch.duration_seconds,
        }
        if employee:
            always.update(
                full_name=employee.full_name,
                eid=employee.eid,
                designation=employee.designation,
                branch=employee.branch,
                photo_url=employee.photo_url,
            )
        snapshot = SnapshotUpdate(
            on_insert=self._bucket_fields(email, today, assignment.shift_name if assignment else None),
            always=always,
        )
        if not self._attendance.record_punch(punch, snapshot=snapshot):
            raise BusinessRuleError(ALREADY_CHECKED_OUT)

        logger.info("%s checked out after %s", email, punch.duration)
        return punch

    def start_overtime(
        self,
        email: str,
        *,
        start_time_ms: int | None = None,
        now: datetime | None = None,
    ) -> Punch:
        email = normalize_email(email)
        now = self._now(now)
        today = now.date()

        if not self._shifts.get_assignment(ot_key(email)):
            raise BusinessRuleError("You are not in the OT list")
        if self._attendance.get_punch(email, today, PunchKind.OT_START):
            raise BusinessRuleError(ALREADY_STARTED_OT)

        punch = Punch(
            email=email,
            work_date=today,
            kind=PunchKind.OT_START,
            punch_time_ms=int(start_time_ms) if start_time_ms is not None else _epoch_ms(now),
            display_time=_display(now),
        )
        if not self._attendance.record_punch(punch):
            raise BusinessRuleError(ALREADY_STARTED_OT)

        logger.info("%s started overtime", email)
        return punch

    def stop_overtime(
        self,
        email: str,
        *,
        stop_time_ms: int | None = None,
        now: datetime | None = None,
    ) -> Punch:
        email = normalize_email(email)
        now = self._now(now)
        today = now.date()

        start = self._attendance.get_punch(email, today, PunchKind.OT_START)
        if not start:
            raise NotFoundError("No overtime start found for today")
        if self._attendance.get_punch(email, today, PunchKind.OT_STOP):
            raise BusinessRuleError(ALREADY_STOPPED_OT)

        stop_ms = int(stop_time_ms) if stop_time_ms is not None else _epoch_ms(now)
        elapsed_ms = stop_ms - start.punch_time_ms
        display = _display(now)
        punch = Punch(
            email=email,
            work_date=today,
            kind=PunchKind.OT_STOP,
            punch_time_ms=stop_ms,
            display_time=display,
            duration=format_duration(elapsed_ms),
            duration_seconds=max(elapsed_ms, 0) // 1000,
        )
        snapshot = SnapshotUpdate(
            on_insert=self._bucket_fields(email, today, None),
            always={
                "ot_start_time": start.display_time,
                "ot_stop_time": display,
                "ot_display": punch.duration,
                "ot_seconds": punch.duration_seconds,
            },
        )
        if not self._attendance.record_punch(punch, snapshot=snapshot):
            raise BusinessRuleError(ALREADY_STOPPED_OT)

        # The OT ticket is single use.
        self._shifts.delete_assignment(ot_key(email))
        logger.info("%s stopped overtime after %s; OT ticket consumed", email, punch.duration)
        return punch

    def get_today_status(self, email: str, *, now: datetime | None = None) -> dict:
        email = normalize_email(email)
        today = self._now(now).date()
        punches = {p.kind: p for p in self._attendance.list_punches(email, today)}
        return {
            "date": today,
            "check_in": punches.get(PunchKind.CHECK_IN),
            "check_out": punches.get(PunchKind.CHECK_OUT),
            "ot_start": punches.get(PunchKind.OT_START),
            "ot_stop": punches.get(PunchKind.OT_STOP),
            "snapshot": self._attendance.get_snapshot(email, today),
        }

    def list_snapshots(
        self,
        *,
        work_date: date | None = None,
        month: str | None = None,
        year: int | None = None,
        email: str | None = None,
    ) -> Sequence[AttendanceSnapshot]:
        return self._attendance.list_snapshots(
            work_date=work_date,
            month=normalize_month(month) if month else None,
            year=_parse_year(year) if year else None,
            email=normalize_email(email) if email else None,
        )
