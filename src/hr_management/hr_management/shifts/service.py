from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Optional, Sequence

from ..common.validators import normalize_email, require_fields
from ..core.constants import OT_KEY_SUFFIX
from ..core.enums import ShiftName
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import ShiftAssignment, WorkingShift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)

ASSIGNABLE_SHIFTS = (ShiftName.MORNING, ShiftName.EVENING, ShiftName.NIGHT, ShiftName.GENERAL)


def ot_key(email: str) -> str:
    return f"{email}{OT_KEY_SUFFIX}"


def _parse_clock(value, field_name: str) -> time:
    if isinstance(value, time):
        return value
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(str(value).strip(), fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be HH:MM")


class ShiftService:
    def __init__(self, shifts: ShiftRepository):
        self._shifts = shifts

    def assign(self, *, email: str, shift_name: str, entry_time: Optional[str] = None) -> ShiftAssignment:
        require_fields({"email": email, "shiftName": shift_name}, "email", "shiftName")
        email = normalize_email(email)
        try:
            shift = ShiftName(shift_name)
        except ValueError:
            raise ValidationError(f"Unknown shift: {shift_name}")
        if shift not in ASSIGNABLE_SHIFTS:
            raise ValidationError("Use the OT list enrollment for overtime")

        self._shifts.upsert_assignment(
            assignment_key=email, email=email, shift_name=shift.value, entry_time=entry_time
        )
        logger.info("Shift %s assigned to %s", shift.value, email)
        return ShiftAssignment(assignment_key=email, email=email, shift_name=shift.value, entry_time=entry_time)

    def enroll_ot(self, *, email: str, entry_time: Optional[str] = None) -> ShiftAssignment:
        """Grant a one-shot overtime ticket; it lives beside the normal assignment."""
        require_fields({"email": email}, "email")
        email = normalize_email(email)
        key = ot_key(email)
        self._shifts.upsert_assignment(
            assignment_key=key, email=email, shift_name=ShiftName.OT_LIST.value, entry_time=entry_time
        )
        logger.info("%s enrolled in OT list", email)
        return ShiftAssignment(assignment_key=key, email=email, shift_name=ShiftName.OT_LIST.value, entry_time=entry_time)

    def get_assignment(self, email: str) -> ShiftAssignment:
        assignment = self._shifts.get_assignment(normalize_email(email))
        if not assignment:
            raise NotFoundError("No shift assigned")
        return assignment

    def get_ot_ticket(self, email: str) -> Optional[ShiftAssignment]:
        return self._shifts.get_assignment(ot_key(normalize_email(email)))

    def list_assignments(self) -> Sequence[ShiftAssignment]:
        return self._shifts.list_assignments()

    def remove_assignment(self, assignment_key: str) -> None:
        if not self._shifts.delete_assignment((assignment_key or "").strip().lower()):
            raise NotFoundError("Shift assignment not found")

    def create_working_shift(
        self,
        *,
        shift_name: str,
        branch: str,
        start_time,
        end_time,
        late_after_minutes: int = 5,
        absent_after_minutes: int = 60,
        allow_ot: bool = True,
        created_by: Optional[str] = None,
    ) -> int:
        require_fields(
            {"shiftName": shift_name, "branch": branch, "startTime": start_time, "endTime": end_time},
            "shiftName",
            "branch",
            "startTime",
            "endTime",
        )
        shift_name = str(shift_name).strip()
        branch = str(branch).strip()
        start = _parse_clock(start_time, "startTime")
        end = _parse_clock(end_time, "endTime")
        try:
            late_after = int(late_after_minutes)
            absent_after = int(absent_after_minutes)
        except (TypeError, ValueError):
            raise ValidationError("Minute thresholds must be whole numbers")

        if self._shifts.find_working_shift(shift_name=shift_name, branch=branch):
            raise ConflictError("Shift already exists for this branch")

        shift_id = self._shifts.create_working_shift(
            shift_name=shift_name,
            branch=branch,
            start_time=start,
            end_time=end,
            late_after_minutes=late_after,
            absent_after_minutes=absent_after,
            allow_ot=bool(allow_ot),
            created_by=created_by,
        )
        logger.info("Working shift %s/%s created by %s", shift_name, branch, created_by)
        return shift_id

    def list_working_shifts(self, *, branch: Optional[str] = None) -> Sequence[WorkingShift]:
        return self._shifts.list_working_shifts(branch=branch)
