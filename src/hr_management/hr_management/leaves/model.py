from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveBalance:
    email: str
    casual_leave: int
    sick_leave: int

    def remaining(self, leave_type: LeaveType) -> int:
        return self.casual_leave if leave_type == LeaveType.CASUAL else self.sick_leave


@dataclass(frozen=True)
class LeaveApplication:
    leave_id: int
    email: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveStatus
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
