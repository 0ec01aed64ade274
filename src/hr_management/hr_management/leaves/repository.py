from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveApplication, LeaveBalance


class LeaveRepository(Protocol):
    def get_or_create_balance(self, email: str) -> LeaveBalance:
        raise NotImplementedError

    def has_pending(self, email: str) -> bool:
        raise NotImplementedError

    def create_application(
        self,
        *,
        email: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def get_application(self, leave_id: int) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def decide(self, leave_id: int, *, status: LeaveStatus, decided_by: Optional[str]) -> bool:
        """Move a Pending application to ``status``; approval also deducts the balance.

        False when the application is no longer Pending.
        """
        raise NotImplementedError

    def list_applications(
        self, *, email: Optional[str] = None, status: Optional[LeaveStatus] = None
    ) -> Sequence[LeaveApplication]:
        raise NotImplementedError
