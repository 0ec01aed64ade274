from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional


@dataclass(frozen=True)
class ShiftAssignment:
    """Employee -> shift mapping.

    ``assignment_key`` is the email for a normal shift and ``email + "_OT"`` for an
    overtime ticket, so both can exist for the same person.
    """

    assignment_key: str
    email: str
    shift_name: str
    entry_time: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkingShift:
    """Branch-level shift definition."""

    shift_id: int
    shift_name: str
    branch: str
    start_time: time
    end_time: time
    late_after_minutes: int = 5
    absent_after_minutes: int = 60
    allow_ot: bool = True
    created_by: Optional[str] = None
