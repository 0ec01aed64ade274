from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import PunchKind


@dataclass(frozen=True)
class Punch:
    """A single check-in / check-out / OT start / OT stop record."""

    email: str
    work_date: date
    kind: PunchKind
    punch_time_ms: int
    display_time: Optional[str] = None
    late_by: Optional[str] = None
    duration: Optional[str] = None
    duration_seconds: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceSnapshot:
    """Per (email, date) read model for dashboards, filled in by each punch."""

    email: str
    work_date: date
    month: str
    year: int
    shift_name: Optional[str] = None
    full_name: Optional[str] = None
    eid: Optional[str] = None
    designation: Optional[str] = None
    branch: Optional[str] = None
    photo_url: Optional[str] = None
    check_in_time: Optional[str] = None
    late_check_in: Optional[str] = None
    check_out_time: Optional[str] = None
    working_display: Optional[str] = None
    working_seconds: int = 0
    ot_start_time: Optional[str] = None
    ot_stop_time: Optional[str] = None
    ot_display: Optional[str] = None
    ot_seconds: int = 0


@dataclass(frozen=True)
class SnapshotUpdate:
    """Upsert instructions: ``on_insert`` only applies when the row is new, ``always`` on every write."""

    on_insert: Dict[str, Any] = field(default_factory=dict)
    always: Dict[str, Any] = field(default_factory=dict)
