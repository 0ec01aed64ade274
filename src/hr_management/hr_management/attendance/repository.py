from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PunchKind
from .model import AttendanceSnapshot, Punch, SnapshotUpdate


class AttendanceRepository(Protocol):
    def get_punch(self, email: str, work_date: date, kind: PunchKind) -> Optional[Punch]:
        raise NotImplementedError

    def list_punches(self, email: str, work_date: date) -> Sequence[Punch]:
        raise NotImplementedError

    def record_punch(self, punch: Punch, *, snapshot: Optional[SnapshotUpdate] = None) -> bool:
        """Insert the punch and apply the snapshot upsert together.

        Returns False (and writes nothing) when a punch of the same kind already
        exists for that email and date.
        """
        raise NotImplementedError

    def get_snapshot(self, email: str, work_date: date) -> Optional[AttendanceSnapshot]:
        raise NotImplementedError

    def list_snapshots(
        self,
        *,
        work_date: Optional[date] = None,
        month: Optional[str] = None,
        year: Optional[int] = None,
        email: Optional[str] = None,
    ) -> Sequence[AttendanceSnapshot]:
        raise NotImplementedError
