from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from .model import ShiftAssignment, WorkingShift


class ShiftRepository(Protocol):
    def get_assignment(self, assignment_key: str) -> Optional[ShiftAssignment]:
        raise NotImplementedError

    def upsert_assignment(self, *, assignment_key: str, email: str, shift_name: str, entry_time: Optional[str]) -> None:
        raise NotImplementedError

    def delete_assignment(self, assignment_key: str) -> bool:
        raise NotImplementedError

    def list_assignments(self) -> Sequence[ShiftAssignment]:
        raise NotImplementedError

    def find_working_shift(self, *, shift_name: str, branch: str) -> Optional[WorkingShift]:
        raise NotImplementedError

    def create_working_shift(
        self,
        *,
        shift_name: str,
        branch: str,
        start_time: time,
        end_time: time,
        late_after_minutes: int,
        absent_after_minutes: int,
        allow_ot: bool,
        created_by: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_working_shifts(self, *, branch: Optional[str] = None) -> Sequence[WorkingShift]:
        raise NotImplementedError
