from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import format_duration
from ...core.enums import CheckInVerdict
from .base import CheckInDecision, CheckInStrategy, ShiftWindow


class LateStrategy(CheckInStrategy):
    """Late check-in; lateness counts from the on-time cutoff."""

    def decide(self, *, now_ms: int, window: Optional[ShiftWindow]) -> CheckInDecision:
        if window is None:
            raise ValueError("LateStrategy needs a shift window")
        return CheckInDecision(
            verdict=CheckInVerdict.LATE,
            late_by=format_duration(now_ms - window.on_time_ms),
        )
