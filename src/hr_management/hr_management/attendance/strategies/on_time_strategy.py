from __future__ import annotations

from typing import Optional

from ...core.enums import CheckInVerdict
from .base import CheckInDecision, CheckInStrategy, ShiftWindow


class OnTimeStrategy(CheckInStrategy):
    """Inside the grace window: accepted without lateness."""

    def decide(self, *, now_ms: int, window: Optional[ShiftWindow]) -> CheckInDecision:
        return CheckInDecision(verdict=CheckInVerdict.ON_TIME)
