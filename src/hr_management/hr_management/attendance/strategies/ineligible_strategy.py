from __future__ import annotations

from typing import Optional

from ...core.enums import CheckInVerdict
from .base import CheckInDecision, CheckInStrategy, ShiftWindow


class IneligibleStrategy(CheckInStrategy):
    """Outside every window of the shift, or the shift has no windows at all."""

    def decide(self, *, now_ms: int, window: Optional[ShiftWindow]) -> CheckInDecision:
        return CheckInDecision(verdict=CheckInVerdict.INELIGIBLE)
