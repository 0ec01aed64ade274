from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Dict, Optional

from ..core.enums import ShiftName
from .strategies.base import CheckInStrategy, ShiftWindow
from .strategies.ineligible_strategy import IneligibleStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy

# Night has no windows; its check-ins are always ineligible.
SHIFT_WINDOWS: Dict[str, ShiftWindow] = {
    ShiftName.MORNING.value: ShiftWindow(time(5, 45), time(6, 0), time(12, 0)),
    ShiftName.GENERAL.value: ShiftWindow(time(9, 45), time(10, 0), time(16, 0)),
    ShiftName.EVENING.value: ShiftWindow(time(13, 45), time(14, 5), time(18, 30)),
}


@dataclass
class CheckInStrategyFactory:
    """Factory Pattern: choose the check-in strategy from the shift's windows."""

    windows: Dict[str, ShiftWindow] = field(default_factory=lambda: dict(SHIFT_WINDOWS))

    def window_for(self, shift_name: Optional[str]) -> Optional[ShiftWindow]:
        return self.windows.get(shift_name or "")

    def for_check_in(self, *, shift_name: Optional[str], now_ms: int) -> CheckInStrategy:
        window = self.window_for(shift_name)
        if window is None:
            return IneligibleStrategy()
        if window.opens_ms <= now_ms <= window.on_time_ms:
            return OnTimeStrategy()
        if window.on_time_ms < now_ms <= window.late_ms:
            return LateStrategy()
        return IneligibleStrategy()
