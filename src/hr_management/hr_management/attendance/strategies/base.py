from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Optional

from ...common.datetime_utils import ms_since_midnight
from ...core.enums import CheckInVerdict


@dataclass(frozen=True)
class ShiftWindow:
    """Clock thresholds for one shift, in local time.

    ``opens_at <= t <= on_time_until`` is on time, ``on_time_until < t <= late_until`` is late.
    """

    opens_at: time
    on_time_until: time
    late_until: time

    @property
    def opens_ms(self) -> int:
        return ms_since_midnight(self.opens_at)

    @property
    def on_time_ms(self) -> int:
        return ms_since_midnight(self.on_time_until)

    @property
    def late_ms(self) -> int:
        return ms_since_midnight(self.late_until)


@dataclass(frozen=True)
class CheckInDecision:
    verdict: CheckInVerdict
    late_by: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.verdict != CheckInVerdict.INELIGIBLE


class CheckInStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in at ``now_ms`` is judged."""

    @abstractmethod
    def decide(self, *, now_ms: int, window: Optional[ShiftWindow]) -> CheckInDecision:
        raise NotImplementedError
