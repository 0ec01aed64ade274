from datetime import time

import pytest

from src.hr_management.hr_management.attendance.factory import SHIFT_WINDOWS, CheckInStrategyFactory
from src.hr_management.hr_management.attendance.strategies.ineligible_strategy import IneligibleStrategy
from src.hr_management.hr_management.attendance.strategies.late_strategy import LateStrategy
from src.hr_management.hr_management.attendance.strategies.on_time_strategy import OnTimeStrategy
from src.hr_management.hr_management.common.datetime_utils import format_duration, ms_since_midnight
from src.hr_management.hr_management.core.enums import CheckInVerdict


def _ms(h: int, m: int, s: int = 0) -> int:
    return ms_since_midnight(time(h, m, s))


@pytest.mark.parametrize(
    "shift_name, clock, expected",
    [
        ("Morning", (5, 44, 59), IneligibleStrategy),
        ("Morning", (5, 45), OnTimeStrategy),
        ("Morning", (6, 0), OnTimeStrategy),
        ("Morning", (6, 0, 1), LateStrategy),
        ("Morning", (12, 0), LateStrategy),
        ("Morning", (12, 0, 1), IneligibleStrategy),
        ("General", (9, 50), OnTimeStrategy),
        ("General", (15, 59), LateStrategy),
        ("Evening", (14, 5), OnTimeStrategy),
        ("Evening", (18, 31), IneligibleStrategy),
        ("Night", (22, 0), IneligibleStrategy),
        ("Unknown", (10, 0), IneligibleStrategy),
    ],
)
def test_factory_picks_strategy_by_window(shift_name, clock, expected):
    factory = CheckInStrategyFactory()
    strategy = factory.for_check_in(shift_name=shift_name, now_ms=_ms(*clock))
    assert isinstance(strategy, expected)


def test_night_shift_has_no_window():
    assert "Night" not in SHIFT_WINDOWS
    assert CheckInStrategyFactory().window_for("Night") is None


def test_late_strategy_counts_from_on_time_cutoff():
    window = SHIFT_WINDOWS["Morning"]
    decision = LateStrategy().decide(now_ms=_ms(6, 30), window=window)
    assert decision.verdict == CheckInVerdict.LATE
    assert decision.late_by == "0h 30m"
    assert decision.accepted


def test_late_strategy_requires_window():
    with pytest.raises(ValueError):
        LateStrategy().decide(now_ms=_ms(6, 30), window=None)


def test_ineligible_decision_is_not_accepted():
    decision = IneligibleStrategy().decide(now_ms=0, window=None)
    assert decision.verdict == CheckInVerdict.INELIGIBLE
    assert not decision.accepted


def test_format_duration_drops_seconds():
    assert format_duration(0) == "0h 0m"
    assert format_duration(((8 * 60 + 15) * 60 + 42) * 1000) == "8h 15m"
    assert format_duration(-5000) == "0h 0m"


def test_custom_windows_can_be_injected():
    factory = CheckInStrategyFactory(windows={"Night": SHIFT_WINDOWS["General"]})
    assert isinstance(factory.for_check_in(shift_name="Night", now_ms=_ms(9, 55)), OnTimeStrategy)
    assert isinstance(factory.for_check_in(shift_name="Morning", now_ms=_ms(5, 50)), IneligibleStrategy)
