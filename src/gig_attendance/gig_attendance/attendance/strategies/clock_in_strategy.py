from __future__ import annotations

from datetime import datetime

from ..model import AttendanceRecord
from .base import ClockInDecision, ClockInStrategy


class OnTimeClockInStrategy(ClockInStrategy):
    """Clock-in at or before the scheduled start."""

    def decide_clock_in(self, *, record: AttendanceRecord, now: datetime) -> ClockInDecision:
        return ClockInDecision(is_late=False)


class LateClockInStrategy(ClockInStrategy):
    """Clock-in after the scheduled start; no grace period."""

    def decide_clock_in(self, *, record: AttendanceRecord, now: datetime) -> ClockInDecision:
        return ClockInDecision(is_late=True)
