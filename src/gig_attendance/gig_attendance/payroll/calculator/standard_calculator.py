from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import round2
from .base import EarningsCalculator, ShiftEarnings


class StandardEarningsCalculator(EarningsCalculator):
    """Standard rule: hours = round2(out - in), earnings = round2(hours * rate), never negative."""

    def for_interval(self, *, clock_in: datetime, clock_out: datetime, hourly_rate: float) -> ShiftEarnings:
        hours = max((clock_out - clock_in).total_seconds() / 3600, 0.0)
        return self.for_hours(total_hours=hours, hourly_rate=hourly_rate)

    def for_hours(self, *, total_hours: float, hourly_rate: float) -> ShiftEarnings:
        hours = round2(total_hours)
        return ShiftEarnings(total_hours=hours, hourly_rate=hourly_rate, earnings=round2(hours * hourly_rate))
