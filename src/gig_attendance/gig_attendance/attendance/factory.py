from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import ensure_utc
from ..core.enums import CompletionMode
from .model import AttendanceRecord
from .strategies.base import ClockInStrategy, CompletionStrategy
from .strategies.clock_in_strategy import LateClockInStrategy, OnTimeClockInStrategy
from .strategies.mark_complete import EmployerMarkCompleteStrategy
from .strategies.worker_clock_out import WorkerClockOutStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, record: AttendanceRecord, now: datetime) -> ClockInStrategy:
        if ensure_utc(now) > ensure_utc(record.scheduled_start):
            return LateClockInStrategy()
        return OnTimeClockInStrategy()

    def for_completion(self, mode: CompletionMode) -> CompletionStrategy:
        if mode == CompletionMode.MARK_COMPLETE:
            return EmployerMarkCompleteStrategy()
        return WorkerClockOutStrategy()
