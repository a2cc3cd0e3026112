from __future__ import annotations

from datetime import datetime

from ..model import AttendanceRecord
from .base import CompletionDecision, CompletionStrategy


class WorkerClockOutStrategy(CompletionStrategy):
    """The worker clocks out now, optionally reporting a location."""

    def decide_completion(self, *, record: AttendanceRecord, now: datetime) -> CompletionDecision:
        return CompletionDecision(clock_out_at=now, captures_location=True)
