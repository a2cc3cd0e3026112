from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import ensure_utc
from ..model import AttendanceRecord
from .base import CompletionDecision, CompletionStrategy


class EmployerMarkCompleteStrategy(CompletionStrategy):
    """Employer closes the shift.

    The scheduled end is used when it falls after the clock-in, otherwise the
    current instant. No location is captured.
    """

    def decide_completion(self, *, record: AttendanceRecord, now: datetime) -> CompletionDecision:
        scheduled_end = ensure_utc(record.scheduled_end) if record.scheduled_end else None
        clock_in_at = ensure_utc(record.clock_in_at)
        if scheduled_end is not None and scheduled_end > clock_in_at:
            return CompletionDecision(clock_out_at=scheduled_end, captures_location=False)
        return CompletionDecision(clock_out_at=now, captures_location=False)
