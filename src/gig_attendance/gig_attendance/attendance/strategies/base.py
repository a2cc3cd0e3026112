from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ..model import AttendanceRecord


@dataclass(frozen=True)
class ClockInDecision:
    is_late: bool


@dataclass(frozen=True)
class CompletionDecision:
    clock_out_at: datetime
    captures_location: bool


class ClockInStrategy(ABC):
    """Strategy Pattern: decide how a clock-in is classified."""

    @abstractmethod
    def decide_clock_in(self, *, record: AttendanceRecord, now: datetime) -> ClockInDecision:
        raise NotImplementedError


class CompletionStrategy(ABC):
    """Strategy Pattern: decide the effective clock-out of a completed shift."""

    @abstractmethod
    def decide_completion(self, *, record: AttendanceRecord, now: datetime) -> CompletionDecision:
        raise NotImplementedError
