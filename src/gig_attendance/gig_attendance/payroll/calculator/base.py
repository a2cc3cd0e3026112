from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ShiftEarnings:
    total_hours: float
    hourly_rate: float
    earnings: float


class EarningsCalculator(ABC):
    """Calculator interface (Strategy Pattern for per-shift pay)."""

    @abstractmethod
    def for_interval(self, *, clock_in: datetime, clock_out: datetime, hourly_rate: float) -> ShiftEarnings:
        raise NotImplementedError

    @abstractmethod
    def for_hours(self, *, total_hours: float, hourly_rate: float) -> ShiftEarnings:
        raise NotImplementedError
