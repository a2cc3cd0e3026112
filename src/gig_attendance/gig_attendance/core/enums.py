from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role resolved by the upstream auth layer."""

    EMPLOYER = "employer"
    WORKER = "worker"


class AttendanceStatus(str, Enum):
    """Lifecycle state of one shift occurrence."""

    SCHEDULED = "scheduled"
    CLOCKED_IN = "clocked-in"
    COMPLETED = "completed"
    MISSED = "missed"


class Recurrence(str, Enum):
    ONE_TIME = "one-time"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "Recurrence":
        """Lenient parse; unknown values behave like weekly rules."""

        normalized = str(value or cls.ONE_TIME.value).strip().lower()
        if normalized == "once":
            return cls.ONE_TIME
        try:
            return cls(normalized)
        except ValueError:
            return cls.WEEKLY


class JobStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    FILLED = "filled"
    CLOSED = "closed"


class CompletionMode(str, Enum):
    """How a clocked-in shift is being closed."""

    CLOCK_OUT = "clock-out"
    MARK_COMPLETE = "mark-complete"
