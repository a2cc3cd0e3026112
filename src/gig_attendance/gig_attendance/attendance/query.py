"""Filters for attendance listings.

Date filters use interval overlap: a record matches a day (or range) when its
scheduled window intersects it, so shifts spanning midnight show up on both
days.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.actor import Actor
from ..common.datetime_utils import coerce_datetime, day_range_utc, ensure_utc
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .model import AttendanceRecord


def parse_status_filter(value) -> Optional[AttendanceStatus]:
    """`all`/empty means no filter; `clocked_in` is accepted for `clocked-in`."""

    if value is None:
        return None
    if isinstance(value, AttendanceStatus):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    if not normalized or normalized == "all":
        return None
    try:
        return AttendanceStatus(normalized)
    except ValueError:
        raise ValidationError("Invalid status filter") from None


def parse_day(value, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value
    parsed = coerce_datetime(value)
    if parsed is None:
        raise ValidationError(f"Invalid {field_name} parameter")
    return parsed.date()


def parse_optional_int(value, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name} parameter") from None


@dataclass(frozen=True)
class AttendanceQuery:
    worker_id: Optional[int] = None
    job_id: Optional[int] = None
    business_id: Optional[int] = None
    employer_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    day: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    ascending: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "AttendanceQuery":
        """Build from HTTP query parameters (camelCase names)."""

        return cls(
            worker_id=parse_optional_int(params.get("workerId"), "workerId"),
            job_id=parse_optional_int(params.get("jobId"), "jobId"),
            business_id=parse_optional_int(params.get("businessId"), "businessId"),
            status=parse_status_filter(params.get("status")),
            day=parse_day(params.get("date"), "date"),
            start_date=parse_day(params.get("startDate"), "startDate"),
            end_date=parse_day(params.get("endDate"), "endDate"),
        )

    def scoped_to(self, actor: Actor) -> "AttendanceQuery":
        """Workers only see their own records, employers only records they own."""

        if actor.is_worker:
            return replace(self, worker_id=actor.user_id)
        return replace(self, employer_id=actor.user_id)

    def bounds(self) -> tuple[Optional[datetime], Optional[datetime]]:
        """(range_start, range_end) in UTC; a single day wins over start/end dates."""

        if self.day is not None:
            return day_range_utc(self.day)
        start = day_range_utc(self.start_date)[0] if self.start_date else None
        end = day_range_utc(self.end_date)[1] if self.end_date else None
        return start, end

    def matches(self, record: AttendanceRecord) -> bool:
        if self.worker_id is not None and record.worker_id != self.worker_id:
            return False
        if self.job_id is not None and record.job_id != self.job_id:
            return False
        if self.business_id is not None and record.business_id != self.business_id:
            return False
        if self.employer_id is not None and record.employer_id != self.employer_id:
            return False
        if self.status is not None and record.status != self.status:
            return False

        range_start, range_end = self.bounds()
        if range_end is not None and ensure_utc(record.scheduled_start) > range_end:
            return False
        if range_start is not None and ensure_utc(record.scheduled_end) <= range_start:
            return False
        return True
