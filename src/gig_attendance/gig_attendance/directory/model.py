from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.references import Reference
from ..core.enums import JobStatus, Recurrence
from ..geo.model import LocationInput


@dataclass(frozen=True)
class ScheduleRule:
    """Recurring-shift rule embedded in a job or an assignment."""

    start_date: Optional[datetime]
    end_date: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    recurrence: Recurrence = Recurrence.ONE_TIME
    work_days: tuple = ()
    custom_dates: tuple = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScheduleRule":
        """Build from a stored/posted payload (camelCase or snake_case keys)."""

        def pick(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        return cls(
            start_date=coerce_datetime(pick("startDate", "start_date")),
            end_date=coerce_datetime(pick("endDate", "end_date")),
            start_time=pick("startTime", "start_time"),
            end_time=pick("endTime", "end_time"),
            recurrence=Recurrence.parse(pick("recurrence")),
            work_days=tuple(pick("workDays", "work_days") or ()),
            custom_dates=tuple(pick("customDates", "custom_dates") or ()),
        )


@dataclass(frozen=True)
class Business:
    business_id: int
    name: Optional[str] = None
    location: Optional[LocationInput] = None


@dataclass(frozen=True)
class Worker:
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    user_type: str = "worker"

    @property
    def is_worker(self) -> bool:
        return self.user_type == "worker"


@dataclass(frozen=True)
class Job:
    job_id: int
    employer_id: int
    title: Optional[str] = None
    hourly_rate: Optional[float] = None
    location: Optional[LocationInput] = None
    business: Optional[Reference[Business]] = None
    business_address: Optional[str] = None
    schedule: Optional[ScheduleRule] = None
    status: JobStatus = JobStatus.ACTIVE

    @property
    def business_id(self) -> Optional[int]:
        return self.business.id if self.business is not None else None
