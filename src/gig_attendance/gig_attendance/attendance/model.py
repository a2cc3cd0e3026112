from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus
from ..geo.model import SiteLocation


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _location(value: Optional[SiteLocation]) -> Optional[dict]:
    return value.to_dict() if value is not None else None


@dataclass(frozen=True)
class NewAttendance:
    """Payload for a record that has not been persisted yet."""

    worker_id: int
    employer_id: int
    job_id: int
    scheduled_start: datetime
    scheduled_end: datetime
    business_id: Optional[int] = None
    hourly_rate: Optional[float] = None
    job_location: Optional[SiteLocation] = None
    worker_name_snapshot: Optional[str] = None
    job_title_snapshot: Optional[str] = None
    location_snapshot: Optional[str] = None
    notes: Optional[str] = None
    status: AttendanceStatus = AttendanceStatus.SCHEDULED

    @property
    def occurrence_key(self) -> tuple[int, int, datetime]:
        return (self.worker_id, self.job_id, self.scheduled_start)


@dataclass(frozen=True)
class AttendanceRecord:
    """One concrete shift occurrence and its attendance state."""

    record_id: int
    worker_id: int
    employer_id: int
    job_id: int
    scheduled_start: datetime
    scheduled_end: datetime
    status: AttendanceStatus = AttendanceStatus.SCHEDULED
    business_id: Optional[int] = None

    clock_in_at: Optional[datetime] = None
    clock_out_at: Optional[datetime] = None
    is_late: bool = False

    hourly_rate: Optional[float] = None
    total_hours: float = 0.0
    earnings: float = 0.0

    job_location: Optional[SiteLocation] = None
    clock_in_location: Optional[SiteLocation] = None
    clock_out_location: Optional[SiteLocation] = None
    location_validated: Optional[bool] = None
    location_validation_message: Optional[str] = None
    clock_in_distance: Optional[float] = None
    clock_out_distance: Optional[float] = None

    worker_name_snapshot: Optional[str] = None
    job_title_snapshot: Optional[str] = None
    location_snapshot: Optional[str] = None
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_new(cls, record_id: int, new: NewAttendance, *, created_at: Optional[datetime] = None) -> "AttendanceRecord":
        return cls(
            record_id=record_id,
            worker_id=new.worker_id,
            employer_id=new.employer_id,
            job_id=new.job_id,
            business_id=new.business_id,
            scheduled_start=new.scheduled_start,
            scheduled_end=new.scheduled_end,
            status=new.status,
            hourly_rate=new.hourly_rate,
            job_location=new.job_location,
            worker_name_snapshot=new.worker_name_snapshot,
            job_title_snapshot=new.job_title_snapshot,
            location_snapshot=new.location_snapshot,
            notes=new.notes,
            created_at=created_at,
            updated_at=created_at,
        )

    def with_changes(self, **changes: Any) -> "AttendanceRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "workerId": self.worker_id,
            "employerId": self.employer_id,
            "jobId": self.job_id,
            "businessId": self.business_id,
            "scheduledStart": _iso(self.scheduled_start),
            "scheduledEnd": _iso(self.scheduled_end),
            "status": self.status.value,
            "clockInAt": _iso(self.clock_in_at),
            "clockOutAt": _iso(self.clock_out_at),
            "isLate": self.is_late,
            "hourlyRate": self.hourly_rate,
            "totalHours": self.total_hours,
            "earnings": self.earnings,
            "jobLocation": _location(self.job_location),
            "clockInLocation": _location(self.clock_in_location),
            "clockOutLocation": _location(self.clock_out_location),
            "locationValidated": self.location_validated,
            "locationValidationMessage": self.location_validation_message,
            "clockInDistance": self.clock_in_distance,
            "clockOutDistance": self.clock_out_distance,
            "workerNameSnapshot": self.worker_name_snapshot,
            "jobTitleSnapshot": self.job_title_snapshot,
            "locationSnapshot": self.location_snapshot,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


def resolve_hourly_rate(record: AttendanceRecord, job_rate: Optional[float] = None) -> float:
    """Record rate, then the job's rate, then 0."""

    if record.hourly_rate is not None:
        return float(record.hourly_rate)
    if job_rate is not None:
        return float(job_rate)
    return 0.0
