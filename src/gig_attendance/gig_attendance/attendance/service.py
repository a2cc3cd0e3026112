from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import structlog

from ..common.actor import Actor
from ..common.datetime_utils import coerce_datetime, ensure_utc, format_hhmm, now_utc
from ..common.validators import require_non_negative
from ..core.constants import LOCATION_TBD, UNTITLED_ROLE
from ..core.enums import AttendanceStatus, CompletionMode
from ..core.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from ..directory.lookup import find_job
from ..directory.model import Job, Worker
from ..directory.repository import BusinessRepository, JobRepository, WorkerRepository
from ..directory.snapshots import (
    build_location_snapshot,
    build_worker_name,
    pick_job_location_label,
    resolve_job_location,
)
from ..geo.geofence import validate_location
from ..geo.location import require_location
from ..geo.model import SiteLocation
from ..notifications.dispatcher import NotificationDispatcher
from ..payroll.calculator.base import EarningsCalculator
from ..payroll.calculator.standard_calculator import StandardEarningsCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, NewAttendance, resolve_hourly_rate
from .query import AttendanceQuery
from .repository import AttendanceRepository

logger = structlog.get_logger(__name__)

OWNER_ONLY = "Only the owning employer can update this record"


class AttendanceService:
    """Lifecycle of a single shift occurrence: scheduled -> clocked-in -> completed.

    `missed` is set by an outside process; it is preserved but never produced here.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        jobs: JobRepository,
        workers: WorkerRepository,
        businesses: BusinessRepository | None = None,
        *,
        notifications: NotificationDispatcher | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: EarningsCalculator | None = None,
    ):
        self._attendance = attendance
        self._jobs = jobs
        self._workers = workers
        self._businesses = businesses
        self._notifications = notifications
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or StandardEarningsCalculator()

    # ----- lookups -----

    def _load(self, record_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def _find_job(self, job_id: Optional[int]) -> Optional[Job]:
        return find_job(self._jobs, self._businesses, job_id)

    def _find_worker(self, worker_id: Optional[int]) -> Optional[Worker]:
        return self._workers.get_by_id(worker_id) if worker_id else None

    # ----- authorization -----

    @staticmethod
    def _ensure_participant(actor: Actor, record: AttendanceRecord, worker_message: str) -> None:
        if actor.is_worker and record.worker_id != actor.user_id:
            raise AuthorizationError(worker_message)
        if actor.is_employer and record.employer_id != actor.user_id:
            raise AuthorizationError(OWNER_ONLY)

    @staticmethod
    def _ensure_owner(actor: Actor, record: AttendanceRecord) -> None:
        if not actor.is_employer or record.employer_id != actor.user_id:
            raise AuthorizationError(OWNER_ONLY)

    # ----- snapshots -----

    @staticmethod
    def _backfill_snapshots(record: AttendanceRecord, job: Optional[Job], worker: Optional[Worker], *, fallback_label: Optional[str]) -> dict:
        changes: dict = {}
        if not record.worker_name_snapshot and worker is not None:
            changes["worker_name_snapshot"] = build_worker_name(worker)
        if not record.job_title_snapshot and job is not None and job.title:
            changes["job_title_snapshot"] = job.title
        if not record.location_snapshot and fallback_label:
            changes["location_snapshot"] = fallback_label
        return changes

    @staticmethod
    def _fallback_label(record: AttendanceRecord, job: Optional[Job]) -> str:
        return (
            record.location_snapshot
            or pick_job_location_label(job)
            or (job.business_address if job else None)
            or LOCATION_TBD
        )

    @staticmethod
    def _job_location(record: AttendanceRecord, job: Optional[Job]) -> Optional[SiteLocation]:
        if record.job_location is not None:
            return record.job_location
        if job is None:
            return None
        return resolve_job_location(job, label=pick_job_location_label(job))

    def _capture_location(
        self,
        raw,
        field_name: str,
        *,
        job_location: Optional[SiteLocation],
        fallback_label: str,
    ) -> tuple[SiteLocation, dict]:
        """Normalize the reported location and run the geofence check against the site."""

        label = fallback_label or (job_location.formatted_address if job_location else None)
        location = require_location(
            raw,
            field_name,
            formatted_address=label,
            fallback_label=label,
            allowed_radius=job_location.allowed_radius if job_location else None,
        )
        if job_location is None:
            return location, {}

        verdict = validate_location(job_location, location.latitude, location.longitude)
        return location, {
            "location_validated": verdict.is_valid,
            "location_validation_message": verdict.message,
            "distance": verdict.distance,
        }

    def _conflict(self, record_id: int, message: str) -> StateConflictError:
        current = self._attendance.get_by_id(record_id)
        logger.info(
            "attendance.transition_conflict",
            record_id=record_id,
            stored_status=current.status.value if current else None,
        )
        return StateConflictError(message)

    # ----- operations -----

    def schedule(
        self,
        actor: Actor,
        *,
        job_id,
        worker_id,
        scheduled_start,
        scheduled_end,
        hourly_rate=None,
        notes: Optional[str] = None,
        job_location=None,
        location_label: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        actor.require_employer("Only employers can schedule attendance")

        if not job_id or not worker_id:
            raise ValidationError("job and worker fields are required")
        if not scheduled_start or not scheduled_end:
            raise ValidationError("scheduledStart and scheduledEnd are required")

        start = coerce_datetime(scheduled_start)
        end = coerce_datetime(scheduled_end)
        if start is None or end is None:
            raise ValidationError("Invalid scheduledStart or scheduledEnd")
        if end <= start:
            raise ValidationError("scheduledEnd must be after scheduledStart")

        job = self._find_job(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.employer_id != actor.user_id:
            raise AuthorizationError("You can only schedule attendance for your own jobs")
        if job.business is None:
            raise ValidationError("Job must be associated with a business")

        worker = self._find_worker(worker_id)
        if worker is None:
            raise NotFoundError("Worker not found")
        if not worker.is_worker:
            raise ValidationError("Selected user is not a worker")

        rate = require_non_negative(hourly_rate if hourly_rate is not None else job.hourly_rate, "hourlyRate")

        job_title = job.title or UNTITLED_ROLE
        location_snapshot = build_location_snapshot(job, override=location_label, job_title=job_title)
        site = resolve_job_location(job, override=job_location, label=location_snapshot)

        record = self._attendance.create(
            NewAttendance(
                worker_id=worker.user_id,
                employer_id=actor.user_id,
                job_id=job.job_id,
                business_id=job.business_id,
                scheduled_start=start,
                scheduled_end=end,
                hourly_rate=rate,
                job_location=site,
                worker_name_snapshot=build_worker_name(worker),
                job_title_snapshot=job_title,
                location_snapshot=location_snapshot,
                notes=notes,
            )
        )
        logger.info("attendance.scheduled", record_id=record.record_id, job_id=job.job_id, worker_id=worker.user_id)
        return record

    def get(self, actor: Actor, record_id: int) -> AttendanceRecord:
        record = self._load(record_id)
        if actor.is_worker and record.worker_id != actor.user_id:
            raise AuthorizationError("You can only view your own attendance records")
        if actor.is_employer and record.employer_id != actor.user_id:
            raise AuthorizationError("You do not have access to this attendance record")
        return record

    def list_records(self, actor: Actor, query: AttendanceQuery | None = None) -> Sequence[AttendanceRecord]:
        return self._attendance.find((query or AttendanceQuery()).scoped_to(actor))

    def clock_in(self, actor: Actor, record_id: int, *, location=None, now: Optional[datetime] = None) -> AttendanceRecord:
        now = ensure_utc(now or now_utc())
        record = self._load(record_id)
        self._ensure_participant(actor, record, "You can only clock in for your own shift")

        if record.clock_in_at is not None:
            raise StateConflictError("Already clocked in")
        if record.status != AttendanceStatus.SCHEDULED:
            raise StateConflictError(f"Cannot clock in a {record.status.value} shift")

        job = self._find_job(record.job_id)
        worker = self._find_worker(record.worker_id)
        fallback_label = self._fallback_label(record, job)
        job_location = self._job_location(record, job)

        decision = self._factory.for_clock_in(record=record, now=now).decide_clock_in(record=record, now=now)
        changes = {
            "status": AttendanceStatus.CLOCKED_IN,
            "clock_in_at": now,
            "is_late": decision.is_late,
            "job_location": job_location,
            "updated_at": now,
            **self._backfill_snapshots(record, job, worker, fallback_label=fallback_label),
        }
        if not record.hourly_rate and job is not None and job.hourly_rate:
            changes["hourly_rate"] = job.hourly_rate

        if location is not None:
            reported, verdict = self._capture_location(
                location, "clockInLocation", job_location=job_location, fallback_label=fallback_label
            )
            changes["clock_in_location"] = reported
            if verdict:
                changes["clock_in_distance"] = verdict.pop("distance")
                changes.update(verdict)

        updated = record.with_changes(**changes)
        if not self._attendance.save_transition(updated, expected_status=AttendanceStatus.SCHEDULED):
            raise self._conflict(record.record_id, "Already clocked in")

        logger.info(
            "attendance.clocked_in",
            record_id=updated.record_id,
            is_late=updated.is_late,
            location_validated=updated.location_validated,
        )
        self._notify(
            actor,
            "attendance_check_in",
            updated,
            at=now,
            data={"recordId": updated.record_id, "jobTitle": updated.job_title_snapshot},
        )
        return updated

    def clock_out(
        self,
        actor: Actor,
        record_id: int,
        *,
        location=None,
        hourly_rate=None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = ensure_utc(now or now_utc())
        record = self._load(record_id)
        self._ensure_participant(actor, record, "You can only clock out for your own shift")

        if record.clock_in_at is None:
            raise StateConflictError("Clock in before clocking out")
        if record.clock_out_at is not None:
            raise StateConflictError("Already clocked out")
        if record.status != AttendanceStatus.CLOCKED_IN:
            raise StateConflictError(f"Cannot clock out a {record.status.value} shift")

        rate_override = require_non_negative(hourly_rate, "hourlyRate") if hourly_rate is not None else None
        updated = self._complete(
            record,
            CompletionMode.CLOCK_OUT,
            now=now,
            rate_override=rate_override,
            location=location,
        )
        if not self._attendance.save_transition(updated, expected_status=AttendanceStatus.CLOCKED_IN):
            raise self._conflict(record.record_id, "Already clocked out")

        logger.info("attendance.clocked_out", record_id=updated.record_id, total_hours=updated.total_hours)
        self._notify(
            actor,
            "attendance_check_out",
            updated,
            at=updated.clock_out_at,
            data={"recordId": updated.record_id, "totalHours": updated.total_hours, "earnings": updated.earnings},
        )
        return updated

    def mark_complete(self, actor: Actor, record_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = ensure_utc(now or now_utc())
        record = self._load(record_id)
        self._ensure_owner(actor, record)

        if record.clock_in_at is None:
            raise StateConflictError("Clock in before marking complete")
        if record.status != AttendanceStatus.CLOCKED_IN:
            raise StateConflictError("Only clocked-in shifts can be marked complete")

        updated = self._complete(record, CompletionMode.MARK_COMPLETE, now=now)
        if not self._attendance.save_transition(updated, expected_status=AttendanceStatus.CLOCKED_IN):
            raise self._conflict(record.record_id, "Only clocked-in shifts can be marked complete")

        logger.info("attendance.marked_complete", record_id=updated.record_id, total_hours=updated.total_hours)
        return updated

    def update_hours(
        self,
        actor: Actor,
        record_id: int,
        *,
        total_hours,
        hourly_rate=None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        if total_hours is None:
            raise ValidationError("totalHours is required")
        hours = require_non_negative(total_hours, "totalHours")

        now = ensure_utc(now or now_utc())
        record = self._load(record_id)
        self._ensure_owner(actor, record)

        job = self._find_job(record.job_id)
        if hourly_rate is not None:
            rate = require_non_negative(hourly_rate, "hourlyRate")
        else:
            rate = resolve_hourly_rate(record, job.hourly_rate if job else None)

        pay = self._calculator.for_hours(total_hours=hours, hourly_rate=rate)
        updated = record.with_changes(
            total_hours=pay.total_hours,
            hourly_rate=pay.hourly_rate,
            earnings=pay.earnings,
            updated_at=now,
            **self._backfill_snapshots(
                record,
                job,
                self._find_worker(record.worker_id),
                fallback_label=pick_job_location_label(job),
            ),
        )
        if not self._attendance.save_hours(updated):
            raise NotFoundError("Attendance record not found")
        logger.info("attendance.hours_updated", record_id=updated.record_id, total_hours=updated.total_hours)
        # A concurrent transition may have moved the status since it was read.
        return self._attendance.get_by_id(record_id) or updated

    # ----- internals -----

    def _complete(
        self,
        record: AttendanceRecord,
        mode: CompletionMode,
        *,
        now: datetime,
        rate_override: Optional[float] = None,
        location=None,
    ) -> AttendanceRecord:
        job = self._find_job(record.job_id)
        worker = self._find_worker(record.worker_id)

        decision = self._factory.for_completion(mode).decide_completion(record=record, now=now)
        rate = rate_override if rate_override is not None else resolve_hourly_rate(record, job.hourly_rate if job else None)
        pay = self._calculator.for_interval(
            clock_in=ensure_utc(record.clock_in_at),
            clock_out=decision.clock_out_at,
            hourly_rate=rate,
        )

        if decision.captures_location:
            fallback_label = self._fallback_label(record, job)
        else:
            fallback_label = record.location_snapshot or pick_job_location_label(job)

        changes = {
            "status": AttendanceStatus.COMPLETED,
            "clock_out_at": decision.clock_out_at,
            "total_hours": pay.total_hours,
            "hourly_rate": pay.hourly_rate,
            "earnings": pay.earnings,
            "updated_at": now,
            **self._backfill_snapshots(record, job, worker, fallback_label=fallback_label),
        }

        if decision.captures_location:
            job_location = self._job_location(record, job)
            changes["job_location"] = job_location
            if location is not None:
                reported, verdict = self._capture_location(
                    location, "clockOutLocation", job_location=job_location, fallback_label=fallback_label
                )
                changes["clock_out_location"] = reported
                if verdict:
                    changes["clock_out_distance"] = verdict.pop("distance")
                    changes.update(verdict)

        return record.with_changes(**changes)

    def _notify(self, actor: Actor, template_key: str, record: AttendanceRecord, *, at: datetime, data: dict) -> None:
        if self._notifications is None:
            return
        name = record.worker_name_snapshot or "Worker"
        self._notifications.notify(actor.user_id, template_key, (name, format_hhmm(at)), data)
