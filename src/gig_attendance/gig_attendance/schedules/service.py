from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from ..attendance.model import NewAttendance
from ..attendance.repository import AttendanceRepository
from ..common.actor import Actor
from ..common.datetime_utils import ensure_utc, now_utc
from ..core.constants import MAX_GENERATED_OCCURRENCES, UNTITLED_ROLE
from ..core.enums import JobStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from ..directory.lookup import find_job
from ..directory.model import Job
from ..directory.repository import BusinessRepository, JobRepository, WorkerRepository
from ..directory.snapshots import build_location_snapshot, build_worker_name, resolve_job_location
from .recurrence import build_occurrences

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    created: int = 0
    skipped: int = 0
    planned: int = 0
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {"created": self.created, "skipped": self.skipped, "planned": self.planned, "reason": self.reason}


class ScheduleService:
    """Turns a job's schedule rule into scheduled attendance records for one worker."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        jobs: JobRepository,
        workers: WorkerRepository,
        businesses: BusinessRepository | None = None,
        *,
        max_occurrences: int = MAX_GENERATED_OCCURRENCES,
    ):
        self._attendance = attendance
        self._jobs = jobs
        self._workers = workers
        self._businesses = businesses
        self._max_occurrences = int(max_occurrences)

    def _load_job(self, job_id: int) -> Job:
        job = find_job(self._jobs, self._businesses, job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    def generate_for_assignment(
        self,
        actor: Actor,
        *,
        job_id: int,
        worker_id: int,
        max_occurrences: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> GenerationResult:
        actor.require_employer("Only employers can generate attendance")
        now = ensure_utc(now or now_utc())

        job = self._load_job(job_id)
        if job.employer_id != actor.user_id:
            raise AuthorizationError("You can only schedule attendance for your own jobs")

        if job.schedule is None:
            return GenerationResult(reason="missing-schedule")
        if job.status == JobStatus.CLOSED:
            return GenerationResult(reason="job-closed")

        worker = self._workers.get_by_id(worker_id)
        if worker is None:
            return GenerationResult(reason="worker-not-found")

        occurrences = build_occurrences(
            job.schedule,
            now=now,
            max_occurrences=max_occurrences or self._max_occurrences,
        )
        if not occurrences:
            return GenerationResult(reason="no-occurrences")

        existing = self._attendance.existing_starts(
            worker_id=worker.user_id,
            job_id=job.job_id,
            starts=[occ.start for occ in occurrences],
        )
        existing = {ensure_utc(s) for s in existing}
        fresh = [occ for occ in occurrences if occ.start not in existing]
        if not fresh:
            return GenerationResult(skipped=len(occurrences), planned=len(occurrences), reason="all-exist")

        job_title = job.title or UNTITLED_ROLE
        location_snapshot = build_location_snapshot(job, job_title=job_title)
        site = resolve_job_location(job, label=location_snapshot)
        worker_name = build_worker_name(worker)

        payloads = [
            NewAttendance(
                worker_id=worker.user_id,
                employer_id=job.employer_id,
                job_id=job.job_id,
                business_id=job.business_id,
                scheduled_start=occ.start,
                scheduled_end=occ.end,
                hourly_rate=job.hourly_rate,
                job_location=site,
                worker_name_snapshot=worker_name,
                job_title_snapshot=job_title,
                location_snapshot=location_snapshot,
            )
            for occ in fresh
        ]
        created = self._attendance.insert_many(payloads)

        result = GenerationResult(
            created=created,
            skipped=len(occurrences) - created,
            planned=len(occurrences),
        )
        logger.info(
            "schedule.generated",
            job_id=job.job_id,
            worker_id=worker.user_id,
            created=result.created,
            skipped=result.skipped,
            planned=result.planned,
        )
        return result
