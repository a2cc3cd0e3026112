"""Read models for employers (daily management view) and workers (schedule)."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord, resolve_hourly_rate
from ..attendance.query import AttendanceQuery, parse_day, parse_status_filter
from ..attendance.repository import AttendanceRepository
from ..common.actor import Actor
from ..common.datetime_utils import ensure_utc, format_hhmm, format_iso_date, now_utc, round2, start_of_day_utc
from ..common.references import resolved_value
from ..core.constants import LOCATION_TBD, UNTITLED_ROLE
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..directory.lookup import find_job
from ..directory.model import Job, Worker
from ..directory.repository import BusinessRepository, JobRepository, WorkerRepository
from ..directory.snapshots import build_worker_name, pick_job_location_label
from ..geo.location import format_location_label


def location_label(record: AttendanceRecord, job: Optional[Job] = None) -> str:
    snapshot = format_location_label(record.location_snapshot)
    if snapshot:
        return snapshot
    from_job = pick_job_location_label(job)
    if from_job:
        return from_job
    business = resolved_value(job.business) if job is not None else None
    if business is not None and business.name:
        return business.name
    return LOCATION_TBD


def management_row(record: AttendanceRecord, job: Optional[Job] = None, worker: Optional[Worker] = None) -> dict:
    return {
        "id": record.record_id,
        "workerId": record.worker_id,
        "workerName": build_worker_name(worker, record.worker_name_snapshot),
        "jobId": record.job_id,
        "jobTitle": record.job_title_snapshot or (job.title if job else None) or UNTITLED_ROLE,
        "location": location_label(record, job),
        "date": format_iso_date(record.scheduled_start),
        "clockIn": format_hhmm(record.clock_in_at),
        "clockOut": format_hhmm(record.clock_out_at),
        "totalHours": float(record.total_hours or 0),
        "hourlyRate": resolve_hourly_rate(record, job.hourly_rate if job else None),
        "earnings": float(record.earnings or 0),
        "status": record.status.value,
        "isLate": bool(record.is_late),
        "scheduledStart": format_hhmm(record.scheduled_start),
        "scheduledEnd": format_hhmm(record.scheduled_end),
    }


def management_summary(rows: Iterable[dict]) -> dict:
    """Totals over management rows; hour and money sums are rounded at every step."""

    summary = {"totalWorkers": 0, "completedShifts": 0, "totalHours": 0.0, "totalPayroll": 0.0, "lateArrivals": 0}
    for row in rows:
        summary["totalWorkers"] += 1
        if row["status"] == AttendanceStatus.COMPLETED.value:
            summary["completedShifts"] += 1
        if row["isLate"]:
            summary["lateArrivals"] += 1
        summary["totalHours"] = round2(summary["totalHours"] + (row["totalHours"] or 0))
        summary["totalPayroll"] = round2(summary["totalPayroll"] + (row["earnings"] or 0))
    return summary


def schedule_entry(record: AttendanceRecord, *, now: datetime, job: Optional[Job] = None) -> dict:
    start = ensure_utc(record.scheduled_start)
    end = ensure_utc(record.scheduled_end)
    end_of_today = start_of_day_utc(now) + timedelta(days=1)

    return {
        "id": record.record_id,
        "date": format_iso_date(start),
        "dayOfWeek": start.strftime("%A"),
        "status": record.status.value,
        "jobId": record.job_id,
        "jobTitle": record.job_title_snapshot or (job.title if job else None) or UNTITLED_ROLE,
        "location": location_label(record, job),
        "scheduledStart": start.isoformat(),
        "scheduledEnd": end.isoformat(),
        "startTime": format_hhmm(start),
        "endTime": format_hhmm(end),
        "scheduledHours": round2((end - start).total_seconds() / 3600),
        "totalHours": float(record.total_hours or 0),
        "hourlyRate": resolve_hourly_rate(record, job.hourly_rate if job else None),
        "earnings": float(record.earnings or 0),
        "isLate": bool(record.is_late),
        "isPast": end <= now,
        "isUpcoming": start > now,
        "isInProgress": start <= now < end,
        "isToday": start.date() == now.date(),
        "isFuture": start >= end_of_today,
    }


def section_totals(entries: Sequence[dict]) -> dict:
    totals = {"shifts": 0, "scheduledHours": 0.0, "workedHours": 0.0, "earnings": 0.0}
    for entry in entries:
        totals["shifts"] += 1
        totals["scheduledHours"] = round2(totals["scheduledHours"] + entry["scheduledHours"])
        totals["workedHours"] = round2(totals["workedHours"] + entry["totalHours"])
        totals["earnings"] = round2(totals["earnings"] + entry["earnings"])
    return totals


def group_schedule(entries: Sequence[dict]) -> list[dict]:
    """Bucket entries by UTC calendar day, ascending."""

    groups: dict[str, dict] = {}
    for entry in entries:
        group = groups.get(entry["date"])
        if group is None:
            groups[entry["date"]] = {
                "date": entry["date"],
                "dayOfWeek": entry["dayOfWeek"],
                "isPast": entry["isPast"],
                "isUpcoming": entry["isUpcoming"],
                "isFuture": entry["isFuture"],
                "isToday": entry["isToday"],
                "hasInProgress": entry["isInProgress"],
                "entries": [entry],
            }
            continue
        group["isPast"] = group["isPast"] and entry["isPast"]
        group["isUpcoming"] = group["isUpcoming"] or entry["isUpcoming"]
        group["isFuture"] = group["isFuture"] and entry["isFuture"]
        group["isToday"] = group["isToday"] or entry["isToday"]
        group["hasInProgress"] = group["hasInProgress"] or entry["isInProgress"]
        group["entries"].append(entry)

    return [
        {**group, "totals": section_totals(group["entries"])}
        for _, group in sorted(groups.items())
    ]


def schedule_summary(entries: Sequence[dict]) -> dict:
    by_status: dict[str, int] = {}
    past_count = upcoming_count = 0
    first_upcoming = last_past = None

    for entry in entries:
        by_status[entry["status"]] = by_status.get(entry["status"], 0) + 1
        if entry["isPast"]:
            past_count += 1
            if last_past is None or entry["date"] > last_past:
                last_past = entry["date"]
        else:
            upcoming_count += 1
            if first_upcoming is None or entry["date"] < first_upcoming:
                first_upcoming = entry["date"]

    dates = [entry["date"] for entry in entries]
    return {
        "totalRecords": len(entries),
        "pastCount": past_count,
        "upcomingCount": upcoming_count,
        "byStatus": by_status,
        "firstUpcomingDate": first_upcoming,
        "lastPastDate": last_past,
        "range": {"start": min(dates), "end": max(dates)} if dates else None,
    }


class ReportingService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        jobs: JobRepository,
        workers: WorkerRepository,
        businesses: BusinessRepository | None = None,
    ):
        self._attendance = attendance
        self._jobs = jobs
        self._workers = workers
        self._businesses = businesses

    def _jobs_for(self, records: Iterable[AttendanceRecord]) -> dict[int, Job]:
        jobs: dict[int, Job] = {}
        for job_id in {r.job_id for r in records if r.job_id}:
            job = find_job(self._jobs, self._businesses, job_id)
            if job is not None:
                jobs[job_id] = job
        return jobs

    def management_view(
        self,
        actor: Actor,
        day,
        *,
        business_id: Optional[int] = None,
        worker_id: Optional[int] = None,
        job_id: Optional[int] = None,
        status=None,
    ) -> dict:
        actor.require_employer("Only employers can access attendance management")
        if not day:
            raise ValidationError("The date query parameter is required")
        day = parse_day(day, "date")

        query = AttendanceQuery(
            employer_id=actor.user_id,
            business_id=business_id,
            worker_id=worker_id,
            job_id=job_id,
            status=parse_status_filter(status),
            day=day,
            ascending=True,
        )
        records = self._attendance.find(query)
        jobs = self._jobs_for(records)

        rows = []
        for record in records:
            worker = None if record.worker_name_snapshot else self._workers.get_by_id(record.worker_id)
            rows.append(management_row(record, jobs.get(record.job_id), worker))
        return {"records": rows, "summary": management_summary(rows)}

    def worker_schedule(
        self,
        actor: Actor,
        worker_id: int,
        *,
        status=None,
        job_id: Optional[int] = None,
        business_id: Optional[int] = None,
        from_date=None,
        to_date=None,
        now: Optional[datetime] = None,
    ) -> dict:
        if actor.is_worker and actor.user_id != worker_id:
            raise AuthorizationError("You can only view your own schedule")

        worker = self._workers.get_by_id(worker_id)
        if worker is None or not worker.is_worker:
            raise NotFoundError("Worker not found")

        query = AttendanceQuery(
            worker_id=worker.user_id,
            employer_id=actor.user_id if actor.is_employer else None,
            job_id=job_id,
            business_id=business_id,
            status=parse_status_filter(status),
            start_date=parse_day(from_date, "from"),
            end_date=parse_day(to_date, "to"),
            ascending=True,
        )

        now = ensure_utc(now or now_utc())
        records = sorted(self._attendance.find(query), key=lambda r: ensure_utc(r.scheduled_start))
        jobs = self._jobs_for(records)
        entries = [schedule_entry(r, now=now, job=jobs.get(r.job_id)) for r in records]

        return {
            "workerId": worker.user_id,
            "summary": schedule_summary(entries),
            "schedule": group_schedule(entries),
        }
