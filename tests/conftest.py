from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

import pytest

from src.gig_attendance.gig_attendance.attendance.model import AttendanceRecord, NewAttendance
from src.gig_attendance.gig_attendance.attendance.query import AttendanceQuery
from src.gig_attendance.gig_attendance.attendance.repository import DUPLICATE_OCCURRENCE
from src.gig_attendance.gig_attendance.attendance.service import AttendanceService
from src.gig_attendance.gig_attendance.common.actor import Actor
from src.gig_attendance.gig_attendance.common.references import Unresolved
from src.gig_attendance.gig_attendance.core.enums import AttendanceStatus, Recurrence, Role
from src.gig_attendance.gig_attendance.core.exceptions import StateConflictError
from src.gig_attendance.gig_attendance.directory.model import Business, Job, ScheduleRule, Worker
from src.gig_attendance.gig_attendance.geo.model import CoordinatePair
from src.gig_attendance.gig_attendance.notifications.dispatcher import NotificationDispatcher
from src.gig_attendance.gig_attendance.reporting.service import ReportingService
from src.gig_attendance.gig_attendance.schedules.service import ScheduleService

# Monday
NOW = datetime(2025, 11, 3, 8, 0, tzinfo=timezone.utc)

SITE_LAT = 40.7128
SITE_LNG = -74.0060

EMPLOYER_ID = 10
OTHER_EMPLOYER_ID = 11
WORKER_ID = 20
OTHER_WORKER_ID = 21
BUSINESS_ID = 5
JOB_ID = 100


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _key_exists(self, new: NewAttendance) -> bool:
        return any(
            (r.worker_id, r.job_id, r.scheduled_start) == new.occurrence_key for r in self.records.values()
        )

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(record_id)

    def create(self, new: NewAttendance) -> AttendanceRecord:
        if self._key_exists(new):
            raise StateConflictError(DUPLICATE_OCCURRENCE)
        self._id += 1
        record = AttendanceRecord.from_new(self._id, new, created_at=NOW)
        self.records[self._id] = record
        return record

    def insert_many(self, items) -> int:
        created = 0
        for item in items:
            if self._key_exists(item):
                continue
            self.create(item)
            created += 1
        return created

    def existing_starts(self, *, worker_id: int, job_id: int, starts: Iterable[datetime]) -> set[datetime]:
        wanted = set(starts)
        return {
            r.scheduled_start
            for r in self.records.values()
            if r.worker_id == worker_id and r.job_id == job_id and r.scheduled_start in wanted
        }

    def save_transition(self, record: AttendanceRecord, *, expected_status: AttendanceStatus) -> bool:
        stored = self.records.get(record.record_id)
        if stored is None or stored.status != expected_status:
            return False
        self.records[record.record_id] = record
        return True

    def save_hours(self, record: AttendanceRecord) -> bool:
        stored = self.records.get(record.record_id)
        if stored is None:
            return False
        self.records[record.record_id] = stored.with_changes(
            total_hours=record.total_hours,
            hourly_rate=record.hourly_rate,
            earnings=record.earnings,
            worker_name_snapshot=record.worker_name_snapshot,
            job_title_snapshot=record.job_title_snapshot,
            location_snapshot=record.location_snapshot,
            updated_at=record.updated_at,
        )
        return True

    def put(self, record: AttendanceRecord) -> None:
        self.records[record.record_id] = record

    def find(self, query: AttendanceQuery):
        items = [r for r in self.records.values() if query.matches(r)]
        items.sort(key=lambda r: r.scheduled_start, reverse=not query.ascending)
        return items


class InMemoryById:
    def __init__(self, items: dict):
        self.items = items

    def get_by_id(self, item_id: int):
        return self.items.get(item_id)


class RecordingSink:
    def __init__(self):
        self.sent: list[dict] = []

    def send(self, recipient_id: int, *, title: str, body: str, data) -> None:
        self.sent.append({"recipient_id": recipient_id, "title": title, "body": body, "data": dict(data)})


def weekday_rule(**overrides) -> ScheduleRule:
    values = dict(
        start_date=datetime(2025, 11, 3, tzinfo=timezone.utc),
        start_time="09:00",
        end_time="17:00",
        recurrence=Recurrence.WEEKLY,
        work_days=("weekday",),
    )
    values.update(overrides)
    return ScheduleRule(**values)


def make_job(**overrides) -> Job:
    values = dict(
        job_id=JOB_ID,
        employer_id=EMPLOYER_ID,
        title="Barista",
        hourly_rate=20.0,
        location=CoordinatePair(
            latitude=SITE_LAT,
            longitude=SITE_LNG,
            formatted_address="1 Main St, New York",
            allowed_radius=150,
        ),
        business=Unresolved(BUSINESS_ID),
        schedule=weekday_rule(),
    )
    values.update(overrides)
    return Job(**values)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def employer() -> Actor:
    return Actor(user_id=EMPLOYER_ID, role=Role.EMPLOYER)


@pytest.fixture
def other_employer() -> Actor:
    return Actor(user_id=OTHER_EMPLOYER_ID, role=Role.EMPLOYER)


@pytest.fixture
def worker() -> Actor:
    return Actor(user_id=WORKER_ID, role=Role.WORKER)


@pytest.fixture
def other_worker() -> Actor:
    return Actor(user_id=OTHER_WORKER_ID, role=Role.WORKER)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def jobs_repo() -> InMemoryById:
    return InMemoryById({JOB_ID: make_job()})


@pytest.fixture
def workers_repo() -> InMemoryById:
    return InMemoryById(
        {
            WORKER_ID: Worker(user_id=WORKER_ID, first_name="Ana", last_name="Lopez", email="ana@example.com"),
            OTHER_WORKER_ID: Worker(user_id=OTHER_WORKER_ID, full_name="Ben Ortiz"),
            EMPLOYER_ID: Worker(user_id=EMPLOYER_ID, full_name="Boss", user_type="employer"),
        }
    )


@pytest.fixture
def businesses_repo() -> InMemoryById:
    return InMemoryById(
        {
            BUSINESS_ID: Business(
                business_id=BUSINESS_ID,
                name="Cafe Uno",
                location=CoordinatePair(latitude=40.7, longitude=-74.0, formatted_address="9 Side St"),
            )
        }
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def service(attendance_repo, jobs_repo, workers_repo, businesses_repo, sink) -> AttendanceService:
    return AttendanceService(
        attendance_repo,
        jobs_repo,
        workers_repo,
        businesses_repo,
        notifications=NotificationDispatcher(sink),
    )


@pytest.fixture
def schedule_service(attendance_repo, jobs_repo, workers_repo, businesses_repo) -> ScheduleService:
    return ScheduleService(attendance_repo, jobs_repo, workers_repo, businesses_repo)


@pytest.fixture
def reporting_service(attendance_repo, jobs_repo, workers_repo, businesses_repo) -> ReportingService:
    return ReportingService(attendance_repo, jobs_repo, workers_repo, businesses_repo)


@pytest.fixture
def scheduled_record(service, employer, now) -> AttendanceRecord:
    """A 10:00-18:00 shift on the fixed `now` day."""

    return service.schedule(
        employer,
        job_id=JOB_ID,
        worker_id=WORKER_ID,
        scheduled_start="2025-11-03T10:00:00Z",
        scheduled_end="2025-11-03T18:00:00Z",
        now=now,
    )


@pytest.fixture
def job_factory():
    return make_job
