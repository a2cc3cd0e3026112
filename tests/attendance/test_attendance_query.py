from datetime import date, datetime, timezone

import pytest

from src.gig_attendance.gig_attendance.attendance.model import AttendanceRecord
from src.gig_attendance.gig_attendance.attendance.query import AttendanceQuery, parse_day, parse_status_filter
from src.gig_attendance.gig_attendance.common.actor import Actor
from src.gig_attendance.gig_attendance.core.enums import AttendanceStatus, Role
from src.gig_attendance.gig_attendance.core.exceptions import ValidationError

# Crosses midnight UTC
OVERNIGHT = AttendanceRecord(
    record_id=1,
    worker_id=20,
    employer_id=10,
    job_id=100,
    business_id=5,
    scheduled_start=datetime(2025, 11, 7, 18, 30, tzinfo=timezone.utc),
    scheduled_end=datetime(2025, 11, 8, 18, 29, 59, tzinfo=timezone.utc),
)


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2025, 11, 6), False),
        (date(2025, 11, 7), True),
        (date(2025, 11, 8), True),
        (date(2025, 11, 9), False),
    ],
)
def test_single_day_filter_uses_overlap(day, expected):
    assert AttendanceQuery(day=day).matches(OVERNIGHT) is expected


def test_range_filter_uses_overlap():
    assert AttendanceQuery(start_date=date(2025, 11, 8), end_date=date(2025, 11, 10)).matches(OVERNIGHT)
    assert AttendanceQuery(end_date=date(2025, 11, 7)).matches(OVERNIGHT)
    assert not AttendanceQuery(start_date=date(2025, 11, 9)).matches(OVERNIGHT)
    assert not AttendanceQuery(end_date=date(2025, 11, 6)).matches(OVERNIGHT)


def test_record_ending_at_midnight_does_not_match_next_day():
    record = AttendanceRecord(
        record_id=2,
        worker_id=20,
        employer_id=10,
        job_id=100,
        scheduled_start=datetime(2025, 11, 7, 20, 0, tzinfo=timezone.utc),
        scheduled_end=datetime(2025, 11, 8, 0, 0, tzinfo=timezone.utc),
    )

    assert AttendanceQuery(day=date(2025, 11, 7)).matches(record)
    assert not AttendanceQuery(day=date(2025, 11, 8)).matches(record)


def test_bounds_cover_whole_days():
    start, end = AttendanceQuery(start_date=date(2025, 11, 1), end_date=date(2025, 11, 2)).bounds()

    assert start == datetime(2025, 11, 1, tzinfo=timezone.utc)
    assert end == datetime(2025, 11, 2, 23, 59, 59, 999999, tzinfo=timezone.utc)


def test_status_and_id_filters():
    assert AttendanceQuery(status=AttendanceStatus.SCHEDULED, worker_id=20, business_id=5).matches(OVERNIGHT)
    assert not AttendanceQuery(status=AttendanceStatus.COMPLETED).matches(OVERNIGHT)
    assert not AttendanceQuery(job_id=101).matches(OVERNIGHT)
    assert not AttendanceQuery(employer_id=11).matches(OVERNIGHT)


def test_parse_status_filter():
    assert parse_status_filter(None) is None
    assert parse_status_filter("all") is None
    assert parse_status_filter("") is None
    assert parse_status_filter("clocked_in") == AttendanceStatus.CLOCKED_IN
    assert parse_status_filter("Completed") == AttendanceStatus.COMPLETED

    with pytest.raises(ValidationError, match="Invalid status filter"):
        parse_status_filter("paused")


def test_parse_day():
    assert parse_day("2025-11-07", "date") == date(2025, 11, 7)
    assert parse_day("", "date") is None

    with pytest.raises(ValidationError, match="Invalid from parameter"):
        parse_day("next week", "from")


def test_from_params_reads_camel_case():
    query = AttendanceQuery.from_params(
        {"workerId": "20", "jobId": "100", "status": "scheduled", "startDate": "2025-11-01", "endDate": "2025-11-30"}
    )

    assert query.worker_id == 20
    assert query.job_id == 100
    assert query.status == AttendanceStatus.SCHEDULED
    assert query.start_date == date(2025, 11, 1)
    assert query.end_date == date(2025, 11, 30)

    with pytest.raises(ValidationError, match="Invalid workerId parameter"):
        AttendanceQuery.from_params({"workerId": "abc"})


def test_scoped_to_forces_caller_identity():
    query = AttendanceQuery(worker_id=99, employer_id=99)

    assert query.scoped_to(Actor(user_id=20, role=Role.WORKER)).worker_id == 20
    assert query.scoped_to(Actor(user_id=10, role=Role.EMPLOYER)).employer_id == 10
