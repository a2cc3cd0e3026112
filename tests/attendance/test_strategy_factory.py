from datetime import datetime, timezone

from src.gig_attendance.gig_attendance.attendance.factory import AttendanceStrategyFactory
from src.gig_attendance.gig_attendance.attendance.model import AttendanceRecord
from src.gig_attendance.gig_attendance.attendance.strategies.clock_in_strategy import (
    LateClockInStrategy,
    OnTimeClockInStrategy,
)
from src.gig_attendance.gig_attendance.attendance.strategies.mark_complete import EmployerMarkCompleteStrategy
from src.gig_attendance.gig_attendance.attendance.strategies.worker_clock_out import WorkerClockOutStrategy
from src.gig_attendance.gig_attendance.core.enums import AttendanceStatus, CompletionMode


def _record(**overrides):
    values = dict(
        record_id=1,
        worker_id=20,
        employer_id=10,
        job_id=100,
        scheduled_start=datetime(2025, 11, 3, 10, 0, tzinfo=timezone.utc),
        scheduled_end=datetime(2025, 11, 3, 18, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return AttendanceRecord(**values)


def test_factory_clock_in_before_start_is_on_time():
    record = _record()
    now = datetime(2025, 11, 3, 9, 55, tzinfo=timezone.utc)

    strategy = AttendanceStrategyFactory().for_clock_in(record=record, now=now)

    assert isinstance(strategy, OnTimeClockInStrategy)
    assert strategy.decide_clock_in(record=record, now=now).is_late is False


def test_factory_clock_in_exactly_at_start_is_on_time():
    record = _record()
    now = datetime(2025, 11, 3, 10, 0, tzinfo=timezone.utc)

    strategy = AttendanceStrategyFactory().for_clock_in(record=record, now=now)

    assert isinstance(strategy, OnTimeClockInStrategy)


def test_factory_clock_in_after_start_is_late():
    record = _record()
    now = datetime(2025, 11, 3, 10, 5, tzinfo=timezone.utc)

    strategy = AttendanceStrategyFactory().for_clock_in(record=record, now=now)

    assert isinstance(strategy, LateClockInStrategy)
    assert strategy.decide_clock_in(record=record, now=now).is_late is True


def test_factory_completion_modes():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_completion(CompletionMode.CLOCK_OUT), WorkerClockOutStrategy)
    assert isinstance(factory.for_completion(CompletionMode.MARK_COMPLETE), EmployerMarkCompleteStrategy)


def test_worker_clock_out_uses_now_and_captures_location():
    record = _record(status=AttendanceStatus.CLOCKED_IN, clock_in_at=datetime(2025, 11, 3, 10, 0, tzinfo=timezone.utc))
    now = datetime(2025, 11, 3, 16, 30, tzinfo=timezone.utc)

    decision = WorkerClockOutStrategy().decide_completion(record=record, now=now)

    assert decision.clock_out_at == now
    assert decision.captures_location is True


def test_mark_complete_uses_scheduled_end_after_clock_in():
    record = _record(status=AttendanceStatus.CLOCKED_IN, clock_in_at=datetime(2025, 11, 3, 10, 0, tzinfo=timezone.utc))
    now = datetime(2025, 11, 3, 20, 0, tzinfo=timezone.utc)

    decision = EmployerMarkCompleteStrategy().decide_completion(record=record, now=now)

    assert decision.clock_out_at == record.scheduled_end
    assert decision.captures_location is False


def test_mark_complete_falls_back_to_now_when_clock_in_after_scheduled_end():
    record = _record(status=AttendanceStatus.CLOCKED_IN, clock_in_at=datetime(2025, 11, 3, 18, 30, tzinfo=timezone.utc))
    now = datetime(2025, 11, 3, 19, 0, tzinfo=timezone.utc)

    decision = EmployerMarkCompleteStrategy().decide_completion(record=record, now=now)

    assert decision.clock_out_at == now
