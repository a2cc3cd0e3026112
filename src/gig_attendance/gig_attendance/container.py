from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import MAX_GENERATED_OCCURRENCES
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import (
    MySQLBusinessRepository,
    MySQLJobRepository,
    MySQLWorkerRepository,
)
from .directory.repository import BusinessRepository, JobRepository, WorkerRepository
from .notifications.dispatcher import NotificationDispatcher
from .notifications.sink import LoggingNotificationSink, NotificationSink
from .payroll.calculator.standard_calculator import StandardEarningsCalculator
from .reporting.service import ReportingService
from .schedules.service import ScheduleService


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    jobs_repo: JobRepository
    workers_repo: WorkerRepository
    businesses_repo: BusinessRepository

    attendance_service: AttendanceService
    schedule_service: ScheduleService
    reporting_service: ReportingService


def wire_services(
    *,
    attendance_repo: AttendanceRepository,
    jobs_repo: JobRepository,
    workers_repo: WorkerRepository,
    businesses_repo: BusinessRepository,
    notification_sink: Optional[NotificationSink] = None,
    max_occurrences: int = MAX_GENERATED_OCCURRENCES,
) -> Container:
    notifications = NotificationDispatcher(notification_sink or LoggingNotificationSink())
    attendance_service = AttendanceService(
        attendance_repo,
        jobs_repo,
        workers_repo,
        businesses_repo,
        notifications=notifications,
        strategy_factory=AttendanceStrategyFactory(),
        calculator=StandardEarningsCalculator(),
    )
    schedule_service = ScheduleService(
        attendance_repo,
        jobs_repo,
        workers_repo,
        businesses_repo,
        max_occurrences=max_occurrences,
    )
    reporting_service = ReportingService(attendance_repo, jobs_repo, workers_repo, businesses_repo)

    return Container(
        attendance_repo=attendance_repo,
        jobs_repo=jobs_repo,
        workers_repo=workers_repo,
        businesses_repo=businesses_repo,
        attendance_service=attendance_service,
        schedule_service=schedule_service,
        reporting_service=reporting_service,
    )


def build_container(
    *,
    db_config: dict,
    max_occurrences: int = MAX_GENERATED_OCCURRENCES,
    notification_sink: Optional[NotificationSink] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        jobs_repo=MySQLJobRepository(conn),
        workers_repo=MySQLWorkerRepository(conn),
        businesses_repo=MySQLBusinessRepository(conn),
        notification_sink=notification_sink,
        max_occurrences=max_occurrences,
    )
