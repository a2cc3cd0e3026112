from __future__ import annotations

from typing import Optional

from ..common.references import Unresolved
from ..core.enums import JobStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, load_json
from ..geo.location import parse_location_input
from .model import Business, Job, ScheduleRule, Worker


class MySQLJobRepository:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, job_id: int) -> Optional[Job]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT job_id, employer_id, business_id, title, hourly_rate, location_json,
                       business_address, schedule_json, status
                FROM jobs
                WHERE job_id=%s
                """,
                (int(job_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

            schedule = load_json(r.get("schedule_json"))
            return Job(
                job_id=int(r["job_id"]),
                employer_id=int(r["employer_id"]),
                title=r.get("title"),
                hourly_rate=float(r["hourly_rate"]) if r.get("hourly_rate") is not None else None,
                location=parse_location_input(load_json(r.get("location_json"))),
                business=Unresolved(int(r["business_id"])) if r.get("business_id") else None,
                business_address=r.get("business_address"),
                schedule=ScheduleRule.from_mapping(schedule) if schedule else None,
                status=JobStatus(r.get("status") or JobStatus.ACTIVE.value),
            )


class MySQLWorkerRepository:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, first_name, last_name, full_name, email, user_type
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Worker(
                user_id=int(r["user_id"]),
                first_name=r.get("first_name"),
                last_name=r.get("last_name"),
                full_name=r.get("full_name"),
                email=r.get("email"),
                user_type=r.get("user_type") or "worker",
            )


class MySQLBusinessRepository:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, business_id: int) -> Optional[Business]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT business_id, name, location_json FROM businesses WHERE business_id=%s",
                (int(business_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Business(
                business_id=int(r["business_id"]),
                name=r.get("name"),
                location=parse_location_input(load_json(r.get("location_json"))),
            )
