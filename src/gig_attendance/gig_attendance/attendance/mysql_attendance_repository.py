from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_ALLOWED_RADIUS_M
from ..core.enums import AttendanceStatus
from ..core.exceptions import StateConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    from_db_datetime,
    load_json,
    to_db_datetime,
)
from ..geo.model import SiteLocation
from .model import AttendanceRecord, NewAttendance
from .query import AttendanceQuery
from .repository import DUPLICATE_OCCURRENCE, AttendanceRepository

_COLUMNS = """
    record_id, worker_id, employer_id, job_id, business_id, scheduled_start, scheduled_end, status,
    clock_in_at, clock_out_at, is_late, hourly_rate, total_hours, earnings, notes,
    worker_name_snapshot, job_title_snapshot, location_snapshot,
    job_location_json, clock_in_location_json, clock_out_location_json,
    location_validated, location_validation_message, clock_in_distance, clock_out_distance,
    created_at, updated_at
"""

_INSERT = """
    INSERT {ignore} INTO attendance_records(
        worker_id, employer_id, job_id, business_id, scheduled_start, scheduled_end, status,
        hourly_rate, notes, worker_name_snapshot, job_title_snapshot, location_snapshot, job_location_json
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _site(value: Any) -> Optional[SiteLocation]:
    data = load_json(value)
    if not data:
        return None
    return SiteLocation(
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
        formatted_address=data.get("formattedAddress") or "",
        allowed_radius=float(data.get("allowedRadius", DEFAULT_ALLOWED_RADIUS_M)),
        is_active=bool(data.get("isActive", True)),
    )


def _site_json(value: Optional[SiteLocation]) -> Optional[str]:
    return dump_json(value.to_dict()) if value is not None else None


def _float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    validated = r.get("location_validated")
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        worker_id=int(r["worker_id"]),
        employer_id=int(r["employer_id"]),
        job_id=int(r["job_id"]),
        business_id=int(r["business_id"]) if r.get("business_id") is not None else None,
        scheduled_start=from_db_datetime(r["scheduled_start"]),
        scheduled_end=from_db_datetime(r["scheduled_end"]),
        status=AttendanceStatus(r["status"]),
        clock_in_at=from_db_datetime(r.get("clock_in_at")),
        clock_out_at=from_db_datetime(r.get("clock_out_at")),
        is_late=bool(r.get("is_late")),
        hourly_rate=_float(r.get("hourly_rate")),
        total_hours=float(r.get("total_hours") or 0),
        earnings=float(r.get("earnings") or 0),
        notes=r.get("notes"),
        worker_name_snapshot=r.get("worker_name_snapshot"),
        job_title_snapshot=r.get("job_title_snapshot"),
        location_snapshot=r.get("location_snapshot"),
        job_location=_site(r.get("job_location_json")),
        clock_in_location=_site(r.get("clock_in_location_json")),
        clock_out_location=_site(r.get("clock_out_location_json")),
        location_validated=bool(validated) if validated is not None else None,
        location_validation_message=r.get("location_validation_message"),
        clock_in_distance=_float(r.get("clock_in_distance")),
        clock_out_distance=_float(r.get("clock_out_distance")),
        created_at=from_db_datetime(r.get("created_at")),
        updated_at=from_db_datetime(r.get("updated_at")),
    )


def _insert_params(new: NewAttendance) -> tuple:
    return (
        new.worker_id,
        new.employer_id,
        new.job_id,
        new.business_id,
        to_db_datetime(new.scheduled_start),
        to_db_datetime(new.scheduled_end),
        new.status.value,
        new.hourly_rate,
        new.notes,
        new.worker_name_snapshot,
        new.job_title_snapshot,
        new.location_snapshot,
        _site_json(new.job_location),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(_INSERT.format(ignore=""), _insert_params(new))
            except mysql.connector.IntegrityError as exc:
                if exc.errno == errorcode.ER_DUP_ENTRY:
                    raise StateConflictError(DUPLICATE_OCCURRENCE) from exc
                raise
            record_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (record_id,))
            return _row_to_record(fetchone(cur))

    def insert_many(self, items: Sequence[NewAttendance]) -> int:
        if not items:
            return 0
        # INSERT IGNORE drops rows that hit uq_attendance_occurrence.
        with db_cursor(self._conn_factory) as (_, cur):
            created = 0
            for item in items:
                cur.execute(_INSERT.format(ignore="IGNORE"), _insert_params(item))
                created += int(cur.rowcount or 0)
            return created

    def existing_starts(self, *, worker_id: int, job_id: int, starts: Iterable[datetime]) -> set[datetime]:
        values = [to_db_datetime(s) for s in starts]
        if not values:
            return set()
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT scheduled_start
                FROM attendance_records
                WHERE worker_id=%s AND job_id=%s AND scheduled_start IN ({placeholders})
                """,
                (int(worker_id), int(job_id), *values),
            )
            return {from_db_datetime(r["scheduled_start"]) for r in fetchall(cur)}

    def save_transition(self, record: AttendanceRecord, *, expected_status: AttendanceStatus) -> bool:
        sql = """
            UPDATE attendance_records
            SET status=%s, clock_in_at=%s, clock_out_at=%s, is_late=%s,
                hourly_rate=%s, total_hours=%s, earnings=%s,
                worker_name_snapshot=%s, job_title_snapshot=%s, location_snapshot=%s,
                job_location_json=%s, clock_in_location_json=%s, clock_out_location_json=%s,
                location_validated=%s, location_validation_message=%s,
                clock_in_distance=%s, clock_out_distance=%s, notes=%s
            WHERE record_id=%s AND status=%s
        """
        params = (
            record.status.value,
            to_db_datetime(record.clock_in_at),
            to_db_datetime(record.clock_out_at),
            1 if record.is_late else 0,
            record.hourly_rate,
            record.total_hours,
            record.earnings,
            record.worker_name_snapshot,
            record.job_title_snapshot,
            record.location_snapshot,
            _site_json(record.job_location),
            _site_json(record.clock_in_location),
            _site_json(record.clock_out_location),
            None if record.location_validated is None else int(record.location_validated),
            record.location_validation_message,
            record.clock_in_distance,
            record.clock_out_distance,
            record.notes,
            record.record_id,
            expected_status.value,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return int(cur.rowcount or 0) == 1

    def save_hours(self, record: AttendanceRecord) -> bool:
        # updated_at is always set so the row counts as changed even when the hours are not.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET total_hours=%s, hourly_rate=%s, earnings=%s,
                    worker_name_snapshot=%s, job_title_snapshot=%s, location_snapshot=%s,
                    updated_at=%s
                WHERE record_id=%s
                """,
                (
                    record.total_hours,
                    record.hourly_rate,
                    record.earnings,
                    record.worker_name_snapshot,
                    record.job_title_snapshot,
                    record.location_snapshot,
                    to_db_datetime(record.updated_at or now_utc()),
                    record.record_id,
                ),
            )
            return int(cur.rowcount or 0) == 1

    def find(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        where = ["1=1"]
        params: list[Any] = []

        for column, value in (
            ("worker_id", query.worker_id),
            ("job_id", query.job_id),
            ("business_id", query.business_id),
            ("employer_id", query.employer_id),
        ):
            if value is not None:
                where.append(f"{column}=%s")
                params.append(int(value))
        if query.status is not None:
            where.append("status=%s")
            params.append(query.status.value)

        range_start, range_end = query.bounds()
        if range_end is not None:
            where.append("scheduled_start <= %s")
            params.append(to_db_datetime(range_end))
        if range_start is not None:
            where.append("scheduled_end > %s")
            params.append(to_db_datetime(range_start))

        order = "ASC" if query.ascending else "DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(where)}
                ORDER BY scheduled_start {order}
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
