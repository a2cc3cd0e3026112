from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, json_body, success
from ..container import Container
from ..reporting.service import management_row
from .query import AttendanceQuery


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_schedule")
    def schedule_attendance():
        body = json_body()
        record = container.attendance_service.schedule(
            current_actor(),
            job_id=body.get("job"),
            worker_id=body.get("worker"),
            scheduled_start=body.get("scheduledStart"),
            scheduled_end=body.get("scheduledEnd"),
            hourly_rate=body.get("hourlyRate"),
            notes=body.get("notes"),
            job_location=body.get("jobLocation"),
            location_label=body.get("locationSnapshot"),
        )
        return success(record.to_dict(), 201)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def list_attendance():
        query = AttendanceQuery.from_params(request.args)
        records = container.attendance_service.list_records(current_actor(), query)
        return success([r.to_dict() for r in records], results=len(records))

    @app.route("/api/attendance/<int:record_id>", methods=["GET"], endpoint="attendance_get")
    def get_attendance(record_id: int):
        record = container.attendance_service.get(current_actor(), record_id)
        return success(record.to_dict())

    @app.route("/api/attendance/<int:record_id>/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    def clock_in(record_id: int):
        body = json_body()
        record = container.attendance_service.clock_in(
            current_actor(),
            record_id,
            location=body.get("clockInLocation"),
        )
        return success(record.to_dict())

    @app.route("/api/attendance/<int:record_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    def clock_out(record_id: int):
        body = json_body()
        record = container.attendance_service.clock_out(
            current_actor(),
            record_id,
            location=body.get("clockOutLocation"),
            hourly_rate=body.get("hourlyRate"),
        )
        return success(record.to_dict())

    @app.route("/api/attendance/<int:record_id>/complete", methods=["POST"], endpoint="attendance_complete")
    def mark_complete(record_id: int):
        record = container.attendance_service.mark_complete(current_actor(), record_id)
        return success(management_row(record))

    @app.route("/api/attendance/<int:record_id>/hours", methods=["PATCH"], endpoint="attendance_update_hours")
    def update_hours(record_id: int):
        body = json_body()
        record = container.attendance_service.update_hours(
            current_actor(),
            record_id,
            total_hours=body.get("totalHours"),
            hourly_rate=body.get("hourlyRate"),
        )
        return success(management_row(record))
