from __future__ import annotations

from flask import Flask, request

from ..attendance.query import parse_optional_int
from ..common.http import current_actor, success
from ..container import Container


def _int_arg(name: str):
    return parse_optional_int(request.args.get(name), name)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/management", methods=["GET"], endpoint="attendance_management")
    def management_view():
        view = container.reporting_service.management_view(
            current_actor(),
            request.args.get("date"),
            business_id=_int_arg("businessId"),
            worker_id=_int_arg("workerId"),
            job_id=_int_arg("jobId"),
            status=request.args.get("status"),
        )
        return success(view)

    @app.route("/api/workers/<int:worker_id>/schedule", methods=["GET"], endpoint="worker_schedule")
    def worker_schedule(worker_id: int):
        view = container.reporting_service.worker_schedule(
            current_actor(),
            worker_id,
            status=request.args.get("status"),
            job_id=_int_arg("jobId"),
            business_id=_int_arg("businessId"),
            from_date=request.args.get("from"),
            to_date=request.args.get("to"),
        )
        return success(view)
