from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, success
from ..common.validators import require_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/generate", methods=["POST"], endpoint="attendance_generate")
    def generate_attendance():
        body = json_body()
        result = container.schedule_service.generate_for_assignment(
            current_actor(),
            job_id=require_id(body.get("job"), "job"),
            worker_id=require_id(body.get("worker"), "worker"),
            max_occurrences=body.get("maxOccurrences"),
        )
        return success(result.to_dict(), 201 if result.created else 200)
