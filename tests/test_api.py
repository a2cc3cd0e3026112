import pytest

from src.gig_attendance.gig_attendance.container import wire_services
from src.gig_attendance.gig_attendance.main import create_app

EMPLOYER = {"X-User-Id": "10", "X-User-Role": "employer"}
WORKER = {"X-User-Id": "20", "X-User-Role": "worker"}

SHIFT = {
    "job": 100,
    "worker": 20,
    "scheduledStart": "2099-01-05T10:00:00Z",
    "scheduledEnd": "2099-01-05T18:00:00Z",
}


@pytest.fixture
def client(monkeypatch, attendance_repo, jobs_repo, workers_repo, businesses_repo, sink):
    monkeypatch.setenv("APP_ENV", "testing")
    container = wire_services(
        attendance_repo=attendance_repo,
        jobs_repo=jobs_repo,
        workers_repo=workers_repo,
        businesses_repo=businesses_repo,
        notification_sink=sink,
    )
    app = create_app(container=container)
    return app.test_client()


def _schedule(client):
    resp = client.post("/api/attendance", json=SHIFT, headers=EMPLOYER)
    assert resp.status_code == 201
    return resp.get_json()["data"]


def test_missing_identity_is_rejected(client):
    resp = client.get("/api/attendance")

    assert resp.status_code == 401
    assert resp.get_json() == {"status": "fail", "message": "Missing or invalid X-User-Id header"}


def test_unknown_role_is_rejected(client):
    resp = client.get("/api/attendance", headers={"X-User-Id": "10", "X-User-Role": "admin"})

    assert resp.status_code == 401


def test_schedule_and_fetch(client):
    created = _schedule(client)

    assert created["status"] == "scheduled"
    assert created["workerNameSnapshot"] == "Ana Lopez"
    assert created["jobLocation"]["allowedRadius"] == 150

    resp = client.get(f"/api/attendance/{created['id']}", headers=WORKER)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["id"] == created["id"]

    listing = client.get("/api/attendance", headers=WORKER).get_json()
    assert listing["status"] == "success"
    assert listing["results"] == 1


def test_schedule_errors_map_to_status_codes(client):
    assert client.post("/api/attendance", json=SHIFT, headers=WORKER).status_code == 403
    assert client.post("/api/attendance", json={**SHIFT, "scheduledEnd": None}, headers=EMPLOYER).status_code == 400
    assert client.post("/api/attendance", json={**SHIFT, "job": 999}, headers=EMPLOYER).status_code == 404


def test_schedule_duplicate_start_conflicts(client):
    _schedule(client)

    resp = client.post("/api/attendance", json=SHIFT, headers=EMPLOYER)

    assert resp.status_code == 409
    assert resp.get_json()["message"] == "A shift already exists for this worker at that start time"


def test_clock_in_flow_and_conflict(client, sink):
    created = _schedule(client)
    url = f"/api/attendance/{created['id']}/clock-in"

    first = client.post(url, json={"clockInLocation": {"latitude": 40.7128, "longitude": -74.0060}}, headers=WORKER)
    second = client.post(url, json={}, headers=WORKER)

    assert first.status_code == 200
    data = first.get_json()["data"]
    assert data["status"] == "clocked-in"
    assert data["isLate"] is False
    assert data["locationValidated"] is True
    assert second.status_code == 409
    assert second.get_json()["message"] == "Already clocked in"
    assert sink.sent[0]["title"] == "Check-in Confirmed"


def test_clock_out_before_clock_in_conflicts(client):
    created = _schedule(client)

    resp = client.post(f"/api/attendance/{created['id']}/clock-out", json={}, headers=WORKER)

    assert resp.status_code == 409


def test_complete_and_update_hours(client):
    created = _schedule(client)
    client.post(f"/api/attendance/{created['id']}/clock-in", json={}, headers=WORKER)

    completed = client.post(f"/api/attendance/{created['id']}/complete", headers=EMPLOYER)
    assert completed.status_code == 200
    assert completed.get_json()["data"]["status"] == "completed"

    updated = client.patch(
        f"/api/attendance/{created['id']}/hours",
        json={"totalHours": 7.5, "hourlyRate": 20},
        headers=EMPLOYER,
    )
    assert updated.status_code == 200
    assert updated.get_json()["data"]["earnings"] == 150.0

    missing = client.patch(f"/api/attendance/{created['id']}/hours", json={}, headers=EMPLOYER)
    assert missing.status_code == 400
    assert missing.get_json()["message"] == "totalHours is required"


def test_generate_from_job_schedule(client):
    first = client.post("/api/attendance/generate", json={"job": 100, "worker": 20, "maxOccurrences": 3}, headers=EMPLOYER)
    again = client.post("/api/attendance/generate", json={"job": 100, "worker": 20, "maxOccurrences": 3}, headers=EMPLOYER)

    assert first.status_code == 201
    assert first.get_json()["data"]["created"] == 3
    assert again.status_code == 200
    assert again.get_json()["data"] == {"created": 0, "skipped": 3, "planned": 3, "reason": "all-exist"}


def test_generate_requires_ids(client):
    resp = client.post("/api/attendance/generate", json={"job": 100}, headers=EMPLOYER)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "worker is required"


def test_management_view(client):
    _schedule(client)

    resp = client.get("/api/attendance/management?date=2099-01-05", headers=EMPLOYER)
    missing = client.get("/api/attendance/management", headers=EMPLOYER)

    assert resp.status_code == 200
    body = resp.get_json()["data"]
    assert len(body["records"]) == 1
    assert body["summary"]["totalWorkers"] == 1
    assert missing.status_code == 400


def test_management_view_rejects_non_numeric_filters(client):
    resp = client.get("/api/attendance/management?date=2099-01-05&workerId=abc", headers=EMPLOYER)
    schedule = client.get("/api/workers/20/schedule?jobId=1x", headers=WORKER)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid workerId parameter"
    assert schedule.status_code == 400
    assert schedule.get_json()["message"] == "Invalid jobId parameter"


def test_worker_schedule(client):
    _schedule(client)

    resp = client.get("/api/workers/20/schedule?from=2099-01-01&to=2099-01-31", headers=WORKER)
    forbidden = client.get("/api/workers/21/schedule", headers=WORKER)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["summary"]["totalRecords"] == 1
    assert forbidden.status_code == 403


def test_unknown_route_uses_fail_shape(client):
    resp = client.get("/api/nothing-here", headers=EMPLOYER)

    assert resp.status_code == 404
    assert resp.get_json()["status"] == "fail"
