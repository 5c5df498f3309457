from datetime import date, time

from ems.tasks.email_tasks import ATTENDANCE_TASK


def test_clock_in_and_out(client, make_user, auth_headers, queue):
    employee = make_user()
    headers = auth_headers(employee)

    resp = client.post("/api/v1/attendance/clock-in", json={"time": "09:45:10"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "late"
    assert body["is_late"] is True
    assert body["date"] == date.today().isoformat()
    assert len(queue.jobs(ATTENDANCE_TASK)) == 1

    resp = client.post("/api/v1/attendance/clock-out",
                       json={"time": "17:45:10", "notes": "wrapped up"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["working_hours"] == 8.0
    assert resp.json()["clock_out"] == "17:45:10"


def test_clock_in_rejects_bad_time(client, make_user, auth_headers):
    employee = make_user()

    resp = client.post("/api/v1/attendance/clock-in", json={"time": "9:45"},
                       headers=auth_headers(employee))

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "time"
    assert resp.json()["errors"][0]["value"] == "9:45"


def test_clock_out_before_clock_in(client, make_user, auth_headers):
    employee = make_user()

    resp = client.post("/api/v1/attendance/clock-out", json={"time": "17:00:00"},
                       headers=auth_headers(employee))

    assert resp.status_code == 404


def test_admin_cannot_clock(client, make_user, auth_headers):
    admin = make_user(role="admin")

    resp = client.post("/api/v1/attendance/clock-in", json={"time": "09:00:00"},
                       headers=auth_headers(admin))

    assert resp.status_code == 400


def test_today_returns_own_rows(client, make_user, make_attendance, auth_headers):
    alice = make_user()
    bob = make_user()
    make_attendance(alice)
    make_attendance(bob)
    make_attendance(alice, day=date(2026, 1, 1))

    resp = client.get("/api/v1/attendance/today", headers=auth_headers(alice))

    assert resp.status_code == 200
    rows = resp.json()
    assert len(rows) == 1
    assert rows[0]["employee"]["id"] == alice.id


def test_all_and_employee_history_are_staff_only(client, make_user, make_attendance, auth_headers):
    manager = make_user(role="manager")
    employee = make_user()
    make_attendance(employee, day=date(2026, 10, 1))
    make_attendance(employee, day=date(2026, 10, 5))

    assert client.get("/api/v1/attendance/all", headers=auth_headers(employee)).status_code == 403

    resp = client.get("/api/v1/attendance/all?from=2026-10-02", headers=auth_headers(manager))
    assert [r["date"] for r in resp.json()] == ["2026-10-05"]

    resp = client.get(f"/api/v1/attendance/employee/{employee.id}", headers=auth_headers(manager))
    assert [r["date"] for r in resp.json()] == ["2026-10-05", "2026-10-01"]


def test_single_attendance_visibility(client, make_user, make_attendance, auth_headers):
    owner = make_user()
    other = make_user()
    manager = make_user(role="manager")
    attendance = make_attendance(owner, clock_in=time(8, 0))
    url = f"/api/v1/attendance/{attendance.id}"

    assert client.get(url, headers=auth_headers(owner)).status_code == 200
    assert client.get(url, headers=auth_headers(manager)).status_code == 200
    assert client.get(url, headers=auth_headers(other)).status_code == 403
    assert client.get("/api/v1/attendance/99999", headers=auth_headers(owner)).status_code == 404


def test_correlation_id_is_echoed(client, make_user, auth_headers):
    employee = make_user()

    resp = client.get("/api/v1/attendance/today",
                      headers={**auth_headers(employee), "X-Correlation-ID": "abc-123"})
    assert resp.headers["X-Correlation-ID"] == "abc-123"

    resp = client.get("/api/v1/attendance/today")
    assert resp.status_code == 401
    assert resp.headers["X-Correlation-ID"]
