from datetime import date, time


def test_generate_report_download(client, make_user, make_attendance, auth_headers):
    manager = make_user(role="manager")
    make_attendance(make_user(), day=date(2026, 10, 14), clock_out=time(17))

    resp = client.post(
        "/api/v1/reports/attendance",
        json={"format": "excel", "type": "custom", "start_date": "2026-10-01",
              "end_date": "2026-10-31"},
        headers=auth_headers(manager),
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert resp.headers["content-disposition"].startswith('attachment; filename="attendance-report-')
    assert int(resp.headers["content-length"]) == len(resp.content)


def test_quick_pdf_download(client, make_user, auth_headers):
    admin = make_user(role="admin")

    resp = client.get("/api/v1/reports/attendance/pdf?date=2026-10-14",
                      headers=auth_headers(admin))

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_reports_are_staff_only(client, make_user, auth_headers):
    employee = make_user()

    resp = client.get("/api/v1/reports/attendance/excel", headers=auth_headers(employee))
    assert resp.status_code == 403
    resp = client.get("/api/v1/reports/dashboard", headers=auth_headers(employee))
    assert resp.status_code == 403


def test_invalid_report_format(client, make_user, auth_headers):
    admin = make_user(role="admin")

    resp = client.post("/api/v1/reports/attendance", json={"format": "csv"},
                       headers=auth_headers(admin))

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "format"


def test_monthly_report_endpoint(client, make_user, make_attendance, auth_headers):
    admin = make_user(role="admin")
    employee = make_user()
    make_attendance(employee, day=date(2026, 9, 3), clock_out=time(17))

    resp = client.get(f"/api/v1/reports/employee/{employee.id}/monthly/2026/9",
                      headers=auth_headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["month"] == "September"
    assert body["employee"]["id"] == employee.id
    assert body["summary"]["average_working_hours"] == 8.0

    resp = client.get(f"/api/v1/reports/employee/{employee.id}/monthly/2026/13",
                      headers=auth_headers(admin))
    assert resp.status_code == 400


def test_dashboard_endpoint(client, make_user, make_attendance, auth_headers):
    admin = make_user(role="admin")
    employee = make_user()
    make_attendance(employee, status="late", clock_in=time(10))

    resp = client.get("/api/v1/reports/dashboard", headers=auth_headers(admin))

    assert resp.status_code == 200
    body = resp.json()
    assert body["date"] == date.today().isoformat()
    assert body["total_employees"] == 1
    assert body["late_today"] == 1
    assert body["attendance_rate"] == 100.0
    assert body["todays_attendance"][0]["employee"]["id"] == employee.id


def test_health_probes(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database"]["status"] == "up"

    assert client.get("/api/v1/health/liveness").json()["status"] == "ok"
