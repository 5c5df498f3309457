from datetime import date, time

from ems.models.user import User
from ems.tasks.email_tasks import WELCOME_TASK


def _new_employee(email="hire@company.com", **extra):
    return {
        "email": email,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "password": "Welcome123!",
        **extra,
    }


def test_admin_creates_employee_and_queues_credentials(client, make_user, auth_headers, queue):
    admin = make_user(role="admin")

    resp = client.post("/api/v1/employees", json=_new_employee(phone_number="+15551234567"),
                       headers=auth_headers(admin))

    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "employee"
    assert body["is_active"] is True
    assert body["employee_identifier"].startswith("EMP")
    jobs = queue.jobs(WELCOME_TASK)
    assert len(jobs) == 1
    assert jobs[0]["to"] == "hire@company.com"
    assert "Welcome123!" in jobs[0]["html"]
    assert jobs[0]["metadata"]["type"] == "employee_welcome"


def test_manager_cannot_create_privileged_roles(client, make_user, auth_headers):
    manager = make_user(role="manager")
    admin = make_user(role="admin")

    resp = client.post("/api/v1/employees", json=_new_employee(role="admin"),
                       headers=auth_headers(manager))
    assert resp.status_code == 403

    resp = client.post("/api/v1/employees", json=_new_employee(role="admin"),
                       headers=auth_headers(admin))
    assert resp.status_code == 201
    assert resp.json()["role"] == "admin"


def test_create_with_taken_email_or_identifier(client, make_user, auth_headers):
    admin = make_user(role="admin")
    existing = make_user(email="taken@company.com")

    resp = client.post("/api/v1/employees", json=_new_employee(email="taken@company.com"),
                       headers=auth_headers(admin))
    assert resp.status_code == 409

    resp = client.post(
        "/api/v1/employees",
        json=_new_employee(employee_identifier=existing.employee_identifier),
        headers=auth_headers(admin),
    )
    assert resp.status_code == 409


def test_welcome_queue_failure_still_creates(client, make_user, auth_headers, broken_email_service,
                                            db):
    from ems.services.email_service import get_email_service
    from ems.main import app

    app.dependency_overrides[get_email_service] = lambda: broken_email_service
    admin = make_user(role="admin")

    resp = client.post("/api/v1/employees", json=_new_employee(), headers=auth_headers(admin))

    assert resp.status_code == 201
    assert db.query(User).filter(User.email == "hire@company.com").count() == 1


def test_employee_cannot_list_employees(client, make_user, auth_headers):
    employee = make_user()

    resp = client.get("/api/v1/employees", headers=auth_headers(employee))

    assert resp.status_code == 403


def test_list_paginates_and_searches(client, make_user, auth_headers):
    admin = make_user(role="admin", email="boss@company.com")
    for i in range(12):
        make_user(email=f"worker{i}@company.com")
    make_user(email="retired@company.com", is_active=False)

    resp = client.get("/api/v1/employees?page=2&limit=5", headers=auth_headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"] == {"total": 13, "page": 2, "limit": 5, "total_pages": 3}
    assert len(body["data"]) == 5

    resp = client.get("/api/v1/employees?search=WORKER1", headers=auth_headers(admin))
    emails = {u["email"] for u in resp.json()["data"]}
    assert emails == {"worker1@company.com", "worker10@company.com", "worker11@company.com"}

    resp = client.get("/api/v1/employees?limit=500", headers=auth_headers(admin))
    assert resp.status_code == 400


def test_get_profile_and_employee(client, make_user, auth_headers):
    manager = make_user(role="manager")
    employee = make_user()

    resp = client.get("/api/v1/employees/me", headers=auth_headers(employee))
    assert resp.json()["id"] == employee.id

    resp = client.get(f"/api/v1/employees/{employee.id}", headers=auth_headers(manager))
    assert resp.status_code == 200
    assert resp.json()["email"] == employee.email

    resp = client.get("/api/v1/employees/424242", headers=auth_headers(manager))
    assert resp.status_code == 404


def test_employee_updates_only_own_profile(client, make_user, auth_headers):
    alice = make_user()
    bob = make_user()

    resp = client.patch(f"/api/v1/employees/{bob.id}", json={"first_name": "Robert"},
                        headers=auth_headers(alice))
    assert resp.status_code == 403

    resp = client.patch(f"/api/v1/employees/{alice.id}",
                        json={"first_name": "Alicia", "role": "admin"},
                        headers=auth_headers(alice))
    assert resp.status_code == 200
    assert resp.json()["first_name"] == "Alicia"
    assert resp.json()["role"] == "employee"


def test_admin_update_and_password_change(client, make_user, auth_headers):
    admin = make_user(role="admin")
    employee = make_user(email="promote@company.com")

    resp = client.patch(f"/api/v1/employees/{employee.id}",
                        json={"role": "manager", "new_password": "Fresh-pass-99"},
                        headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["role"] == "manager"

    login = client.post("/api/v1/auth/login",
                        json={"email": "promote@company.com", "password": "Fresh-pass-99"})
    assert login.status_code == 200


def test_deactivate_hides_employee_but_keeps_history(client, make_user, make_attendance,
                                                     auth_headers, db):
    admin = make_user(role="admin")
    employee = make_user()
    make_attendance(employee, day=date(2026, 10, 1), clock_out=time(17))

    resp = client.delete(f"/api/v1/employees/{employee.id}", headers=auth_headers(admin))
    assert resp.status_code == 204

    resp = client.get(f"/api/v1/employees/{employee.id}", headers=auth_headers(admin))
    assert resp.status_code == 404
    db.refresh(employee)
    assert employee.is_active is False
    assert len(employee.attendances) == 1


def test_admin_cannot_deactivate_self_and_manager_cannot_delete(client, make_user, auth_headers):
    admin = make_user(role="admin")
    manager = make_user(role="manager")
    employee = make_user()

    resp = client.delete(f"/api/v1/employees/{admin.id}", headers=auth_headers(admin))
    assert resp.status_code == 400

    resp = client.patch(f"/api/v1/employees/{admin.id}", json={"is_active": False},
                        headers=auth_headers(admin))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot deactivate yourself"
    assert client.get("/api/v1/employees/me", headers=auth_headers(admin)).status_code == 200

    resp = client.delete(f"/api/v1/employees/{employee.id}", headers=auth_headers(manager))
    assert resp.status_code == 403


def test_attendance_summary(client, make_user, make_attendance, auth_headers):
    manager = make_user(role="manager")
    employee = make_user()
    make_attendance(employee, day=date(2026, 10, 1), clock_out=time(17))
    make_attendance(employee, day=date(2026, 10, 2), status="late", clock_in=time(10),
                    clock_out=time(16))
    make_attendance(employee, day=date(2026, 11, 2))

    resp = client.get(
        f"/api/v1/employees/{employee.id}/attendance-summary?from=2026-10-01&to=2026-10-31",
        headers=auth_headers(manager),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_present"] == 1
    assert body["total_late"] == 1
    assert body["average_working_hours"] == 14.0
