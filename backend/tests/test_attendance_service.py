from datetime import date, time

import pytest

from ems.core.exceptions import NotFoundError
from ems.models.attendance import Attendance, AttendanceStatus, working_hours
from ems.services.attendance import AttendanceService, determine_status
from ems.tasks.email_tasks import ATTENDANCE_TASK


@pytest.mark.parametrize(
    "clock_in, expected",
    [
        ("08:45:00", AttendanceStatus.PRESENT),
        ("09:30:00", AttendanceStatus.PRESENT),
        ("09:30:01", AttendanceStatus.LATE),
        ("09:31:00", AttendanceStatus.LATE),
        ("00:00:00", AttendanceStatus.PRESENT),
        ("23:59:59", AttendanceStatus.LATE),
    ],
)
def test_status_cutoff_is_exclusive(clock_in, expected):
    assert determine_status(clock_in) == expected


def test_working_hours():
    assert working_hours(time(9, 0), time(17, 0)) == 8.0
    assert working_hours(time(9, 0), time(13, 20)) == 4.33
    assert working_hours(time(9, 0), None) == 0
    assert working_hours(None, time(17, 0)) == 0


def test_clock_in_creates_row_and_queues_notification(db, make_user, email_service, queue):
    employee = make_user()
    service = AttendanceService(db, email_service)

    attendance = service.clock_in(employee.id, "08:45:00")

    assert attendance.date == date.today()
    assert attendance.clock_in == time(8, 45)
    assert attendance.status == AttendanceStatus.PRESENT.value
    jobs = queue.jobs(ATTENDANCE_TASK)
    assert len(jobs) == 1
    assert jobs[0]["to"] == employee.email
    assert jobs[0]["metadata"]["attendance_id"] == attendance.id


def test_second_clock_in_overwrites_same_day_row(db, make_user, email_service):
    employee = make_user()
    service = AttendanceService(db, email_service)

    service.clock_in(employee.id, "08:30:00")
    service.clock_in(employee.id, "09:45:00")

    rows = db.query(Attendance).filter(Attendance.employee_id == employee.id).all()
    assert len(rows) == 1
    assert rows[0].clock_in == time(9, 45)
    assert rows[0].status == AttendanceStatus.LATE.value


def test_clock_in_unknown_or_inactive_employee(db, make_user, email_service):
    service = AttendanceService(db, email_service)
    inactive = make_user(is_active=False)

    with pytest.raises(NotFoundError):
        service.clock_in(9999, "09:00:00")
    with pytest.raises(NotFoundError):
        service.clock_in(inactive.id, "09:00:00")


def test_queue_failure_does_not_undo_clock_in(db, make_user, broken_email_service):
    employee = make_user()
    service = AttendanceService(db, broken_email_service)

    attendance = service.clock_in(employee.id, "09:00:00")

    assert attendance.id is not None
    assert db.query(Attendance).count() == 1


def test_clock_out_without_clock_in_is_not_found(db, make_user, email_service):
    employee = make_user()
    service = AttendanceService(db, email_service)

    with pytest.raises(NotFoundError):
        service.clock_out(employee.id, "17:00:00")
    assert db.query(Attendance).count() == 0


def test_clock_out_sets_time_only(db, make_user, email_service):
    employee = make_user()
    service = AttendanceService(db, email_service)
    service.clock_in(employee.id, "09:00:00")

    attendance = service.clock_out(employee.id, "17:00:00", notes="left on time")

    assert attendance.clock_out == time(17, 0)
    assert attendance.status == AttendanceStatus.PRESENT.value
    assert attendance.working_hours == 8.0
    assert attendance.notes == "left on time"


def test_queries_filter_and_sort(db, make_user, make_attendance, email_service):
    alice = make_user()
    bob = make_user()
    make_attendance(alice, day=date(2026, 3, 1))
    make_attendance(alice, day=date(2026, 3, 5))
    make_attendance(bob, day=date(2026, 3, 3))
    service = AttendanceService(db, email_service)

    alice_rows = service.get_employee_attendance(alice.id)
    assert [a.date for a in alice_rows] == [date(2026, 3, 5), date(2026, 3, 1)]

    bounded = service.get_all_attendances(date(2026, 3, 2), date(2026, 3, 4))
    assert [a.employee_id for a in bounded] == [bob.id]

    assert len(service.get_attendance(alice.id, date(2026, 3, 1))) == 1
    with pytest.raises(NotFoundError):
        service.get_attendance_by_id(12345)


def test_clock_in_recovers_when_concurrent_insert_wins(db, make_user, email_service, monkeypatch):
    employee = make_user()
    service = AttendanceService(db, email_service)
    real_row_for_day = service._row_for_day
    calls = []

    def row_for_day_losing_race(employee_id, day):
        calls.append(day)
        if len(calls) == 1:
            # Another request commits today's row between our lookup and insert
            db.add(Attendance(employee_id=employee_id, date=day, clock_in=time(8, 0),
                              status=AttendanceStatus.PRESENT.value))
            db.commit()
            return None
        return real_row_for_day(employee_id, day)

    monkeypatch.setattr(service, "_row_for_day", row_for_day_losing_race)

    attendance = service.clock_in(employee.id, "09:45:00")

    rows = db.query(Attendance).filter(Attendance.employee_id == employee.id).all()
    assert len(rows) == 1
    assert rows[0].id == attendance.id
    assert rows[0].clock_in == time(9, 45)
    assert rows[0].status == AttendanceStatus.LATE.value
    assert len(calls) == 2
