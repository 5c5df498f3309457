"""Attendance tracking: clock in/out and attendance queries.

Rules:
- Status is decided at clock-in: strictly after LATE_THRESHOLD (09:30:00) is
  late, anything at or before it is present.
- One row per employee per day. A second clock-in the same day overwrites the
  first (time and status), clock-out never creates a row.
"""
import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from ems.core.config import settings
from ems.core.exceptions import NotFoundError
from ems.models.attendance import Attendance, AttendanceStatus
from ems.models.user import User, active_users

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"


def parse_clock_time(value):
    return datetime.strptime(value, TIME_FORMAT).time()


def determine_status(clock_in, threshold=None):
    """present/late for a clock-in time given as HH:MM:SS string or datetime.time."""
    if isinstance(clock_in, str):
        clock_in = parse_clock_time(clock_in)
    cutoff = parse_clock_time(threshold or settings.LATE_THRESHOLD)
    if clock_in > cutoff:
        return AttendanceStatus.LATE
    return AttendanceStatus.PRESENT


class AttendanceService:
    def __init__(self, db, email_service):
        self.db = db
        self.email_service = email_service

    def _active_employee(self, employee_id):
        employee = active_users(self.db).filter(User.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee with ID {employee_id} not found")
        return employee

    def _row_for_day(self, employee_id, day):
        return self.db.query(Attendance).filter(
            Attendance.employee_id == employee_id,
            Attendance.date == day,
        ).first()

    # ── Clock In ─────────────────────────────────────────────────────

    def clock_in(self, employee_id, time_str, notes=None, today=None):
        employee = self._active_employee(employee_id)
        today = today or date.today()
        clock_in = parse_clock_time(time_str)
        status = determine_status(clock_in).value

        attendance = self._row_for_day(employee.id, today)
        if attendance is None:
            attendance = Attendance(
                date=today,
                clock_in=clock_in,
                status=status,
                notes=notes,
                employee_id=employee.id,
            )
            self.db.add(attendance)
            try:
                self.db.flush()
            except IntegrityError:
                # A concurrent clock-in inserted today's row first; update that one
                self.db.rollback()
                logger.info("Concurrent clock-in for employee %s on %s, updating existing row", employee_id, today)
                employee = self._active_employee(employee_id)
                attendance = self._row_for_day(employee.id, today)
                attendance.clock_in = clock_in
                attendance.status = status
                if notes is not None:
                    attendance.notes = notes
        else:
            attendance.clock_in = clock_in
            attendance.status = status
            if notes is not None:
                attendance.notes = notes

        self.db.commit()
        self.db.refresh(attendance)
        logger.info(
            "Employee %s clocked in at %s on %s (%s)",
            employee.employee_identifier, time_str, today, status,
        )

        # Notification problems must never undo the clock-in
        try:
            self.email_service.queue_attendance_email(attendance, employee)
        except Exception as e:
            logger.error(
                "Could not queue attendance email for %s: %s", employee.email, e, exc_info=True
            )

        return attendance

    # ── Clock Out ────────────────────────────────────────────────────

    def clock_out(self, employee_id, time_str, notes=None, today=None):
        employee = self._active_employee(employee_id)
        today = today or date.today()

        attendance = self._row_for_day(employee.id, today)
        if attendance is None:
            raise NotFoundError("No attendance found for today")

        attendance.clock_out = parse_clock_time(time_str)
        if notes:
            attendance.notes = (attendance.notes + "\n" + notes) if attendance.notes else notes
        self.db.commit()
        self.db.refresh(attendance)
        logger.info("Employee %s clocked out at %s on %s", employee.employee_identifier, time_str, today)
        return attendance

    # ── Queries ──────────────────────────────────────────────────────

    def get_attendance(self, employee_id, day):
        return (
            self.db.query(Attendance)
            .options(joinedload(Attendance.employee))
            .filter(Attendance.employee_id == employee_id, Attendance.date == day)
            .all()
        )

    def get_employee_attendance(self, employee_id, start=None, end=None):
        q = (
            self.db.query(Attendance)
            .options(joinedload(Attendance.employee))
            .filter(Attendance.employee_id == employee_id)
        )
        if start:
            q = q.filter(Attendance.date >= start)
        if end:
            q = q.filter(Attendance.date <= end)
        return q.order_by(Attendance.date.desc()).all()

    def get_all_attendances(self, start=None, end=None):
        q = self.db.query(Attendance).options(joinedload(Attendance.employee))
        if start:
            q = q.filter(Attendance.date >= start)
        if end:
            q = q.filter(Attendance.date <= end)
        return q.order_by(Attendance.date.desc(), Attendance.id.desc()).all()

    def get_attendance_by_id(self, attendance_id):
        attendance = (
            self.db.query(Attendance)
            .options(joinedload(Attendance.employee))
            .filter(Attendance.id == attendance_id)
            .first()
        )
        if not attendance:
            raise NotFoundError(f"Attendance with ID {attendance_id} not found")
        return attendance
