"""Attendance reports: window resolution, summary statistics and rendering.

Summary rules:
- status counts partition the rows in the window
- average working hours = total hours of all rows / distinct employees
"""
import calendar
import logging
import time as _time
from collections import Counter
from datetime import date, datetime, time, timedelta

from dateutil.parser import parse as parse_date
from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import joinedload

from ems.core.exceptions import NotFoundError
from ems.models.attendance import Attendance, AttendanceStatus
from ems.models.user import User, UserRole, active_users
from ems.schemas.report import ReportFormat, ReportType
from ems.services.report_excel import EXCEL_MIME_TYPE, render_attendance_excel
from ems.services.report_pdf import PDF_MIME_TYPE, render_attendance_pdf

logger = logging.getLogger(__name__)

DASHBOARD_RECENT_LIMIT = 10


def _day_bounds(day):
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def _parse_day(value):
    """Parsed date or None when missing/unparseable."""
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return parse_date(value).date()
    except (ValueError, OverflowError):
        logger.warning("Ignoring unparseable report date %r", value)
        return None


def resolve_report_window(report_type, day=None, start_date=None, end_date=None, today=None):
    """Return (start, end, title) for a report type.

    start/end are datetimes spanning whole days. Dates that cannot be parsed
    fall back to today's bounds.
    """
    today = today or date.today()
    report_type = ReportType(report_type)

    if report_type == ReportType.WEEKLY:
        monday = today - timedelta(days=today.weekday())
        start, _ = _day_bounds(monday)
        _, end = _day_bounds(monday + timedelta(days=6))
        title = f"Weekly Attendance Report - Week {today.isocalendar()[1]} of {today.year}"
    elif report_type == ReportType.MONTHLY:
        first = today.replace(day=1)
        last = first + relativedelta(months=1) - timedelta(days=1)
        start, _ = _day_bounds(first)
        _, end = _day_bounds(last)
        title = f"Monthly Attendance Report - {calendar.month_name[today.month]} {today.year}"
    elif report_type == ReportType.CUSTOM:
        start_day = _parse_day(start_date) or today
        end_day = _parse_day(end_date) or today
        start, _ = _day_bounds(start_day)
        _, end = _day_bounds(end_day)
        title = (
            f"Custom Attendance Report - {start_day.strftime('%a %b %d %Y')}"
            f" to {end_day.strftime('%a %b %d %Y')}"
        )
    else:
        target = _parse_day(day) or today
        start, end = _day_bounds(target)
        title = f"Daily Attendance Report - {target.strftime('%a %b %d %Y')}"

    return start, end, title


def calculate_summary(attendances, start, end):
    counts = Counter(a.status for a in attendances)
    employees = {a.employee_id for a in attendances}
    total_hours = sum(a.working_hours or 0 for a in attendances)
    average = round(total_hours / len(employees), 2) if employees else 0

    return {
        "total_employees": len(employees),
        "total_present": counts[AttendanceStatus.PRESENT.value],
        "total_absent": counts[AttendanceStatus.ABSENT.value],
        "total_late": counts[AttendanceStatus.LATE.value],
        "total_leave": counts[AttendanceStatus.LEAVE.value],
        "average_working_hours": average,
        "date_range": {"start": start.isoformat(), "end": end.isoformat()},
    }


class ReportService:
    def __init__(self, db):
        self.db = db

    def _attendances_between(self, start, end):
        return (
            self.db.query(Attendance)
            .join(Attendance.employee)
            .options(joinedload(Attendance.employee))
            .filter(Attendance.date >= start.date(), Attendance.date <= end.date())
            .order_by(Attendance.date.desc(), User.last_name.asc(), User.first_name.asc())
            .all()
        )

    def get_report_data(self, options, today=None):
        start, end, title = resolve_report_window(
            options.type,
            day=options.date,
            start_date=options.start_date,
            end_date=options.end_date,
            today=today,
        )
        attendances = self._attendances_between(start, end)
        return {
            "title": title,
            "generated_at": datetime.now(),
            "attendances": attendances,
            "summary": calculate_summary(attendances, start, end),
        }

    def generate_attendance_report(self, options, requested_by, today=None):
        """Render the report; returns {filename, content, mime_type, size}."""
        data = self.get_report_data(options, today=today)
        stamp = int(_time.time() * 1000)

        if ReportFormat(options.format) == ReportFormat.EXCEL:
            content = render_attendance_excel(data)
            filename = f"attendance-report-{stamp}.xlsx"
            mime_type = EXCEL_MIME_TYPE
        else:
            content = render_attendance_pdf(data)
            filename = f"attendance-report-{stamp}.pdf"
            mime_type = PDF_MIME_TYPE

        logger.info(
            "%s generated %s (%d rows, %d bytes)",
            requested_by.email, filename, len(data["attendances"]), len(content),
        )
        return {
            "filename": filename,
            "content": content,
            "mime_type": mime_type,
            "size": len(content),
        }

    def get_employee_report(self, employee_id, month, year):
        employee = active_users(self.db).filter(User.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee with ID {employee_id} not found")

        first = date(year, month, 1)
        last = first + relativedelta(months=1) - timedelta(days=1)
        start, _ = _day_bounds(first)
        _, end = _day_bounds(last)

        attendances = (
            self.db.query(Attendance)
            .filter(
                Attendance.employee_id == employee_id,
                Attendance.date >= first,
                Attendance.date <= last,
            )
            .order_by(Attendance.date.asc())
            .all()
        )
        return {
            "employee": employee,
            "attendances": attendances,
            "month": calendar.month_name[month],
            "year": year,
            "summary": calculate_summary(attendances, start, end),
        }

    def get_employee_summary(self, employee_id, start=None, end=None):
        """Summary over an employee's whole history, optionally bounded."""
        employee = active_users(self.db).filter(User.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee with ID {employee_id} not found")

        q = self.db.query(Attendance).filter(Attendance.employee_id == employee_id)
        if start:
            q = q.filter(Attendance.date >= start)
        if end:
            q = q.filter(Attendance.date <= end)
        attendances = q.order_by(Attendance.date.asc()).all()

        first = start or (attendances[0].date if attendances else date.today())
        last = end or (attendances[-1].date if attendances else date.today())
        return calculate_summary(attendances, _day_bounds(first)[0], _day_bounds(last)[1])

    def get_dashboard(self, today=None):
        today = today or date.today()
        todays = (
            self.db.query(Attendance)
            .options(joinedload(Attendance.employee))
            .filter(Attendance.date == today)
            .order_by(Attendance.clock_in.desc())
            .all()
        )
        total_employees = active_users(self.db).filter(
            User.role == UserRole.EMPLOYEE.value
        ).count()

        present = sum(
            1 for a in todays
            if a.status in (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)
        )
        late = sum(1 for a in todays if a.status == AttendanceStatus.LATE.value)
        absent = sum(1 for a in todays if a.status == AttendanceStatus.ABSENT.value)

        return {
            "date": today.isoformat(),
            "total_employees": total_employees,
            "present_today": present,
            "late_today": late,
            "absent_today": absent,
            "attendance_rate": round(present / total_employees * 100, 2) if total_employees else 0,
            "todays_attendance": todays[:DASHBOARD_RECENT_LIMIT],
        }
