"""Attendance API: clock in/out and attendance lookups."""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ems.core.database import get_db
from ems.core.exceptions import BadRequestError, ForbiddenError
from ems.core.security import get_current_user, require_roles
from ems.models.user import User, UserRole
from ems.schemas.attendance import AttendanceOut, AttendanceWithEmployee, ClockRequest
from ems.services.attendance import AttendanceService
from ems.services.email_service import get_email_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])

staff_only = require_roles(UserRole.ADMIN, UserRole.MANAGER)


def get_attendance_service(
    db: Session = Depends(get_db),
    email_service=Depends(get_email_service),
):
    return AttendanceService(db, email_service)


def _is_staff(user):
    return user.role.lower() in (UserRole.ADMIN.value, UserRole.MANAGER.value)


# ── Clock In / Out ───────────────────────────────────────────────────

@router.post("/clock-in", response_model=AttendanceOut)
def clock_in(
    data: ClockRequest,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    """Clock in for the current day."""
    if current_user.role.lower() == UserRole.ADMIN.value:
        raise BadRequestError("Admins cannot clock in")
    return service.clock_in(current_user.id, data.time, data.notes)


@router.post("/clock-out", response_model=AttendanceOut)
def clock_out(
    data: ClockRequest,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    """Clock out for the current day."""
    if current_user.role.lower() == UserRole.ADMIN.value:
        raise BadRequestError("Admins cannot clock out")
    return service.clock_out(current_user.id, data.time, data.notes)


# ── Queries ──────────────────────────────────────────────────────────

@router.get("/today", response_model=List[AttendanceWithEmployee])
def today_attendance(
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_attendance(current_user.id, date.today())


@router.get("/all", response_model=List[AttendanceWithEmployee])
def all_attendance(
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
    current_user: User = Depends(staff_only),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_all_attendances(start, end)


@router.get("/employee/{employee_id}", response_model=List[AttendanceWithEmployee])
def employee_attendance(
    employee_id: int,
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
    current_user: User = Depends(staff_only),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_employee_attendance(employee_id, start, end)


@router.get("/{attendance_id}", response_model=AttendanceWithEmployee)
def get_attendance(
    attendance_id: int,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    attendance = service.get_attendance_by_id(attendance_id)
    if attendance.employee_id != current_user.id and not _is_staff(current_user):
        raise ForbiddenError("You can only view your own attendance")
    return attendance
