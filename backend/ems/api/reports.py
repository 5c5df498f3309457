"""Reports API: PDF/Excel attendance reports, monthly employee report, dashboard."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.orm import Session

from ems.core.database import get_db
from ems.core.security import require_roles
from ems.models.user import User, UserRole
from ems.schemas.report import (
    Dashboard, EmployeeMonthlyReport, GenerateReportRequest, ReportFormat, ReportType,
)
from ems.services.report import ReportService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reports", tags=["reports"])

staff_only = require_roles(UserRole.ADMIN, UserRole.MANAGER)


def get_report_service(db: Session = Depends(get_db)):
    return ReportService(db)


def _file_response(report):
    return Response(
        content=report["content"],
        media_type=report["mime_type"],
        headers={
            "Content-Disposition": f'attachment; filename="{report["filename"]}"',
            "Content-Length": str(report["size"]),
        },
    )


def _quick_report(fmt, day, start_date, end_date):
    # A single date means a daily report, a start date means a custom range
    report_type = ReportType.CUSTOM if (start_date and not day) else ReportType.DAILY
    return GenerateReportRequest(
        format=fmt, type=report_type, date=day, start_date=start_date, end_date=end_date,
    )


@router.post("/attendance")
def generate_attendance_report(
    data: GenerateReportRequest,
    current_user: User = Depends(staff_only),
    service: ReportService = Depends(get_report_service),
):
    return _file_response(service.generate_attendance_report(data, current_user))


@router.get("/attendance/pdf")
def attendance_pdf(
    date: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    current_user: User = Depends(staff_only),
    service: ReportService = Depends(get_report_service),
):
    options = _quick_report(ReportFormat.PDF, date, start_date, end_date)
    return _file_response(service.generate_attendance_report(options, current_user))


@router.get("/attendance/excel")
def attendance_excel(
    date: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    current_user: User = Depends(staff_only),
    service: ReportService = Depends(get_report_service),
):
    options = _quick_report(ReportFormat.EXCEL, date, start_date, end_date)
    return _file_response(service.generate_attendance_report(options, current_user))


@router.get("/employee/{employee_id}/monthly/{year}/{month}", response_model=EmployeeMonthlyReport)
def employee_monthly_report(
    employee_id: int,
    year: int = Path(..., ge=1970, le=9999),
    month: int = Path(..., ge=1, le=12),
    current_user: User = Depends(staff_only),
    service: ReportService = Depends(get_report_service),
):
    return service.get_employee_report(employee_id, month, year)


@router.get("/dashboard", response_model=Dashboard)
def dashboard(
    current_user: User = Depends(staff_only),
    service: ReportService = Depends(get_report_service),
):
    return service.get_dashboard()
