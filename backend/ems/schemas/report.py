from pydantic import BaseModel
from typing import Dict, List, Optional
import enum

from ems.schemas.attendance import AttendanceOut, AttendanceWithEmployee
from ems.schemas.user import UserOut


class ReportFormat(str, enum.Enum):
    PDF = "pdf"
    EXCEL = "excel"


class ReportType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class GenerateReportRequest(BaseModel):
    format: ReportFormat = ReportFormat.PDF
    type: ReportType = ReportType.DAILY
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    date: Optional[str] = None


class ReportSummary(BaseModel):
    total_employees: int
    total_present: int
    total_absent: int
    total_late: int
    total_leave: int
    average_working_hours: float
    date_range: Dict[str, str]


class EmployeeMonthlyReport(BaseModel):
    employee: UserOut
    month: str
    year: int
    summary: ReportSummary
    attendances: List[AttendanceOut]


class Dashboard(BaseModel):
    date: str
    total_employees: int
    present_today: int
    late_today: int
    absent_today: int
    attendance_rate: float
    todays_attendance: List[AttendanceWithEmployee]
