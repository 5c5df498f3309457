from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, time, datetime

from ems.schemas.user import UserOut

TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d):([0-5]\d)$"


class ClockRequest(BaseModel):
    time: str = Field(..., pattern=TIME_PATTERN, description="Time in HH:mm:ss format")
    notes: Optional[str] = Field(None, max_length=500)


class AttendanceOut(BaseModel):
    id: int
    date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    status: str
    notes: Optional[str] = None
    employee_id: int
    is_email_sent: bool
    working_hours: float
    is_late: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendanceWithEmployee(AttendanceOut):
    employee: Optional[UserOut] = None
