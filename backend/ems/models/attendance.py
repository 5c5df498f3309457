"""Attendance model: one row per employee per calendar day.

Status is decided at clock-in against the late threshold and only changes
when a later clock-in on the same day overwrites it.
"""
from datetime import datetime, date
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Boolean, Date, Time, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ems.core.database import Base
import enum


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    LEAVE = "leave"


def working_hours(clock_in, clock_out):
    """Hours between clock-in and clock-out rounded to 2 decimals; 0 if either is missing."""
    if clock_in is None or clock_out is None:
        return 0
    anchor = date(2000, 1, 1)
    delta = datetime.combine(anchor, clock_out) - datetime.combine(anchor, clock_in)
    return round(delta.total_seconds() / 3600, 2)


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)

    clock_in = Column(Time, nullable=True)
    clock_out = Column(Time, nullable=True)

    status = Column(String, default=AttendanceStatus.PRESENT.value, nullable=False)
    notes = Column(Text, nullable=True)

    employee_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Set by the worker once the confirmation email went out
    is_email_sent = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("User", back_populates="attendances")

    @property
    def working_hours(self):
        return working_hours(self.clock_in, self.clock_out)

    @property
    def is_late(self):
        return self.status == AttendanceStatus.LATE.value
