from ems.models.user import User, UserRole, active_users
from ems.models.attendance import Attendance, AttendanceStatus

__all__ = ["User", "UserRole", "active_users", "Attendance", "AttendanceStatus"]
