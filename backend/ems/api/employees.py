"""Employee API: CRUD for accounts, restricted by role."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ems.core.database import get_db
from ems.core.security import get_current_user, require_roles
from ems.models.user import User, UserRole
from ems.schemas.report import ReportSummary
from ems.schemas.user import EmployeeCreate, EmployeePage, EmployeeUpdate, UserOut
from ems.services.email_service import get_email_service
from ems.services.employee import EmployeeService
from ems.services.report import ReportService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/employees", tags=["employees"])

staff_only = require_roles(UserRole.ADMIN, UserRole.MANAGER)
admin_only = require_roles(UserRole.ADMIN)


def get_employee_service(
    db: Session = Depends(get_db),
    email_service=Depends(get_email_service),
):
    return EmployeeService(db, email_service)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    data: EmployeeCreate,
    current_user: User = Depends(staff_only),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.create_employee(data, current_user)


@router.get("", response_model=EmployeePage)
def list_employees(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    current_user: User = Depends(staff_only),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.list_employees(page=page, limit=limit, search=search)


@router.get("/me", response_model=UserOut)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/{employee_id}", response_model=UserOut)
def get_employee(
    employee_id: int,
    current_user: User = Depends(staff_only),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_employee(employee_id)


@router.patch("/{employee_id}", response_model=UserOut)
def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    """Employees may edit their own profile; admins may edit anyone."""
    return service.update_employee(employee_id, data, current_user)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_employee(
    employee_id: int,
    current_user: User = Depends(admin_only),
    service: EmployeeService = Depends(get_employee_service),
):
    service.deactivate_employee(employee_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{employee_id}/attendance-summary", response_model=ReportSummary)
def attendance_summary(
    employee_id: int,
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
    current_user: User = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return ReportService(db).get_employee_summary(employee_id, start, end)
