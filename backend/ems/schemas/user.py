from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime
from ems.models.user import UserRole

PHONE_PATTERN = r"^\+?[0-9]{7,15}$"


class UserBase(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class EmployeeCreate(UserBase):
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.EMPLOYEE
    employee_identifier: Optional[str] = Field(None, min_length=1, max_length=32)


class EmployeeUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    role: Optional[UserRole] = None
    employee_identifier: Optional[str] = Field(None, min_length=1, max_length=32)
    is_active: Optional[bool] = None
    new_password: Optional[str] = Field(None, min_length=8)


class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    employee_identifier: str
    phone_number: Optional[str] = None
    role: str
    is_active: bool
    is_email_verified: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class EmployeePage(BaseModel):
    data: List[UserOut]
    meta: PageMeta
