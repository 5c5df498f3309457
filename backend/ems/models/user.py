from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ems.core.database import Base
import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    MANAGER = "manager"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)

    # Human-facing identifier printed on reports, e.g. EMP4K7Q2Z
    employee_identifier = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=True)

    role = Column(String, default=UserRole.EMPLOYEE.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)

    # Tokens are stored as SHA-256 digests only
    refresh_token_hash = Column(String, nullable=True)
    refresh_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    password_reset_token_hash = Column(String, nullable=True, index=True)
    password_reset_expires_at = Column(DateTime(timezone=True), nullable=True)

    last_login_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    attendances = relationship(
        "Attendance",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def deactivate(self):
        """Soft delete: the row stays so attendance history keeps its owner."""
        self.is_active = False
        self.refresh_token_hash = None
        self.refresh_token_expires_at = None


def active_users(db):
    """Base query for accounts that are allowed to sign in and clock in."""
    return db.query(User).filter(User.is_active.is_(True))
