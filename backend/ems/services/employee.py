"""Employee management: create, list, update and deactivate accounts."""
import logging
import math
import secrets
import string

from sqlalchemy import func

from ems.core.exceptions import ConflictError, ForbiddenError, NotFoundError, BadRequestError
from ems.core.security import get_password_hash
from ems.models.user import User, UserRole, active_users

logger = logging.getLogger(__name__)

IDENTIFIER_PREFIX = "EMP"
IDENTIFIER_ALPHABET = string.ascii_uppercase + string.digits


def generate_employee_identifier(db):
    """EMP + 6 random uppercase alphanumerics, re-rolled until unused."""
    while True:
        candidate = IDENTIFIER_PREFIX + "".join(
            secrets.choice(IDENTIFIER_ALPHABET) for _ in range(6)
        )
        if not db.query(User.id).filter(User.employee_identifier == candidate).first():
            return candidate


def _is_admin(user):
    return user.role.lower() == UserRole.ADMIN.value


class EmployeeService:
    def __init__(self, db, email_service=None):
        self.db = db
        self.email_service = email_service

    def _check_email_free(self, email, exclude_id=None):
        q = self.db.query(User).filter(User.email == email)
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError(f"User with email {email} already exists")

    def _check_identifier_free(self, identifier, exclude_id=None):
        q = self.db.query(User).filter(User.employee_identifier == identifier)
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError(f"Employee identifier {identifier} is already in use")

    # ── Create ───────────────────────────────────────────────────────

    def create_employee(self, data, current_user):
        """Admins may create any role; managers only plain employees."""
        if (
            current_user.role.lower() == UserRole.MANAGER.value
            and data.role != UserRole.EMPLOYEE
        ):
            raise ForbiddenError("Managers can only create employees")

        email = data.email.lower()
        self._check_email_free(email)
        if data.employee_identifier:
            self._check_identifier_free(data.employee_identifier)

        user = User(
            email=email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone_number=data.phone_number,
            hashed_password=get_password_hash(data.password),
            employee_identifier=data.employee_identifier or generate_employee_identifier(self.db),
            role=data.role.value,
            is_active=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("%s created employee %s (%s)", current_user.email, user.email, user.role)

        if self.email_service is not None:
            try:
                self.email_service.queue_welcome_email(user, data.password)
            except Exception as e:
                logger.error("Could not queue welcome email for %s: %s", user.email, e, exc_info=True)

        return user

    # ── Read ─────────────────────────────────────────────────────────

    def list_employees(self, page=1, limit=10, search=None):
        q = active_users(self.db)
        if search:
            q = q.filter(User.email.ilike(f"%{search}%"))

        total = q.with_entities(func.count(User.id)).scalar() or 0
        users = (
            q.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "data": users,
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }

    def get_employee(self, employee_id):
        user = active_users(self.db).filter(User.id == employee_id).first()
        if not user:
            raise NotFoundError(f"Employee with ID {employee_id} not found")
        return user

    # ── Update / deactivate ──────────────────────────────────────────

    def update_employee(self, employee_id, data, current_user):
        user = self.get_employee(employee_id)

        if not _is_admin(current_user) and current_user.id != user.id:
            raise ForbiddenError("You can only update your own profile")

        changes = data.model_dump(exclude_unset=True)
        if not _is_admin(current_user):
            # Role and activation are admin decisions
            changes.pop("role", None)
            changes.pop("is_active", None)
        elif user.id == current_user.id and changes.get("is_active") is False:
            raise BadRequestError("Cannot deactivate yourself")

        if changes.get("email"):
            changes["email"] = changes["email"].lower()
            self._check_email_free(changes["email"], exclude_id=user.id)
        if changes.get("employee_identifier"):
            self._check_identifier_free(changes["employee_identifier"], exclude_id=user.id)

        new_password = changes.pop("new_password", None)
        if new_password:
            user.hashed_password = get_password_hash(new_password)

        for field, value in changes.items():
            if value is None:
                continue
            if field == "role":
                value = value.value if hasattr(value, "value") else value
            if field == "is_active" and value is False:
                user.deactivate()
                continue
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        logger.info("%s updated employee %s", current_user.email, user.email)
        return user

    def deactivate_employee(self, employee_id, current_user):
        if employee_id == current_user.id:
            raise BadRequestError("Cannot deactivate yourself")
        user = self.get_employee(employee_id)
        user.deactivate()
        self.db.commit()
        logger.info("%s deactivated employee %s", current_user.email, user.email)
