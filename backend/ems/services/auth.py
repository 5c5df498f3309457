"""Authentication: registration, login, token rotation and password reset."""
import logging
from datetime import datetime, timedelta, timezone

from ems.core.config import settings
from ems.core.exceptions import BadRequestError, ConflictError, UnauthorizedError
from ems.core.security import (
    REFRESH_TOKEN_TYPE, create_access_token, create_refresh_token, decode_token,
    generate_reset_token, get_password_hash, hash_token, verify_password,
)
from ems.models.user import User, UserRole, active_users
from ems.services.employee import generate_employee_identifier

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset link has been sent"

# Checked against when the email is unknown so both failures cost one bcrypt verify
_DUMMY_PASSWORD_HASH = get_password_hash("not-a-real-password")


def _utcnow():
    return datetime.now(timezone.utc)


def _as_utc(dt):
    # SQLite hands back naive datetimes even for timezone-aware columns
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class AuthService:
    def __init__(self, db, email_service):
        self.db = db
        self.email_service = email_service

    def _issue_tokens(self, user):
        access_token = create_access_token(user)
        refresh_token = create_refresh_token(user)
        user.refresh_token_hash = hash_token(refresh_token)
        user.refresh_token_expires_at = _utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.db.commit()
        self.db.refresh(user)
        return {"access_token": access_token, "refresh_token": refresh_token, "token_type": "bearer"}

    def register(self, data):
        """Self-registration always yields an employee account."""
        email = data.email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise ConflictError(f"User with email {email} already exists")

        user = User(
            email=email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone_number=data.phone_number,
            hashed_password=get_password_hash(data.password),
            employee_identifier=generate_employee_identifier(self.db),
            role=UserRole.EMPLOYEE.value,
            is_active=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s (%s)", user.email, user.employee_identifier)

        try:
            self.email_service.queue_welcome_email(user)
        except Exception as e:
            logger.error("Could not queue registration email for %s: %s", user.email, e, exc_info=True)

        return user, self._issue_tokens(user)

    def login(self, email, password):
        user = active_users(self.db).filter(User.email == email.lower()).first()
        hashed = user.hashed_password if user else _DUMMY_PASSWORD_HASH
        if not verify_password(password, hashed) or not user:
            logger.warning("Failed login attempt for %s", email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user.last_login_at = _utcnow()
        tokens = self._issue_tokens(user)
        logger.info("User %s logged in", user.email)
        return user, tokens

    def refresh(self, refresh_token):
        """Rotate the refresh token; the presented one stops working immediately."""
        payload = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise UnauthorizedError("Invalid refresh token")

        user = active_users(self.db).filter(User.id == user_id).first()
        if (
            not user
            or not user.refresh_token_hash
            or user.refresh_token_hash != hash_token(refresh_token)
        ):
            raise UnauthorizedError("Invalid refresh token")
        expires_at = _as_utc(user.refresh_token_expires_at)
        if expires_at is None or expires_at < _utcnow():
            raise UnauthorizedError("Refresh token expired")

        return user, self._issue_tokens(user)

    def logout(self, user):
        user.refresh_token_hash = None
        user.refresh_token_expires_at = None
        self.db.commit()
        logger.info("User %s logged out", user.email)

    def forgot_password(self, email):
        """Same answer whether or not the account exists."""
        user = active_users(self.db).filter(User.email == email.lower()).first()
        if not user:
            logger.info("Password reset requested for unknown email %s", email)
            return FORGOT_PASSWORD_MESSAGE

        reset_token = generate_reset_token()
        user.password_reset_token_hash = hash_token(reset_token)
        user.password_reset_expires_at = _utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        self.db.commit()

        try:
            self.email_service.queue_password_reset_email(user, reset_token)
        except Exception as e:
            logger.error("Could not queue password reset email for %s: %s", user.email, e, exc_info=True)

        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, token, new_password):
        user = active_users(self.db).filter(
            User.password_reset_token_hash == hash_token(token)
        ).first()
        expires_at = _as_utc(user.password_reset_expires_at) if user else None
        if not user or expires_at is None or expires_at < _utcnow():
            raise BadRequestError("Invalid or expired reset token")

        user.hashed_password = get_password_hash(new_password)
        user.password_reset_token_hash = None
        user.password_reset_expires_at = None
        # Existing sessions must log in again with the new password
        user.refresh_token_hash = None
        user.refresh_token_expires_at = None
        self.db.commit()
        logger.info("Password reset completed for %s", user.email)
        return "Password has been reset successfully"
