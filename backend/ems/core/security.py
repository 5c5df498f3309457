"""Password hashing, JWT issue/verify and the auth dependencies used by the routers."""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from ems.core.config import settings
from ems.core.database import get_db
from ems.core.exceptions import UnauthorizedError, ForbiddenError
from ems.models.user import User, active_users

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# ── Passwords & opaque tokens ────────────────────────────────────────

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_token(token: str) -> str:
    """Digest for refresh/reset tokens at rest. JWTs are longer than bcrypt's 72 byte limit."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> str:
    return secrets.token_hex(32)


# ── JWT ──────────────────────────────────────────────────────────────

def _create_token(user: User, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Keeps two tokens minted in the same second distinct
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(user: User) -> str:
    return _create_token(
        user, ACCESS_TOKEN_TYPE, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(user: User) -> str:
    return _create_token(
        user, REFRESH_TOKEN_TYPE, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )


def decode_token(token: str, expected_type: str) -> dict:
    """Decode and validate a token; any failure is a 401."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")
    if payload.get("type") != expected_type or payload.get("sub") is None:
        raise UnauthorizedError("Invalid or expired token")
    return payload


# ── Dependencies ─────────────────────────────────────────────────────

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    payload = decode_token(credentials.credentials, ACCESS_TOKEN_TYPE)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")

    user = active_users(db).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError("User not found or inactive")
    return user


def require_roles(*roles):
    """Dependency factory: only let the listed roles through."""
    allowed = {r.value if hasattr(r, "value") else r for r in roles}

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role.lower() not in allowed:
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user

    return checker
