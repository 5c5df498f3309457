"""Auth API: register, login, token refresh, logout and password reset."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ems.core.database import get_db
from ems.core.security import get_current_user
from ems.models.user import User
from ems.schemas.auth import (
    AuthResponse, ForgotPasswordRequest, LoginRequest, MessageResponse,
    RefreshRequest, RegisterRequest, ResetPasswordRequest,
)
from ems.schemas.user import UserOut
from ems.services.auth import AuthService
from ems.services.email_service import get_email_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def get_auth_service(
    db: Session = Depends(get_db),
    email_service=Depends(get_email_service),
):
    return AuthService(db, email_service)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    user, tokens = service.register(data)
    return {**tokens, "user": user}


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, tokens = service.login(data.email, data.password)
    return {**tokens, "user": user}


@router.post("/refresh", response_model=AuthResponse)
def refresh(data: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    user, tokens = service.refresh(data.refresh_token)
    return {**tokens, "user": user}


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    service.logout(current_user)
    return {"message": "Logged out successfully"}


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(data: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return {"message": service.forgot_password(data.email)}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(data: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return {"message": service.reset_password(data.token, data.new_password)}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
