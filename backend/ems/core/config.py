from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Employee Attendance API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql://ems_user:ems_pass@db:5432/ems_db"

    # Redis (Celery broker for the email queue)
    REDIS_URL: str = "redis://redis:6379/0"

    # Security
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # Attendance
    LATE_THRESHOLD: str = "09:30:00"

    # Mailgun
    MAILGUN_API_KEY: Optional[str] = None
    MAILGUN_DOMAIN: Optional[str] = None
    MAILGUN_FROM_EMAIL: str = "noreply@company.com"
    MAILGUN_FROM_NAME: str = "Employee Attendance System"

    # Email queue retry policy: 1 attempt + EMAIL_MAX_RETRIES retries
    EMAIL_MAX_RETRIES: int = 2
    EMAIL_RETRY_BACKOFF: int = 1  # seconds, doubled on each retry

    # App URL (frontend, used in email links)
    APP_URL: str = "http://localhost:3000"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Default admin created on first startup
    SEED_ADMIN_EMAIL: str = "admin@company.com"
    SEED_ADMIN_PASSWORD: str = "Admin@123"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
