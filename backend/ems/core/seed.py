"""Schema creation and the default admin account."""
import logging

from ems.core.config import settings
from ems.core.database import Base, SessionLocal, engine
from ems.core.security import get_password_hash
from ems.models.user import User, UserRole

logger = logging.getLogger(__name__)

ADMIN_IDENTIFIER = "ADMIN001"


def create_tables(bind=None):
    # Importing the models registers their tables on Base.metadata
    import ems.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def seed_admin(db):
    """Create the default admin once. Returns the admin user."""
    admin = db.query(User).filter(User.email == settings.SEED_ADMIN_EMAIL).first()
    if admin:
        return admin

    admin = User(
        email=settings.SEED_ADMIN_EMAIL,
        first_name="System",
        last_name="Administrator",
        hashed_password=get_password_hash(settings.SEED_ADMIN_PASSWORD),
        employee_identifier=ADMIN_IDENTIFIER,
        role=UserRole.ADMIN.value,
        is_active=True,
        is_email_verified=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Default admin created (%s)", admin.email)
    return admin


def init_database():
    """Create tables and seed the admin account."""
    logger.info("Creating database tables...")
    create_tables()
    db = SessionLocal()
    try:
        seed_admin(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
