import os

# Configure before anything from ems is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_URL"] = "http://app.test"

import itertools
from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ems.core.database import Base, get_db
from ems.core.security import create_access_token, get_password_hash
from ems.main import app
from ems.models.attendance import Attendance
from ems.models.user import User, UserRole
from ems.services.email_service import EmailService, get_email_service
import ems.models  # noqa: F401

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Password123!"
_counter = itertools.count(1)


class FakeResult:
    def __init__(self, job_id):
        self.id = job_id


class FakeQueue:
    """Stands in for the Celery app: records send_task calls."""

    def __init__(self):
        self.sent = []

    def send_task(self, name, args=None, kwargs=None):
        self.sent.append((name, args or [], kwargs or {}))
        return FakeResult(f"job-{len(self.sent)}")

    def jobs(self, name=None):
        return [args[0] for task, args, _ in self.sent if name is None or task == name]


class BrokenQueue:
    def send_task(self, name, args=None, kwargs=None):
        raise ConnectionError("broker unreachable")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def queue():
    return FakeQueue()


@pytest.fixture
def email_service(queue):
    return EmailService(queue)


@pytest.fixture
def client(db, email_service):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(role=UserRole.EMPLOYEE, email=None, first_name="Jane", last_name=None,
              password=DEFAULT_PASSWORD, is_active=True):
        n = next(_counter)
        user = User(
            email=email or f"user{n}@company.com",
            first_name=first_name,
            last_name=last_name or f"Doe{n}",
            hashed_password=get_password_hash(password),
            employee_identifier=f"EMP{n:06d}",
            role=role.value if hasattr(role, "value") else role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_attendance(db):
    def _make(employee, day=None, clock_in=time(9, 0), clock_out=None,
              status="present", notes=None):
        attendance = Attendance(
            employee_id=employee.id,
            date=day or date.today(),
            clock_in=clock_in,
            clock_out=clock_out,
            status=status,
            notes=notes,
        )
        db.add(attendance)
        db.commit()
        db.refresh(attendance)
        return attendance

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def broken_email_service():
    return EmailService(BrokenQueue())
