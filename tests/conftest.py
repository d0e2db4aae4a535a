"""
Pytest configuration and fixtures
"""
import pytest
import os
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add src to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables before importing
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce log noise in tests
os.environ.pop("SMTP_HOST", None)

# Import after setting env vars
from wellness_ledger.db import Base, get_db
from wellness_ledger.db.models import (
    User,
    Company,
    CompanyEmployee,
    EmployeeStatus,
    Specialist,
    Booking,
    BookingStatus,
)
from wellness_ledger.services.notification_service import NotificationService
from wellness_ledger.main import app


@pytest.fixture(scope="function")
def test_engine():
    """In-memory SQLite engine with a fresh schema per test"""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Session:
    """Create a database session for each test"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create test client bound to the test session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def notifications():
    """Notification service double that records sends"""
    service = Mock(spec=NotificationService)
    service.send_low_minutes_warning.return_value = True
    service.send_payout_requested.return_value = True
    service.send_payout_processed.return_value = True
    return service


@pytest.fixture
def make_user(db_session):
    """Factory for users"""
    counter = {"n": 0}

    def _make(email: str = None, full_name: str = "Test User", is_admin: bool = False) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            full_name=full_name,
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_company(db_session, make_user):
    """Factory for companies with an admin user"""
    def _make(
        name: str = "Acme",
        minutes_included: int = 500,
        minutes_used: int = 0,
        email_domain: str = None,
        plan_type: str = "starter",
        admin: User = None,
    ) -> Company:
        admin = admin or make_user(full_name=f"{name} Admin")
        company = Company(
            name=name,
            email_domain=email_domain,
            admin_user_id=admin.id,
            plan_type=plan_type,
            minutes_included=minutes_included,
            minutes_used=minutes_used,
            subscription_period_start=datetime(2026, 3, 1),
            subscription_period_end=datetime(2026, 4, 1),
        )
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return _make


@pytest.fixture
def make_employee(db_session, make_user):
    """Factory for accepted company employees"""
    def _make(company: Company, user: User = None, status: str = EmployeeStatus.ACCEPTED.value) -> User:
        user = user or make_user()
        db_session.add(CompanyEmployee(
            company_id=company.id,
            user_id=user.id,
            email=user.email,
            status=status,
            accepted_at=datetime(2026, 3, 1) if status == EmployeeStatus.ACCEPTED.value else None,
        ))
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_specialist(db_session):
    """Factory for specialists"""
    def _make(rate_tier: str = "standard", full_name: str = "Sam Specialist") -> Specialist:
        specialist = Specialist(
            full_name=full_name,
            email=f"{full_name.lower().replace(' ', '.')}@specialists.example",
            rate_tier=rate_tier,
        )
        db_session.add(specialist)
        db_session.commit()
        db_session.refresh(specialist)
        return specialist

    return _make


@pytest.fixture
def make_booking(db_session):
    """Factory for bookings"""
    def _make(
        specialist: Specialist,
        employee: User,
        status: str = BookingStatus.APPROVED.value,
        session_duration: int = 60,
        minutes_deducted: int = None,
        payout_rate: Decimal = None,
        confirmed_datetime: datetime = None,
        completed_at: datetime = None,
    ) -> Booking:
        booking = Booking(
            specialist_id=specialist.id,
            employee_user_id=employee.id,
            status=status,
            session_duration=session_duration,
            minutes_deducted=minutes_deducted,
            payout_rate=payout_rate,
            confirmed_datetime=confirmed_datetime,
            completed_at=completed_at,
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make


@pytest.fixture
def employee_setup(make_company, make_employee, make_specialist, make_booking):
    """Company with 500 minutes, one employee and an approved booking with an expert"""
    company = make_company(minutes_included=500)
    employee = make_employee(company)
    specialist = make_specialist(rate_tier="expert")
    booking = make_booking(specialist, employee)
    return company, employee, specialist, booking
