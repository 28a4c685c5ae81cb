import os
import tempfile

# Set BEFORE any app imports: config is read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["BOOKING_EXPIRY_ENABLED"] = "false"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="hall-booking-logs-")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.dependencies import get_db
from app.db.base import Base
from app.main import app
from app.models.booking import Booking
from app.models.enums import BookingStatus, PaymentStatus, UserRole
from app.models.hall import Hall
from app.models.user import User
from app.models.venue import Venue
from app.utils.dates import utcnow
from app.utils.pricing import calculate_deposit_split

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session_factory():
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# FACTORIES
# ============================================================================
@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.PLANNER, name=None):
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=f"{role.value}{counter['n']}@example.com",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def owner(make_user):
    return make_user(UserRole.VENUE_HOLDER, name="Olu Owner")


@pytest.fixture
def planner(make_user):
    return make_user(UserRole.PLANNER, name="Ada Planner")


@pytest.fixture
def other_planner(make_user):
    return make_user(UserRole.PLANNER, name="Bayo Planner")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, name="Site Admin")


@pytest.fixture
def venue(db, owner):
    venue = Venue(owner_user_id=owner.id, title="Eko Gardens", city="Lagos")
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


@pytest.fixture
def hall(db, venue):
    hall = Hall(venue_id=venue.id, name="Grand Hall", capacity=300, price=200000, deposit_percentage=50)
    db.add(hall)
    db.commit()
    db.refresh(hall)
    return hall


@pytest.fixture
def make_booking(db, hall):
    """Insert a booking row directly in any state, bypassing the lifecycle."""

    def _make(planner, start_date, end_date=None, status=BookingStatus.REQUESTED, accepted_at=None, **extra):
        total = extra.pop("total_amount", hall.price)
        deposit, balance = calculate_deposit_split(total, hall.deposit_percentage)
        booking = Booking(
            venue_id=hall.venue_id,
            hall_id=hall.id,
            planner_user_id=planner.id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            total_amount=total,
            deposit_amount=deposit,
            balance_amount=balance,
            deposit_paid=extra.pop("deposit_paid", False),
            balance_paid=False,
            payment_status=extra.pop("payment_status", PaymentStatus.PENDING),
            accepted_at=accepted_at,
            expiry_notification_sent=extra.pop("expiry_notification_sent", False),
            **extra,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def future_date():
    return utcnow().date() + timedelta(days=60)

