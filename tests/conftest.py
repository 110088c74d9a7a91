"""
Pytest fixtures for test database, client, and authentication.

Uses an in-memory SQLite database shared through a StaticPool; tables are
created and dropped around every test for isolation.
"""

import os
import tempfile
from datetime import date, time, timedelta
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="myplan-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from myplan.auth.utils import create_access_token, get_password_hash
from myplan.database import Base, get_db
from myplan.main import app
from myplan.models import Admin, Experience, ExperienceDetail, User, Visitor

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def make_visitor(db, email: str, first_name: str, last_name: str) -> Visitor:
    user = User(
        full_name=f"{first_name} {last_name}",
        email=email,
        password_hash=get_password_hash("secret123"),
        role="visitor",
    )
    visitor = Visitor(user=user, first_name=first_name, last_name=last_name, phone="0551234567")
    db.add_all([user, visitor])
    db.commit()
    db.refresh(visitor)
    return visitor


def token_headers(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.user_id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session():
    """Create tables, yield session, then drop tables for isolation."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session):
    """HTTP client that overrides the DB dependency with the test session."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def visitor_user(db_session) -> Visitor:
    return make_visitor(db_session, "sara@example.com", "Sara", "Alqahtani")


@pytest.fixture
def other_visitor(db_session) -> Visitor:
    return make_visitor(db_session, "omar@example.com", "Omar", "Alharbi")


@pytest.fixture
def admin_user(db_session) -> Admin:
    user = User(
        full_name="Site Admin",
        email="admin@example.com",
        password_hash=get_password_hash("admin123"),
        role="admin",
    )
    admin = Admin(user=user, first_name="Site", last_name="Admin", position="Operations")
    db_session.add_all([user, admin])
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def auth_headers(visitor_user: Visitor) -> dict:
    """Authorization headers for the visitor."""
    return token_headers(visitor_user.user)


@pytest.fixture
def other_headers(other_visitor: Visitor) -> dict:
    return token_headers(other_visitor.user)


@pytest.fixture
def admin_headers(admin_user: Admin) -> dict:
    """Authorization headers for the admin."""
    return token_headers(admin_user.user)


@pytest.fixture
def experience(db_session) -> Experience:
    """An experience ten days out with two bookable slots at 100 SAR."""
    start = date.today() + timedelta(days=10)
    experience = Experience(
        title="Desert Stargazing",
        description="Night sky tour outside the city",
        type="Cultural",
        location="Riyadh Front",
        min_price=Decimal("100.00"),
        max_price=Decimal("100.00"),
        start_date=start,
        end_date=start + timedelta(days=1),
        max_capacity=20,
    )
    db_session.add(experience)
    db_session.flush()
    for offset in range(2):
        db_session.add(ExperienceDetail(
            experience=experience,
            date=start + timedelta(days=offset),
            time=time(19, 0),
            price=Decimal("100.00"),
        ))
    db_session.commit()
    db_session.refresh(experience)
    return experience


@pytest.fixture
def slot(experience) -> ExperienceDetail:
    return experience.details[0]
