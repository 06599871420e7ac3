import copy
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models
from database import Base, get_db
from main import app
from routers.auth import create_access_token, pwd_context

PROPERTY_PAYLOAD = {
    "title": "Beautiful 2BHK Apartment in Downtown",
    "description": (
        "A spacious 2BHK apartment with modern amenities, perfect for families. "
        "Located in the heart of downtown."
    ),
    "property_type": "apartment",
    "bhk": 2,
    "furnishing": "fully_furnished",
    "rent": 25000,
    "security_deposit": 50000,
    "maintenance": {"amount": 2000, "included": False},
    "built_up_area": 1200,
    "available_from": str(date.today() + timedelta(days=7)),
    "min_lock_in_period_months": 11,
    "allowed_tenants": "family",
    "pets_allowed": True,
    "location": {
        "city": "Mumbai",
        "area": "Bandra West",
        "landmark": "Near Linking Road",
        "pincode": "400050",
        "geo": {"lat": 19.0596, "lng": 72.8295},
    },
    "amenities": ["Parking", "Lift", "Gym"],
    "images": ["https://example.com/image1.jpg"],
}


@pytest.fixture
def property_payload():
    return copy.deepcopy(PROPERTY_PAYLOAD)


@pytest.fixture(autouse=True)
def clean_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def api(session_factory):
    """TestClient backed by a fresh in-memory database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role="tenant", name=None):
        counter["n"] += 1
        n = counter["n"]
        user = models.User(
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@example.com",
            phone=f"98765432{n:02d}",
            hashed_password=pwd_context.hash("password123"),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_property(db_session):
    def _make(owner, **overrides):
        prop = models.Property(
            owner_id=owner.id,
            title=overrides.pop("title", "Sunny flat near the park"),
            description="A bright and airy flat close to shops, schools and public transport links.",
            property_type="apartment",
            bhk=overrides.pop("bhk", 2),
            furnishing="semi_furnished",
            rent=overrides.pop("rent", 25000),
            security_deposit=50000,
            built_up_area=900,
            available_from=date.today(),
            city=overrides.pop("city", "Pune"),
            area=overrides.pop("area", "Baner"),
            pincode="411045",
            status=overrides.pop("status", "active"),
            **overrides,
        )
        db_session.add(prop)
        db_session.commit()
        db_session.refresh(prop)
        return prop

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers
