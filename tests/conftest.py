"""
Test configuration and fixtures for the Estate Listing API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read at import time, so the test environment goes first
os.environ["ENVIRONMENT"] = "testing"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["EXPOSE_ERROR_DETAILS"] = "true"

import pytest
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from httpx import AsyncClient, ASGITransport

from app import models  # noqa: F401
from app.main import app
from app.database import Base, get_db, get_session_factory
from app.models.user import User, UserRole
from app.models.property import (
    Property,
    PropertyType,
    ListingType,
    PropertyStatus,
    Amenity,
)
from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.services.auth import AuthService
from app.services.property import PropertyService
from app.services.user import UserService
from app.services.admin import AdminService
from app.utils.auth import create_access_token

API = "/api"
DEFAULT_PASSWORD = "password123"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
async def test_engine(tmp_path):
    """Fresh SQLite file database per test; a file lets several sessions run at once."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'estate_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the per-test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    return PropertyService(db_session)


@pytest.fixture
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


@pytest.fixture
def admin_service(db_session: AsyncSession, session_factory) -> AdminService:
    return AdminService(db_session, session_factory)


@pytest.fixture
def failing_active_count(monkeypatch):
    """Make the active-listing count fail while every other count still works."""
    async def count(self, filters=None):
        if filters and filters.get("status") == PropertyStatus.ACTIVE:
            raise RuntimeError("count of active listings failed")
        return await BaseRepository.count(self, filters)

    monkeypatch.setattr(PropertyRepository, "count", count)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        phone: Optional[str] = None
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "phone": phone,
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        phone: Optional[str] = None,
        created_at: Optional[datetime] = None
    ) -> User:
        """Create a test user in the database."""
        user_data = UserFactory.create_user_data(
            email=email, password=password, name=name, role=role, phone=phone
        )
        if created_at is not None:
            user_data["created_at"] = created_at
        return await user_repo.create_user(user_data)


class PropertyFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_property_data(
        owner_id: uuid.UUID,
        title: str = "Sunny Apartment",
        description: str = "Bright two bedroom flat close to the market",
        property_type: PropertyType = PropertyType.APARTMENT,
        listing_type: ListingType = ListingType.SALE,
        price: Decimal = Decimal("5000000"),
        bedrooms: Optional[int] = 2,
        bathrooms: Optional[int] = 2,
        address: str = "12 MG Road",
        city: str = "Pune",
        state: str = "Maharashtra",
        pincode: str = "411001",
        status: PropertyStatus = PropertyStatus.PENDING,
        created_at: Optional[datetime] = None
    ) -> dict:
        """Create listing column values."""
        data = {
            "title": title,
            "description": description,
            "property_type": property_type,
            "listing_type": listing_type,
            "price": price,
            "area_value": Decimal("1000"),
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "address": address,
            "city": city,
            "state": state,
            "pincode": pincode,
            "owner_id": owner_id,
            "status": status,
        }
        if created_at is not None:
            data["created_at"] = created_at
        return data

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        owner_id: uuid.UUID,
        amenities: Iterable[Amenity] = (),
        **fields
    ) -> Property:
        """Create a test listing in the database."""
        data = PropertyFactory.create_property_data(owner_id=owner_id, **fields)
        return await property_repo.create_property(data, list(amenities))


def minutes_after_base(minutes: int) -> datetime:
    """Deterministic creation times for ordering tests."""
    return BASE_TIME + timedelta(minutes=minutes)


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for a stored user."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def property_payload(**overrides) -> dict:
    """Valid camelCase body for POST /properties."""
    payload = {
        "title": "Riverside Villa",
        "description": "Four bedroom villa with a private garden",
        "propertyType": "Villa",
        "listingType": "Sale",
        "price": 25000000,
        "area": {"value": 3200, "unit": "sq ft"},
        "bedrooms": 4,
        "bathrooms": 3,
        "location": {
            "address": "7 River Road",
            "city": "Nashik",
            "state": "Maharashtra",
            "pincode": "422001",
            "coordinates": {"type": "Point", "coordinates": [73.79, 19.99]},
        },
        "amenities": ["Garden", "Parking"],
        "images": [{"url": "https://img.example.com/villa.jpg", "publicId": "villa-1"}],
    }
    payload.update(overrides)
    return payload


# User fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository, email="user@example.com", name="Regular User", role=UserRole.USER
    )


@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository, email="agent@example.com", name="Agent Smith",
        role=UserRole.AGENT, phone="+91 90000 00001"
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository, email="admin@example.com", name="Site Admin", role=UserRole.ADMIN
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agent: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository, test_agent.id, amenities=[Amenity.PARKING, Amenity.GYM]
    )


@pytest.fixture
def user_headers(test_user: User) -> Dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture
def agent_headers(test_agent: User) -> Dict[str, str]:
    return auth_headers(test_agent)


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers(test_admin)
