"""
Pytest configuration and fixtures for testing.
"""
import os

# The app module builds its engine at import time; keep it off PostgreSQL
os.environ["DATABASE_URL"] = "sqlite://"
# Minimum bcrypt cost keeps user fixtures fast
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.session import Base, build_engine, get_db
from main import app
from app.models.account import RoleEnum
from app.models.vehicle import Brand
from tests.fixtures import bearer, create_driver, create_trip, create_user, create_vehicle


# Test database URL - using in-memory SQLite for tests
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_db():
    """
    Create a fresh test database for each test function.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def file_session_factory(tmp_path):
    """
    Session factory over a file-backed SQLite database.

    Each session gets its own connection, so threads really compete for the
    database the way separate requests would.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'carpool_race.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autoflush=False, bind=engine)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db):
    """
    Create a test client with database override. Authentication is real:
    tokens are resolved against the test database.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==========================================
# Fixtures
# ==========================================

@pytest.fixture(scope="function")
def rider(test_db):
    return create_user(test_db, "alice@example.com", first_name="Alice")


@pytest.fixture(scope="function")
def rider_b(test_db):
    return create_user(test_db, "bob@example.com", first_name="Bob")


@pytest.fixture(scope="function")
def rider_c(test_db):
    return create_user(test_db, "carol@example.com", first_name="Carol")


@pytest.fixture(scope="function")
def admin(test_db):
    return create_user(test_db, "admin@example.com", first_name="Admin", role=RoleEnum.ADMIN)


@pytest.fixture(scope="function")
def driver(test_db):
    return create_driver(test_db, "driver@example.com", first_name="Dan")


@pytest.fixture(scope="function")
def other_driver(test_db):
    return create_driver(test_db, "other.driver@example.com", first_name="Olga", license_number="LIC-0002")


@pytest.fixture(scope="function")
def brand(test_db):
    brand = Brand(name="Renault")
    test_db.add(brand)
    test_db.commit()
    test_db.refresh(brand)
    return brand


@pytest.fixture(scope="function")
def vehicle(test_db, driver, brand):
    return create_vehicle(test_db, driver, brand, "AB-123-CD")


@pytest.fixture(scope="function")
def other_vehicle(test_db, other_driver, brand):
    return create_vehicle(test_db, other_driver, brand, "EF-456-GH", model_name="Megane")


@pytest.fixture(scope="function")
def trip(test_db, driver, vehicle):
    return create_trip(test_db, driver, vehicle, seats=2)


@pytest.fixture(scope="function")
def rider_headers(rider):
    return bearer(rider)


@pytest.fixture(scope="function")
def driver_headers(driver):
    return bearer(driver)


@pytest.fixture(scope="function")
def admin_headers(admin):
    return bearer(admin)
