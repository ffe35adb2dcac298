"""Shared fixtures: in-memory database, client, and a seeded tenant."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from billtracker.core.database import Base, get_db
from billtracker.main import app
from billtracker.models.building import Building
from billtracker.models.organization import Organization
from billtracker.services.auth import create_access_token, create_user

PASSWORD = "correct-horse-battery"


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(test_db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(test_db):
    """A user who belongs to one organization."""
    return create_user(test_db, "owner@example.com", PASSWORD, full_name="Owner")


@pytest.fixture
def organization(test_db, test_user):
    """An organization with test_user as a member."""
    org = Organization(name="Acme Properties")
    org.members.append(test_user)
    test_db.add(org)
    test_db.commit()
    test_db.refresh(org)
    return org


@pytest.fixture
def building(test_db, organization):
    """A building owned by the test organization."""
    bldg = Building(
        organization_id=organization.id,
        name="Main Street Office",
        address="123 Main St",
        state="KS",
        square_feet=42000,
    )
    test_db.add(bldg)
    test_db.commit()
    test_db.refresh(bldg)
    return bldg


@pytest.fixture
def foreign_building(test_db):
    """A building in an organization test_user does not belong to."""
    other_org = Organization(name="Someone Else LLC")
    test_db.add(other_org)
    test_db.flush()
    bldg = Building(organization_id=other_org.id, name="Elsewhere Plaza")
    test_db.add(bldg)
    test_db.commit()
    test_db.refresh(bldg)
    return bldg


@pytest.fixture
def auth_headers(test_user):
    """Bearer token headers for test_user."""
    token = create_access_token(data={"sub": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_password():
    """Plain-text password of test_user."""
    return PASSWORD
