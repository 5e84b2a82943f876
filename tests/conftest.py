import os

# Settings are read at import time, so configure them before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("INSTITUTION_NAME", "Test Institute of Technology")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from markscard.core.database import Base, create_db_engine, get_db
from markscard.core.security import hash_password
from markscard.core.session import admin_sessions
from markscard.main import app
from markscard.models.admin import Admin

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(autouse=True)
def clear_sessions():
    admin_sessions.clear()
    yield
    admin_sessions.clear()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin(session_factory):
    with session_factory() as session:
        account = Admin(
            username=ADMIN_USERNAME,
            full_name="Exam Cell",
            password_hash=hash_password(ADMIN_PASSWORD),
            is_active=True,
        )
        session.add(account)
        session.commit()
        return account


@pytest.fixture
def admin_token(client, admin):
    response = client.post(
        "/api/v1/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def john(client, auth_headers):
    """A student with the reference marks used across the suite."""
    response = client.post(
        "/api/v1/students",
        json={
            "seat_number": "1bm20cs001",
            "full_name": "John Doe",
            "date_of_birth": "2002-05-15",
            "marks": {"DSA": 85, "ADA": 78, "DBMS": 92, "JAVA": 88, "OS": 81},
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
