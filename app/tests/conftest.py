import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BOOKING_RETRY_BACKOFF", "0")

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import Engine, StaticPool, create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.orm.session import Session  # noqa: E402

from app.database import models  # noqa: E402, F401
from app.database.db import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.users import User  # noqa: E402
from app.tests.factories import PASSWORD, sign_up_and_in  # noqa: E402

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch):
    """Back the per-event booking lock with an in-process fake Redis."""
    fake = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr("app.services.transactions.get_redis_client", lambda: fake)
    return fake


@pytest.fixture
def user_headers(client: TestClient) -> dict[str, str]:
    return sign_up_and_in(client, "alice@example.com")


@pytest.fixture
def admin_headers(client: TestClient, db_session: Session) -> dict[str, str]:
    response = client.post(
        "/auth/signup",
        json={"email": "admin@example.com", "password": PASSWORD, "display_name": "Admin"},
    )
    assert response.status_code == 201, response.text
    admin = db_session.query(User).filter(User.email == "admin@example.com").one()
    admin.is_admin = True
    db_session.commit()
    response = client.post("/auth/signin", json={"email": "admin@example.com", "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
