import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from user_management_api.app import app
from user_management_api.models.base import Base, get_db
from user_management_api.models.user import User
from user_management_api.services.password import hash_password

TEST_JWT_KEY = "test-signing-key-that-is-at-least-32-bytes-long"
TEST_JWT_ISSUER = "user-management-api"
TEST_JWT_AUDIENCE = "user-management-clients"


@pytest.fixture(autouse=True)
def jwt_env(monkeypatch):
    monkeypatch.setenv("JWT_KEY", TEST_JWT_KEY)
    monkeypatch.setenv("JWT_ISSUER", TEST_JWT_ISSUER)
    monkeypatch.setenv("JWT_AUDIENCE", TEST_JWT_AUDIENCE)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(username="user1", password="secret1", **fields):
        user = User(
            username=username,
            email=fields.get("email", f"{username}@example.com"),
            first_name=fields.get("first_name", "John"),
            last_name=fields.get("last_name", "Doe"),
            password_hash=hash_password(password),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers(client, make_user):
    make_user(username="admin", password="adminpass")
    response = client.post("/users/token", json={"username": "admin", "password": "adminpass"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
