# File: tests/conftest.py

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_JSON"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from expense_tracker.db.init_db import run_migrations
from expense_tracker.db.session import build_engine, get_db
from expense_tracker.main import app

PASSWORD = "s3cret-pass"


@pytest.fixture(scope="session")
def engine():
    test_engine = build_engine("sqlite://")
    run_migrations(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    TestingSessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email, password=PASSWORD):
    return client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "confirm_password": password},
    )


def login_headers(client, email, password=PASSWORD):
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client):
    assert register(client, "jade@mail.com").status_code == 201
    return login_headers(client, "jade@mail.com")


@pytest.fixture()
def other_headers(client):
    assert register(client, "rook@mail.com").status_code == 201
    return login_headers(client, "rook@mail.com")
