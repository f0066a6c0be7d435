# File: tests/test_errors.py

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from expense_tracker.core.errors import AuthFailure, NotFoundFailure, register_exception_handlers


def _client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/down")
    def down():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    @app.get("/conflict")
    def conflict():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @app.get("/missing")
    def missing():
        raise NotFoundFailure("Expense not found or access denied")

    @app.get("/auth")
    def auth():
        raise AuthFailure()

    return TestClient(app)


def test_connection_failure_maps_to_503():
    resp = _client().get("/down")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "Database unavailable"}


def test_integrity_error_maps_to_409():
    resp = _client().get("/conflict")
    assert resp.status_code == 409


def test_not_found_keeps_detail():
    resp = _client().get("/missing")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Expense not found or access denied"


def test_auth_failure_sets_challenge_header():
    resp = _client().get("/auth")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
    assert resp.json()["detail"] == "Could not validate credentials"
