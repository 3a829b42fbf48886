"""Shared pytest fixtures and configuration."""
from __future__ import annotations

import os
import tempfile

import pytest

# Settings are read once at import time, so the environment must be in place
# before anything from brokerdesk is imported.
_TMP = tempfile.mkdtemp(prefix="brokerdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_PATH"] = os.path.join(_TMP, "uploads")
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-entropy-0123456789"
os.environ["JWT_EXP_MINUTES"] = "60"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["APP_ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from brokerdesk.db import Base, SessionLocal, engine, init_db  # noqa: E402
from brokerdesk.main import create_app  # noqa: E402

from tests.factories import auth_headers, signup_payload  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def register(api):
    """Sign a user up through the API; returns (token, user_json)."""

    def _register(**overrides):
        r = api.post("/api/auth/signup", json=signup_payload(**overrides))
        assert r.status_code == 201, r.text
        body = r.json()
        return body["token"], body["user"]

    return _register


@pytest.fixture
def broker(register):
    token, user = register(first_name="Jane", last_name="Doe", city="Austin")
    return {"token": token, "user": user, "headers": auth_headers(token)}


@pytest.fixture
def other_broker(register):
    token, user = register(first_name="Bob", last_name="Rival", city="Dallas")
    return {"token": token, "user": user, "headers": auth_headers(token)}
