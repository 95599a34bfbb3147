"""Shared fixtures: an isolated in-memory database and a TestClient bound to it."""

import os
import sys
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="clockwork-tests-"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

from app.core.config import settings  # noqa: E402
from app.db.session import get_db, init_db  # noqa: E402


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def engine():
    engine = _memory_engine()
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def utc_day(monkeypatch):
    """Evaluate calendar days in UTC regardless of the host configuration."""
    monkeypatch.setattr(settings, "TZ", "UTC")


@pytest.fixture()
def uploads_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "UPLOADS_DIR", path)
    return path


@pytest.fixture()
def client(engine, uploads_dir):
    from fastapi.testclient import TestClient

    from app.core.rate_limit import limiter
    from app.main import app

    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def register(client, email="ada@example.com", password="s3cret!", full_name="Ada Lovelace"):
    return client.post("/auth/register", json={"email": email, "password": password, "fullName": full_name})


def login(client, email="ada@example.com", password="s3cret!"):
    return client.post("/auth/login", json={"email": email, "password": password})


@pytest.fixture()
def auth_headers(client):
    assert register(client).status_code == 200
    response = login(client)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
