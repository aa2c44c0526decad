import os

# Must be set before any ideaportal module reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEBUG"] = "false"
os.environ["GOOGLE_CLIENT_ID"] = "portal-client-id"

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import ideaportal.models  # noqa: F401
from ideaportal.core.config import settings
from ideaportal.db.base import Base
from ideaportal.db.seeds.seed_defaults import seed_defaults
from ideaportal.db.session import SessionLocal, engine
from ideaportal.main import app
from tests.utils import login, signup


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def mail_dir(tmp_path, monkeypatch):
    """Send the mail outbox to a per-test directory."""
    path = tmp_path / "mails"
    monkeypatch.setattr(settings, "MAIL_DIR", str(path))
    return path


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def defaults(db):
    """Default badge and the two starter campaigns."""
    seed_defaults(db)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_client(client) -> TestClient:
    """A client holding a logged-in session for ana@empresa.com."""
    signup(client)
    body = login(client)
    assert body["ok"] is True
    return client
