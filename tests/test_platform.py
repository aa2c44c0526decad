"""Error transport, rate limiting, request ids and operator commands."""

import logging
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from typer.testing import CliRunner

from ideaportal.cli import app as cli_app
from ideaportal.core.rate_limiter import limiter
from ideaportal.core.security import hash_token, utc_now
from ideaportal.main import app
from ideaportal.models.audit_log import AuditLog
from ideaportal.models.login_session import LoginSession
from ideaportal.schemas.schemas import RegisterLinkRequest, UserOut
from ideaportal.services.idea_service import idea_service
from ideaportal.services.session_service import session_service
from tests.utils import login, signup


@pytest.fixture
def rate_limited(monkeypatch):
    """Turn the limiter on with empty counters."""
    limiter.reset()
    monkeypatch.setattr(limiter, "enabled", True)
    yield
    limiter.reset()


# ============================================================================
# ERROR TRANSPORT
# ============================================================================

def test_login_rate_limit(client, rate_limited):
    responses = [
        client.post("/api/auth/login", json={"email": "ana@empresa.com", "password": "errada"})
        for _ in range(11)
    ]

    assert all(r.status_code == 200 for r in responses[:10])
    last = responses[-1]
    assert last.status_code == 429
    assert last.json() == {"ok": False, "error": "too_many_requests"}
    assert last.headers["Retry-After"] == "60"


def test_unlimited_routes_ignore_limiter(client, rate_limited):
    for _ in range(15):
        assert client.get("/api/campaigns").status_code == 200


def test_database_failure_is_internal_error(client, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("server has gone away"))

    monkeypatch.setattr(idea_service, "list_ideas", broken)
    resp = client.get("/api/ideas")

    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "error": "internal_error"}


# ============================================================================
# REQUEST IDS
# ============================================================================

def test_request_id_reaches_audit_log(client, db):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "ana@empresa.com", "password": "segredo123"},
        headers={"X-Request-Id": "req-7f3a.01"},
    )

    assert resp.headers["X-Request-Id"] == "req-7f3a.01"
    entry = db.query(AuditLog).filter(AuditLog.action == "user.signup").one()
    assert entry.request_id == "req-7f3a.01"


def test_generated_request_id_when_header_unusable(client, db):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "ana@empresa.com", "password": "segredo123"},
        headers={"X-Request-Id": "not valid; " + "x" * 80},
    )

    request_id = resp.headers["X-Request-Id"]
    assert len(request_id) == 32
    assert db.query(AuditLog).one().request_id == request_id


def test_access_log_names_session_user(auth_client, caplog):
    user_id = auth_client.get("/api/auth/me").json()["user"]["id"]
    caplog.clear()
    caplog.set_level(logging.INFO, logger="idea_portal.access")

    auth_client.get("/api/auth/me")
    TestClient(app).get("/api/auth/me")

    lines = [r.getMessage() for r in caplog.records if r.name == "idea_portal.access"]
    assert any(f"user={user_id} " in line for line in lines)
    assert any("user=- " in line for line in lines)


# ============================================================================
# SCHEMAS
# ============================================================================

def test_register_alias_on_the_wire():
    body = RegisterLinkRequest.model_validate({"register": "A-1"})
    assert body.register_code == "A-1"

    out = UserOut(id=1, email="ana@empresa.com", register="A-1")
    assert out.model_dump(by_alias=True)["register"] == "A-1"


def test_register_too_long(auth_client):
    resp = auth_client.post("/api/users/me/register", json={"register": "x" * 65})
    assert resp.status_code == 422
    assert resp.json()["error"] == "invalid_data"


# ============================================================================
# SESSION PRUNING
# ============================================================================

def _three_sessions(db):
    """One live, one logged out and one expired session; returns the live client."""
    live = TestClient(app)
    signup(live)
    login(live)

    logged_out = TestClient(app)
    login(logged_out)
    logged_out.post("/api/auth/logout")

    expired = TestClient(app)
    login(expired)
    raw = expired.cookies.get("portal_session")
    db.query(LoginSession).filter(LoginSession.id == hash_token(raw)).update(
        {"expires_at": utc_now() - timedelta(hours=1)}
    )
    db.commit()
    return live


def test_prune_removes_dead_sessions(db):
    live = _three_sessions(db)

    assert session_service.prune(db) == 2
    assert db.query(LoginSession).count() == 1
    assert live.get("/api/auth/me").json()["ok"] is True


def test_prune_sessions_command(db):
    _three_sessions(db)

    result = CliRunner().invoke(cli_app, ["db", "prune-sessions"])

    assert result.exit_code == 0
    assert "Removed 2 sessions" in result.output
    assert db.query(LoginSession).count() == 1
