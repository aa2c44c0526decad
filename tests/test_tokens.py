"""Email verification and password reset token tests."""

from datetime import timedelta

import pytest

from ideaportal.core.exceptions import TokenUsedError
from ideaportal.db.session import SessionLocal
from ideaportal.core.security import hash_token, utc_now
from ideaportal.models.tokens import EmailVerificationToken, PasswordResetToken
from ideaportal.services.mail_service import mail_service
from ideaportal.services.token_service import token_service
from tests.utils import link_params, login, signup


def _verify(client, params):
    return client.get("/api/auth/verify", params=params).json()


def _request_reset(client, email="ana@empresa.com"):
    return client.post("/api/auth/request-reset", json={"email": email}).json()


def _reset(client, uid, token, password="nova-senha-1"):
    return client.post("/api/auth/reset", json={"uid": uid, "token": token, "password": password}).json()


# ============================================================================
# EMAIL VERIFICATION
# ============================================================================

def test_token_is_stored_hashed(client, db):
    params = link_params(signup(client)["verify_link"])
    row = db.query(EmailVerificationToken).one()
    assert row.token_hash == hash_token(params["token"])
    assert row.token_hash != params["token"]
    assert row.used_at is None


def test_verify_marks_email_verified(client):
    params = link_params(signup(client)["verify_link"])

    assert _verify(client, params) == {"ok": True}
    assert login(client)["email_verified"] is True


def test_verify_token_is_single_use(client):
    params = link_params(signup(client)["verify_link"])

    assert _verify(client, params)["ok"] is True
    assert _verify(client, params) == {"ok": False, "error": "token_usado"}


def test_verify_wrong_token(client):
    params = link_params(signup(client)["verify_link"])
    params["token"] = params["token"] + "x"

    assert _verify(client, params)["error"] == "token_invalido"
    assert login(client)["email_verified"] is False


def test_verify_without_issued_token(client):
    assert _verify(client, {"uid": 42, "token": "abc"})["error"] == "token_invalido"


def test_verify_expired_token(client, db):
    params = link_params(signup(client)["verify_link"])
    db.query(EmailVerificationToken).update({"expires_at": utc_now() - timedelta(seconds=1)})
    db.commit()

    assert _verify(client, params)["error"] == "token_expirado"


def test_expiry_is_checked_before_hash(client, db):
    params = link_params(signup(client)["verify_link"])
    db.query(EmailVerificationToken).update({"expires_at": utc_now() - timedelta(seconds=1)})
    db.commit()

    assert _verify(client, {"uid": params["uid"], "token": "wrong"})["error"] == "token_expirado"


def test_used_is_checked_before_hash(client):
    params = link_params(signup(client)["verify_link"])
    _verify(client, params)

    assert _verify(client, {"uid": params["uid"], "token": "wrong"})["error"] == "token_usado"


# ============================================================================
# PASSWORD RESET
# ============================================================================

def test_reset_flow(client, mail_dir):
    uid = signup(client)["user"]["id"]

    assert _request_reset(client) == {"ok": True}
    link = (mail_dir / f"reset_{uid}.txt").read_text(encoding="utf-8")
    assert "/reset.html?" in link
    params = link_params(link)

    assert _reset(client, params["uid"], params["token"]) == {"ok": True}
    assert login(client, password="nova-senha-1")["ok"] is True
    assert login(client)["error"] == "invalid_credentials"


def test_reset_token_is_single_use(client):
    uid = signup(client)["user"]["id"]
    _request_reset(client)
    params = link_params(mail_service.read("reset", uid))

    assert _reset(client, params["uid"], params["token"])["ok"] is True
    assert _reset(client, params["uid"], params["token"], "outra-senha")["error"] == "token_usado"


def test_reset_for_unknown_email_looks_the_same(client, db, mail_dir):
    uid = signup(client)["user"]["id"]
    known = _request_reset(client)
    unknown = _request_reset(client, "ninguem@empresa.com")

    assert known == unknown == {"ok": True}
    assert db.query(PasswordResetToken).count() == 1
    assert sorted(p.name for p in mail_dir.glob("reset_*")) == [f"reset_{uid}.txt"]


def test_new_reset_supersedes_older_token(client, db):
    uid = signup(client)["user"]["id"]
    _request_reset(client)
    first = link_params(mail_service.read("reset", uid))
    _request_reset(client)
    second = link_params(mail_service.read("reset", uid))

    assert first["token"] != second["token"]
    assert _reset(client, uid, first["token"])["error"] == "token_invalido"
    assert _reset(client, uid, second["token"])["ok"] is True

    rows = db.query(PasswordResetToken).order_by(PasswordResetToken.id).all()
    assert all(row.used_at is not None for row in rows)


def test_reset_with_empty_password_keeps_token(client):
    uid = signup(client)["user"]["id"]
    _request_reset(client)
    params = link_params(mail_service.read("reset", uid))

    assert _reset(client, uid, params["token"], "")["error"] == "invalid_data"
    assert _reset(client, uid, params["token"])["ok"] is True


def test_expired_reset_token(client, db):
    uid = signup(client)["user"]["id"]
    _request_reset(client)
    params = link_params(mail_service.read("reset", uid))
    db.query(PasswordResetToken).update({"expires_at": utc_now() - timedelta(minutes=1)})
    db.commit()

    assert _reset(client, uid, params["token"])["error"] == "token_expirado"


def test_token_stamped_by_concurrent_consumer(client, db):
    params = link_params(signup(client)["verify_link"])
    # This session has read the row while it was still unused
    assert db.query(EmailVerificationToken).one().used_at is None

    other = SessionLocal()
    try:
        other.query(EmailVerificationToken).update({"used_at": utc_now()})
        other.commit()
    finally:
        other.close()

    with pytest.raises(TokenUsedError):
        token_service.consume(db, EmailVerificationToken, params["uid"], params["token"])
