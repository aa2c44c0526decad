"""Server-side sessions behind an opaque cookie."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ideaportal.core.config import settings
from ideaportal.core.exceptions import NotAuthenticatedError
from ideaportal.core.security import generate_token, hash_token, utc_now
from ideaportal.models.login_session import LoginSession
from ideaportal.models.user import User

logger = logging.getLogger("idea_portal.session")


@dataclass
class SessionContext:
    """Identity of the caller for one request."""

    user_id: Optional[int] = None
    email: str = ""
    name: str = ""
    register: str = ""
    session_id: Optional[str] = None

    def require(self) -> int:
        """Return the user id, or raise if the caller is anonymous."""
        if not self.user_id:
            raise NotAuthenticatedError("Login required")
        return self.user_id

    def as_user(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "register": self.register,
        }


class SessionService:
    """Creates, resolves, and revokes login sessions."""

    @staticmethod
    def open(
        db: Session,
        user: User,
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> tuple[str, SessionContext]:
        """Start a session for ``user``; returns the raw cookie value and its context."""
        raw = generate_token()
        now = utc_now()
        record = LoginSession(
            id=hash_token(raw),
            user_id=user.id,
            name=user.name or "",
            email=user.email,
            register=user.register or "",
            user_agent=(user_agent or "")[:255] or None,
            ip=ip,
            created_at=now,
            expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
        )
        db.add(record)
        db.commit()
        logger.info("Session opened for user %s", user.id)
        return raw, SessionService._context(record, raw)

    @staticmethod
    def resolve(db: Session, raw: Optional[str]) -> SessionContext:
        """Turn a cookie value into a context; anything invalid is anonymous."""
        if not raw:
            return SessionContext()
        record = db.query(LoginSession).filter(LoginSession.id == hash_token(raw)).first()
        if record is None or record.revoked_at is not None:
            return SessionContext()
        if utc_now() > record.expires_at:
            return SessionContext()
        return SessionService._context(record, raw)

    @staticmethod
    def revoke(db: Session, raw: Optional[str]) -> None:
        """Invalidate a session; unknown values are ignored."""
        if not raw:
            return
        record = db.query(LoginSession).filter(LoginSession.id == hash_token(raw)).first()
        if record is None or record.revoked_at is not None:
            return
        record.revoked_at = utc_now()
        db.commit()
        logger.info("Session revoked for user %s", record.user_id)

    @staticmethod
    def prune(db: Session) -> int:
        """Delete revoked and expired sessions; returns how many were removed."""
        removed = (
            db.query(LoginSession)
            .filter(or_(LoginSession.revoked_at.isnot(None), LoginSession.expires_at < utc_now()))
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info("Pruned %d sessions", removed)
        return removed

    @staticmethod
    def update_register(db: Session, ctx: SessionContext, register: str) -> SessionContext:
        """Refresh the register code cached in the caller's session."""
        if ctx.session_id:
            record = db.query(LoginSession).filter(
                LoginSession.id == hash_token(ctx.session_id)
            ).first()
            if record is not None:
                record.register = register
                db.commit()
        ctx.register = register
        return ctx

    @staticmethod
    def _context(record: LoginSession, raw: str) -> SessionContext:
        return SessionContext(
            user_id=record.user_id,
            email=record.email,
            name=record.name or "",
            register=record.register or "",
            session_id=raw,
        )


session_service = SessionService()
