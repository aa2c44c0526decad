"""Server-side login session."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from ideaportal.db.base import Base


class LoginSession(Base):
    """Identity snapshot behind a session cookie.

    The primary key is the SHA-256 of the cookie value, so a leaked table
    does not hand out live sessions.
    """
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False)
    register = Column(String(64), nullable=True)
    user_agent = Column(String(255), nullable=True)
    ip = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
