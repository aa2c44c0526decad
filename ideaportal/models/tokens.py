"""Single-use email verification and password reset tokens."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import declared_attr
from ideaportal.db.base import Base


class _UserTokenMixin:
    # Only the SHA-256 of the token is stored, never the token itself
    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(64), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    @declared_attr
    def user_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)


class EmailVerificationToken(_UserTokenMixin, Base):
    """Token proving control of the signup email address."""
    __tablename__ = "email_verifications"


class PasswordResetToken(_UserTokenMixin, Base):
    """Token authorizing one password overwrite."""
    __tablename__ = "password_resets"
