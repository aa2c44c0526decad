"""Gamification badges."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ideaportal.db.base import Base

FIRST_IDEA_BADGE = "primeira_ideia"


class Badge(Base):
    __tablename__ = "badges"

    code = Column(String(64), primary_key=True)
    label = Column(String(128), nullable=False)


class UserBadge(Base):
    """Badge granted to a user; at most once per badge."""
    __tablename__ = "user_badges"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    badge_code = Column(String(64), ForeignKey("badges.code", ondelete="CASCADE"), primary_key=True)
    granted_at = Column(DateTime, server_default=func.now(), nullable=False)

    badge = relationship("Badge", lazy="joined")
