"""Idea, vote, and comment models."""

import enum

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Enum, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from ideaportal.db.base import Base


class IdeaStatus(str, enum.Enum):
    EM_ELABORACAO = "EM_ELABORACAO"
    EM_TRIAGEM = "EM_TRIAGEM"
    EM_AVALIACAO = "EM_AVALIACAO"
    APROVADA = "APROVADA"
    REJEITADA = "REJEITADA"


class Idea(Base):
    """An idea submitted by a user, optionally under a campaign."""
    __tablename__ = "ideas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(
        Enum(IdeaStatus, native_enum=False, length=32),
        default=IdeaStatus.EM_ELABORACAO,
        nullable=False,
    )
    score_ai = Column(Integer, nullable=True)
    compat_ai = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    campaign = relationship("Campaign", lazy="joined")
    author = relationship("User", lazy="joined")


class IdeaVote(Base):
    """One up-vote per user per idea, enforced by the unique key."""
    __tablename__ = "idea_votes"
    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uniq_vote"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    idea_id = Column(Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(16), nullable=False, default="up")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class IdeaComment(Base):
    """Comment on an idea; replies point at their parent, stored flat."""
    __tablename__ = "idea_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    idea_id = Column(Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("idea_comments.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
