"""Campaign model."""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, func
from ideaportal.db.base import Base


class Campaign(Base):
    """Themed call for ideas with an optional deadline."""
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="ATIVA")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
