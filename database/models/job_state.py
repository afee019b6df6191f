from sqlalchemy import Column, Integer, String, Text, DateTime, func

from .base import Base


class JobState(Base):
    """Key/value checkpoint for scheduled jobs (e.g. 'recompute.cursor')."""
    __tablename__ = 'job_state'

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(255), unique=True, nullable=False, index=True)
    value = Column(Text)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
