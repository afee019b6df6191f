from sqlalchemy import (
    Column, Integer, Float, Text, Boolean, Date, DateTime, ForeignKey, UniqueConstraint, Index, func
)
from sqlalchemy.orm import relationship

from .base import Base


class Creator(Base):
    """
    One creator record.

    Counters and activity fields are written by normal platform activity;
    tier, tier_frozen, rank_score (and optionally credibility_score) are
    derived fields written by the nightly recomputation job. Records are
    never deleted by the scoring engine.
    """
    __tablename__ = 'creator'

    id = Column(Text, primary_key=True)
    role = Column(Text, nullable=False, default='creator')

    # Tiering
    tier = Column(Text, nullable=False, default='standard')  # standard|verified|signature
    tier_frozen = Column(Boolean, nullable=False, default=False)
    tier_override = Column(Text)  # operator pin; NULL leaves the tier to the thresholds

    # Activity
    xp = Column(Integer, nullable=False, default=0)
    streak_count = Column(Integer, nullable=False, default=0)
    last_activity_at = Column(DateTime(timezone=True))
    daily_xp = Column(Integer, nullable=False, default=0)
    last_xp_date = Column(Date)

    # Quality signals
    average_rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    completed_bookings = Column(Integer, nullable=False, default=0)
    late_deliveries = Column(Integer, nullable=False, default=0)
    open_disputes = Column(Integer, nullable=False, default=0)
    response_hrs = Column(Float, nullable=False, default=24.0)

    # Credibility inputs
    ax_verified_credits = Column(Integer, nullable=False, default=0)
    client_confirmed_credits = Column(Integer, nullable=False, default=0)
    distinct_clients_90d = Column(Integer, nullable=False, default=0)
    positive_review_count = Column(Integer, nullable=False, default=0)
    response_rate = Column(Float)  # 0-100
    avg_response_time_hours = Column(Float)
    last_completed_at = Column(DateTime(timezone=True))

    # Serving fields
    rank_score = Column(Float, nullable=False, default=0.0)
    credibility_score = Column(Float)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    scores_updated_at = Column(DateTime(timezone=True))

    badges = relationship("CreatorBadge", back_populates="creator", cascade="all, delete-orphan")
    xp_transactions = relationship("XpTransaction", back_populates="creator", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_creator_role_id', 'role', 'id'),
        Index('idx_creator_rank_score', 'rank_score'),
        Index('idx_creator_last_activity', 'last_activity_at'),
    )


class CreatorBadge(Base):
    __tablename__ = 'creator_badge'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Text, ForeignKey('creator.id', ondelete='CASCADE'), nullable=False)
    badge_id = Column(Text, nullable=False)
    score_impact = Column(Float, nullable=False, default=0.0)
    awarded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expires_at = Column(DateTime(timezone=True))  # NULL = permanent

    creator = relationship("Creator", back_populates="badges")

    __table_args__ = (
        UniqueConstraint('creator_id', 'badge_id', name='uq_creator_badge'),
        Index('idx_creator_badge_creator', 'creator_id'),
    )


class XpTransaction(Base):
    """Audit row for every XP award or operator adjustment; (creator, event, context) is unique."""
    __tablename__ = 'xp_transaction'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Text, ForeignKey('creator.id', ondelete='CASCADE'), nullable=False)
    event = Column(Text, nullable=False)
    context_id = Column(Text)
    xp_awarded = Column(Integer, nullable=False, default=0)
    daily_cap_reached = Column(Boolean, nullable=False, default=False)
    admin_id = Column(Text)  # set on operator adjustments
    reason = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    creator = relationship("Creator", back_populates="xp_transactions")

    __table_args__ = (
        UniqueConstraint('creator_id', 'event', 'context_id', name='uq_xp_transaction_context'),
        Index('idx_xp_transaction_creator', 'creator_id'),
    )
