"""Data Transfer Objects for the scoring engine.

Repositories convert ORM rows into these plain objects inside the unit of
work so the jobs and calculators can keep using them after the session has
closed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.utils import as_utc


@dataclass(frozen=True)
class BadgeDTO:
    """A badge held by a creator."""
    badge_id: str
    score_impact: float
    expires_at: Optional[datetime] = None

    def is_active(self, now: datetime) -> bool:
        expires_at = as_utc(self.expires_at)
        return expires_at is None or expires_at >= as_utc(now)


@dataclass(frozen=True)
class CreatorSnapshot:
    """Scoring inputs of one creator record, detached from the session."""
    id: str
    tier: str
    tier_frozen: bool
    xp: Optional[int]
    streak_count: Optional[int]
    last_activity_at: Optional[datetime]
    average_rating: Optional[float]
    review_count: Optional[int]
    completed_bookings: Optional[int]
    late_deliveries: Optional[int]
    open_disputes: Optional[int]
    response_hrs: Optional[float]
    rank_score: Optional[float] = None
    ax_verified_credits: Optional[int] = 0
    client_confirmed_credits: Optional[int] = 0
    distinct_clients_90d: Optional[int] = 0
    positive_review_count: Optional[int] = 0
    response_rate: Optional[float] = None
    avg_response_time_hours: Optional[float] = None
    last_completed_at: Optional[datetime] = None
    tier_override: Optional[str] = None
