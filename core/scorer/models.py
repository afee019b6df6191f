#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring inputs and results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.scorer.dto import BadgeDTO


@dataclass
class CredibilityFactors:
    """Inputs of the credibility score, derived on demand from a creator."""
    tier: str
    ax_verified_credits: int = 0
    client_confirmed_credits: int = 0
    distinct_clients_90d: int = 0
    positive_review_count: int = 0
    completed_bookings: int = 0
    response_rate: Optional[float] = None  # 0-100
    avg_response_time_hours: Optional[float] = None
    last_completed_at: Optional[datetime] = None
    active_badges: List[BadgeDTO] = field(default_factory=list)
    days_since_last_booking: Optional[int] = None


@dataclass
class CreatorScoreUpdate:
    """Derived fields for one creator, written together in the page batch."""
    creator_id: str
    tier: str
    tier_frozen: bool
    rank_score: float
    credibility_score: Optional[float] = None
    tier_changed: bool = False

    def as_params(self, include_credibility: bool = False) -> Dict[str, Any]:
        params = {
            'b_id': self.creator_id,
            'tier': self.tier,
            'tier_frozen': self.tier_frozen,
            'rank_score': self.rank_score,
        }
        if include_credibility:
            params['credibility_score'] = self.credibility_score
        return params


@dataclass
class StreakUpdate:
    """Streak reset for one stale creator, with any milestone bonus."""
    creator_id: str
    prior_streak: int
    xp_bonus: int
    completed_cycles: int = 0
