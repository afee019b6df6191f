"""Core badge catalog and the score impact each badge carries."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    kind: str  # achievement | performance | dynamic | prestige
    score_impact: float
    # Dynamic badges lapse on their own unless re-awarded
    lifetime: Optional[timedelta] = None
    role: Optional[str] = None


_DYNAMIC_LIFETIME = timedelta(days=7)

CORE_BADGES = [
    # Milestones
    BadgeDefinition('first-booking', 'First Booking', 'achievement', 10),
    BadgeDefinition('milestone-10-bookings', '10 Bookings', 'achievement', 25),
    BadgeDefinition('milestone-50-bookings', '50 Bookings', 'achievement', 50),
    BadgeDefinition('milestone-100-bookings', '100 Bookings', 'achievement', 100),

    # Performance
    BadgeDefinition('five-star-streak', '5-Star Streak', 'performance', 30),
    BadgeDefinition('fast-responder', 'Fast Responder', 'performance', 20),
    BadgeDefinition('high-completion-rate', 'High Completion Rate', 'performance', 25),
    BadgeDefinition('client-favorite', 'Client Favorite', 'performance', 35),

    # Time-limited
    BadgeDefinition('rising-talent', 'Rising Talent', 'dynamic', 40, lifetime=_DYNAMIC_LIFETIME),
    BadgeDefinition('trending-now', 'Trending Now', 'dynamic', 25, lifetime=_DYNAMIC_LIFETIME),
    BadgeDefinition('new-this-week', 'New This Week', 'dynamic', 15, lifetime=_DYNAMIC_LIFETIME),

    # Role-specific
    BadgeDefinition('beat-store-active', 'Beat Store Active', 'achievement', 20, role='producer'),
    BadgeDefinition('fifty-plus-leases', '50+ Leases', 'achievement', 40, role='producer'),
    BadgeDefinition('on-time-streak-10', 'On-Time Streak', 'performance', 30, role='engineer'),

    # Admin-granted
    BadgeDefinition('verified-pro', 'Verified Pro', 'prestige', 75),
    BadgeDefinition('platform-pioneer', 'Platform Pioneer', 'prestige', 50),
]

BADGES_BY_ID: Dict[str, BadgeDefinition] = {badge.id: badge for badge in CORE_BADGES}


def get_badge_definition(badge_id: str) -> BadgeDefinition:
    try:
        return BADGES_BY_ID[badge_id]
    except KeyError:
        raise ValueError(f"Unknown badge: {badge_id}") from None
