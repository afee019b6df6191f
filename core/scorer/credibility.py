#!/usr/bin/env python3
"""
Credibility Score - Gate for displaying trust signals.

The score is the sum of:
1. Tier weight (signature > verified > standard)
2. AX-verified credits x multiplier, through diminishing returns
3. Client-confirmed credits x multiplier, through diminishing returns
4. Distinct clients in the trailing window x per-client score, capped
5. Positive reviews x weight, capped
6. scoreImpact of every badge that has not expired
7. Response-rate bonus tier + response-time bonus tier
8. Recency boost or inactivity penalty from days since the last booking

floored at zero. Missing optional factors contribute nothing.
"""

import logging
import math
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from core.config_loader import (
    CredibilityConfig,
    RecencyWindows,
    RecencyBoosts,
    InactivityPenalties,
    ResponseMetrics,
)
from core.scorer.dto import BadgeDTO
from core.scorer.models import CredibilityFactors
from core.utils import coerce_timestamp, utc_now, whole_days_between

logger = logging.getLogger(__name__)

DEFAULT_CREDIBILITY_CONFIG = CredibilityConfig()


def apply_diminishing_returns(value: float, threshold: float, log_scaling: float) -> float:
    """Identity up to `threshold`; above it the excess is compressed logarithmically."""
    if value <= threshold:
        return value
    return threshold + math.log(value - threshold + 1) * log_scaling


def calculate_recency_boost(
    days_since_last_booking: Optional[int],
    windows: RecencyWindows,
    boosts: RecencyBoosts
) -> float:
    if days_since_last_booking is None:
        return 0.0
    if days_since_last_booking <= windows.very_recent:
        return boosts.very_recent
    if days_since_last_booking <= windows.recent:
        return boosts.recent
    if days_since_last_booking <= windows.somewhat_recent:
        return boosts.somewhat_recent
    return 0.0


def calculate_inactivity_penalty(
    days_since_last_booking: Optional[int],
    windows: RecencyWindows,
    penalties: InactivityPenalties
) -> float:
    if days_since_last_booking is None:
        return 0.0
    if days_since_last_booking > windows.heavy_penalty_threshold:
        return penalties.heavy
    if days_since_last_booking > windows.inactivity_threshold:
        return penalties.moderate
    return 0.0


def calculate_badge_impact(badges: Optional[Iterable[BadgeDTO]], now: datetime) -> float:
    """Sum of score impact over badges that are still active at `now`."""
    if not badges:
        return 0.0
    return sum(badge.score_impact or 0.0 for badge in badges if badge.is_active(now))


def calculate_response_bonus(
    response_rate: Optional[float],
    avg_response_time_hours: Optional[float],
    metrics: ResponseMetrics
) -> float:
    """Rate tier and time tier bonuses; each applies independently."""
    bonus = 0.0
    bonuses = metrics.bonuses

    if response_rate is not None:
        if response_rate >= metrics.excellent_response_rate:
            bonus += bonuses.excellent_response
        elif response_rate >= metrics.good_response_rate:
            bonus += bonuses.good_response
        elif response_rate >= metrics.decent_response_rate:
            bonus += bonuses.decent_response

    if avg_response_time_hours is not None:
        if avg_response_time_hours <= metrics.fast_response_time:
            bonus += bonuses.fast_time
        elif avg_response_time_hours <= metrics.good_response_time:
            bonus += bonuses.good_time
        elif avg_response_time_hours <= metrics.ok_response_time:
            bonus += bonuses.ok_time

    return bonus


def calc_credibility_score(
    factors: CredibilityFactors,
    config: CredibilityConfig = DEFAULT_CREDIBILITY_CONFIG,
    now: Optional[datetime] = None
) -> float:
    """
    Compute the credibility score for one creator.

    Args:
        factors: Derived credibility inputs
        config: Weight table (defaults to the production table)
        now: Reference time for badge expiry and recency; defaults to now

    Returns:
        Non-negative credibility score
    """
    now = now or utc_now()

    tier_score = getattr(config.tier_weights, getattr(factors.tier, "value", factors.tier))

    dr = config.diminishing_returns
    ax_credits_score = apply_diminishing_returns(
        factors.ax_verified_credits * config.credit_multipliers.ax_verified,
        dr.threshold,
        dr.log_scaling
    )
    client_credits_score = apply_diminishing_returns(
        factors.client_confirmed_credits * config.credit_multipliers.client_confirmed,
        dr.threshold,
        dr.log_scaling
    )

    caps = config.distinct_client_caps
    client_diversity_score = min(factors.distinct_clients_90d * caps.per_client_score, caps.max_impact)

    review_score = min(
        factors.positive_review_count * config.reviews.per_positive_review,
        config.reviews.max_impact
    )

    badge_score = calculate_badge_impact(factors.active_badges, now)

    response_score = calculate_response_bonus(
        factors.response_rate,
        factors.avg_response_time_hours,
        config.response_metrics
    )

    days = factors.days_since_last_booking
    if days is None and factors.last_completed_at is not None:
        days = whole_days_between(factors.last_completed_at, now)

    recency_boost = calculate_recency_boost(days, config.recency_windows, config.recency_boosts)
    inactivity_penalty = calculate_inactivity_penalty(
        days, config.recency_windows, config.inactivity_penalties
    )

    total = (
        tier_score
        + ax_credits_score
        + client_credits_score
        + client_diversity_score
        + review_score
        + badge_score
        + response_score
        + recency_boost
        + inactivity_penalty
    )
    return max(total, 0.0)


def _profile_value(profile: Any, name: str, default: Any = None) -> Any:
    """Read `name` from an ORM row, snapshot or mapping (flat or under stats/counts)."""
    if isinstance(profile, Mapping):
        if name in profile:
            return profile[name]
        for section in ("stats", "counts"):
            nested = profile.get(section)
            if isinstance(nested, Mapping) and name in nested:
                return nested[name]
        return default
    return getattr(profile, name, default)


def extract_credibility_factors(
    profile: Any,
    badges: Optional[Iterable[BadgeDTO]] = None,
    now: Optional[datetime] = None
) -> CredibilityFactors:
    """
    Build CredibilityFactors from a creator profile.

    `last_completed_at` may be a datetime, epoch milliseconds or an ISO
    string; anything unreadable is treated as "no completed booking".
    """
    now = now or utc_now()
    last_completed = coerce_timestamp(_profile_value(profile, "last_completed_at"))

    return CredibilityFactors(
        tier=_profile_value(profile, "tier", "standard"),
        ax_verified_credits=_profile_value(profile, "ax_verified_credits") or 0,
        client_confirmed_credits=_profile_value(profile, "client_confirmed_credits") or 0,
        distinct_clients_90d=_profile_value(profile, "distinct_clients_90d") or 0,
        positive_review_count=_profile_value(profile, "positive_review_count") or 0,
        completed_bookings=_profile_value(profile, "completed_bookings") or 0,
        response_rate=_profile_value(profile, "response_rate"),
        avg_response_time_hours=_profile_value(profile, "avg_response_time_hours"),
        last_completed_at=last_completed,
        active_badges=[b for b in (badges or []) if b.is_active(now)],
        days_since_last_booking=whole_days_between(last_completed, now) if last_completed else None,
    )
