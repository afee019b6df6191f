#!/usr/bin/env python3
"""
Rank Score - Scalar used to order creators in discovery results.

    score = tier_weight[tier] * 50
          + rating * 40
          + log10(reviews + 1) * 30
          + sqrt(xp) * 5
          + (1 / max(response_hrs, 1)) * 40
          - proximity_km * 0.2

Review count and XP grow sub-linearly so volume alone cannot outrank
quality. The response-time denominator is floored at one hour. Proximity is
a linear penalty rather than a filter.

Inputs are expected to be validated by the caller: rating in [0, 5],
reviews and xp non-negative.
"""

import math

from core.config_loader import RankScoreWeights

DEFAULT_RANK_WEIGHTS = RankScoreWeights()


def calc_rank_score(
    tier: str,
    rating: float,
    reviews: int,
    xp: int,
    response_hrs: float,
    proximity_km: float = 0.0,
    weights: RankScoreWeights = DEFAULT_RANK_WEIGHTS
) -> float:
    tier_key = getattr(tier, "value", tier)
    return (
        weights.tier_weights[tier_key] * weights.tier_scale
        + rating * weights.rating
        + math.log10(reviews + 1) * weights.reviews
        + math.sqrt(xp) * weights.xp
        + (1.0 / max(response_hrs, weights.min_response_hours)) * weights.response
        - proximity_km * weights.proximity_per_km
    )
