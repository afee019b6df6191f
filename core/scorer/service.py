#!/usr/bin/env python3
"""
Creator Scoring Service - Derive tier, rank score and credibility for a creator.

Shared by the nightly recomputation job (tier + rank score, optionally the
credibility score) and the serving path (credibility computed on read).
"""

import logging
import math
from datetime import datetime
from typing import Iterable, Mapping, Optional

from core.config_loader import AppConfig
from core.errors import MalformedRecordError
from core.scorer.credibility import calc_credibility_score, extract_credibility_factors
from core.scorer.dto import BadgeDTO, CreatorSnapshot
from core.scorer.models import CreatorScoreUpdate
from core.scorer.rank_score import calc_rank_score
from core.scorer.tiers import Tier, resolve_tier
from core.utils import utc_now

logger = logging.getLogger(__name__)

_NON_NEGATIVE_INT_FIELDS = ('xp', 'review_count', 'completed_bookings', 'open_disputes')


def check_tier(creator_id: Optional[str], field: str, value) -> Tier:
    try:
        return Tier(value)
    except ValueError:
        raise MalformedRecordError(creator_id, field, value, "not a known tier") from None


def validate_snapshot(snapshot: CreatorSnapshot) -> None:
    """Raise MalformedRecordError if any scoring input is missing or out of range."""
    check_tier(snapshot.id, 'tier', snapshot.tier)
    if snapshot.tier_override is not None:
        check_tier(snapshot.id, 'tier_override', snapshot.tier_override)

    for name in _NON_NEGATIVE_INT_FIELDS:
        value = getattr(snapshot, name)
        if value is None:
            raise MalformedRecordError(snapshot.id, name, value, "missing")
        if value < 0:
            raise MalformedRecordError(snapshot.id, name, value, "negative")

    rating = snapshot.average_rating
    if rating is None or not math.isfinite(rating) or not 0.0 <= rating <= 5.0:
        raise MalformedRecordError(snapshot.id, 'average_rating', rating, "outside [0, 5]")

    response_hrs = snapshot.response_hrs
    if response_hrs is None or not math.isfinite(response_hrs) or response_hrs < 0:
        raise MalformedRecordError(snapshot.id, 'response_hrs', response_hrs, "missing or negative")


class CreatorScoringService:
    """
    Applies the Tier Resolver and both calculators to creator snapshots.

    Holds the typed configuration loaded at startup; keeps no other state.
    """

    def __init__(self, config: AppConfig):
        self.config = config

    def score_record(
        self,
        snapshot: CreatorSnapshot,
        badges: Optional[Iterable[BadgeDTO]] = None,
        now: Optional[datetime] = None,
        include_credibility: bool = False
    ) -> CreatorScoreUpdate:
        """
        Derive the persisted fields for one creator.

        The rank score is a location-agnostic baseline (proximity 0); any
        per-query proximity adjustment happens at serving time.

        Raises:
            MalformedRecordError: if the record cannot be scored
        """
        validate_snapshot(snapshot)

        resolution = resolve_tier(
            xp=snapshot.xp,
            completed_bookings=snapshot.completed_bookings,
            open_disputes=snapshot.open_disputes,
            current_tier=Tier(snapshot.tier),
            config=self.config.tiers,
            override=snapshot.tier_override
        )

        rank_score = calc_rank_score(
            tier=resolution.tier,
            rating=snapshot.average_rating,
            reviews=snapshot.review_count,
            xp=snapshot.xp,
            response_hrs=snapshot.response_hrs,
            proximity_km=0.0,
            weights=self.config.rank_score
        )

        credibility_score = None
        if include_credibility:
            credibility_score = self.credibility_score(snapshot, badges, now, tier=resolution.tier)

        return CreatorScoreUpdate(
            creator_id=snapshot.id,
            tier=resolution.tier.value,
            tier_frozen=resolution.frozen,
            rank_score=rank_score,
            credibility_score=credibility_score,
            tier_changed=resolution.changed
        )

    def credibility_score(
        self,
        profile,
        badges: Optional[Iterable[BadgeDTO]] = None,
        now: Optional[datetime] = None,
        tier: Optional[Tier] = None
    ) -> float:
        """
        Credibility for a snapshot, ORM row or profile mapping.

        Raises:
            MalformedRecordError: if the profile carries an unknown tier
        """
        now = now or utc_now()
        factors = extract_credibility_factors(profile, badges, now)
        if tier is None:
            creator_id = profile.get('id') if isinstance(profile, Mapping) else getattr(profile, 'id', None)
            tier = check_tier(creator_id, 'tier', factors.tier)
        factors.tier = tier.value
        return calc_credibility_score(factors, self.config.credibility, now)

    def credibility_for(self, repo, creator_id: str, now: Optional[datetime] = None) -> Optional[float]:
        """
        Serving-path credibility: single-record read plus the creator's badges.

        Returns None when the creator does not exist.

        Raises:
            MalformedRecordError: if the stored tier is not a known tier
        """
        now = now or utc_now()
        snapshot = repo.get_snapshot(creator_id)
        if snapshot is None:
            logger.warning(f"Credibility requested for unknown creator {creator_id}")
            return None
        badges = repo.get_badges_for_creators([creator_id]).get(creator_id, [])
        return self.credibility_score(snapshot, badges, now)
