#!/usr/bin/env python3
"""
Tier Resolver - Derive a creator's membership tier.

Three states, evaluated from highest to lowest:
- signature: xp >= signature.min_xp (default 2500)
- verified:  xp >= verified.min_xp (default 500)
- standard:  everyone else

While a creator has one or more open disputes the thresholds are not
evaluated at all: the persisted tier is kept and the tier is reported as
frozen. The next evaluation after the last dispute closes applies the
thresholds normally and lifts the freeze.

An operator override pins the tier regardless of thresholds or disputes
until it is cleared; the freeze flag still reports open disputes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.config_loader import TierConfig


class Tier(str, Enum):
    STANDARD = "standard"
    VERIFIED = "verified"
    SIGNATURE = "signature"


@dataclass(frozen=True)
class TierResolution:
    tier: Tier
    frozen: bool
    changed: bool


def tier_for_activity(xp: int, completed_bookings: int, config: TierConfig) -> Tier:
    """Highest tier whose XP and booking thresholds are both met."""
    if xp >= config.signature.min_xp and completed_bookings >= config.signature.min_completed_bookings:
        return Tier.SIGNATURE
    if xp >= config.verified.min_xp and completed_bookings >= config.verified.min_completed_bookings:
        return Tier.VERIFIED
    return Tier.STANDARD


def resolve_tier(
    xp: int,
    completed_bookings: int,
    open_disputes: int,
    current_tier: Tier,
    config: TierConfig = TierConfig(),
    override: Optional[Tier] = None
) -> TierResolution:
    """
    Resolve the tier for one creator.

    Pure function of its arguments, so any snapshot of a record resolves to
    the same answer.

    Args:
        xp: Cumulative experience points
        completed_bookings: Completed booking count
        open_disputes: Number of disputes still open against the creator
        current_tier: Tier currently persisted on the record
        config: Tier thresholds
        override: Operator-pinned tier; wins over thresholds and the freeze

    Returns:
        TierResolution with the tier to persist and the freeze flag
    """
    current_tier = Tier(current_tier)
    frozen = open_disputes > 0

    if override is not None:
        tier = Tier(override)
        return TierResolution(tier=tier, frozen=frozen, changed=tier != current_tier)

    if frozen:
        return TierResolution(tier=current_tier, frozen=True, changed=False)

    tier = tier_for_activity(xp, completed_bookings, config)
    return TierResolution(tier=tier, frozen=False, changed=tier != current_tier)
