#!/usr/bin/env python3
"""
Test suite for the Tier Resolver.
"""

import pytest

from core.config_loader import TierConfig, TierThreshold
from core.scorer.tiers import Tier, resolve_tier, tier_for_activity


@pytest.mark.parametrize("xp,expected", [
    (0, Tier.STANDARD),
    (499, Tier.STANDARD),
    (500, Tier.VERIFIED),
    (2499, Tier.VERIFIED),
    (2500, Tier.SIGNATURE),
    (50_000, Tier.SIGNATURE),
])
def test_thresholds(xp, expected):
    assert tier_for_activity(xp, 0, TierConfig()) == expected


def test_booking_threshold_also_required():
    config = TierConfig(
        signature=TierThreshold(min_xp=2500, min_completed_bookings=20),
        verified=TierThreshold(min_xp=500),
    )
    assert tier_for_activity(3000, 5, config) == Tier.VERIFIED
    assert tier_for_activity(3000, 20, config) == Tier.SIGNATURE


def test_promotion_reports_change():
    result = resolve_tier(xp=600, completed_bookings=3, open_disputes=0, current_tier=Tier.STANDARD)
    assert result.tier == Tier.VERIFIED
    assert result.changed is True
    assert result.frozen is False


def test_demotion_follows_thresholds():
    result = resolve_tier(xp=100, completed_bookings=0, open_disputes=0, current_tier="signature")
    assert result.tier == Tier.STANDARD
    assert result.changed is True


@pytest.mark.parametrize("xp", [0, 600, 2500, 99_999])
@pytest.mark.parametrize("current", list(Tier))
def test_open_dispute_never_changes_tier(xp, current):
    result = resolve_tier(xp=xp, completed_bookings=10, open_disputes=1, current_tier=current)
    assert result.tier == current
    assert result.frozen is True
    assert result.changed is False


def test_freeze_lifts_once_disputes_close():
    frozen = resolve_tier(xp=3000, completed_bookings=0, open_disputes=2, current_tier="verified")
    assert frozen.tier == Tier.VERIFIED and frozen.frozen

    cleared = resolve_tier(xp=3000, completed_bookings=0, open_disputes=0, current_tier=frozen.tier)
    assert cleared.tier == Tier.SIGNATURE
    assert cleared.frozen is False


def test_unknown_current_tier_rejected():
    with pytest.raises(ValueError):
        resolve_tier(xp=0, completed_bookings=0, open_disputes=0, current_tier="platinum")


def test_override_beats_thresholds():
    result = resolve_tier(xp=0, completed_bookings=0, open_disputes=0,
                          current_tier="standard", override="signature")
    assert result.tier == Tier.SIGNATURE
    assert result.changed is True
    assert result.frozen is False


def test_override_applies_during_dispute():
    result = resolve_tier(xp=3000, completed_bookings=0, open_disputes=1,
                          current_tier="signature", override=Tier.VERIFIED)
    assert result.tier == Tier.VERIFIED
    assert result.frozen is True
