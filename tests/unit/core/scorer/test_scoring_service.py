#!/usr/bin/env python3
"""
Test suite for CreatorScoringService and record validation.
"""

import math
import unittest
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from core.errors import MalformedRecordError
from core.scorer.dto import BadgeDTO, CreatorSnapshot
from core.scorer.rank_score import calc_rank_score
from core.scorer.service import CreatorScoringService, validate_snapshot
from tests import build_test_config

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_snapshot(**overrides) -> CreatorSnapshot:
    fields = dict(
        id="c-1",
        tier="standard",
        tier_frozen=False,
        xp=800,
        streak_count=3,
        last_activity_at=NOW - timedelta(hours=2),
        average_rating=4.5,
        review_count=12,
        completed_bookings=15,
        late_deliveries=0,
        open_disputes=0,
        response_hrs=2.0,
    )
    fields.update(overrides)
    return CreatorSnapshot(**fields)


class TestValidateSnapshot(unittest.TestCase):

    def test_valid_record_passes(self):
        validate_snapshot(make_snapshot())

    def test_rejects_bad_fields(self):
        cases = [
            ("xp", -1),
            ("xp", None),
            ("review_count", -3),
            ("open_disputes", None),
            ("average_rating", 5.5),
            ("average_rating", -0.1),
            ("average_rating", math.nan),
            ("response_hrs", -2.0),
            ("response_hrs", math.inf),
            ("tier", "gold"),
        ]
        for field, value in cases:
            with self.subTest(field=field, value=value):
                with self.assertRaises(MalformedRecordError) as ctx:
                    validate_snapshot(make_snapshot(**{field: value}))
                self.assertEqual(ctx.exception.field, field)
                self.assertEqual(ctx.exception.creator_id, "c-1")


class TestScoreRecord(unittest.TestCase):

    def setUp(self):
        self.config = build_test_config()
        self.service = CreatorScoringService(self.config)

    def test_promotes_and_scores_with_zero_proximity(self):
        update = self.service.score_record(make_snapshot())
        self.assertEqual(update.tier, "verified")
        self.assertTrue(update.tier_changed)
        self.assertFalse(update.tier_frozen)
        self.assertIsNone(update.credibility_score)
        expected = calc_rank_score("verified", 4.5, 12, 800, 2.0, 0.0, self.config.rank_score)
        self.assertEqual(update.rank_score, expected)

    def test_open_dispute_freezes_tier(self):
        snapshot = make_snapshot(xp=3000, tier="verified", open_disputes=1)
        update = self.service.score_record(snapshot)
        self.assertEqual(update.tier, "verified")
        self.assertTrue(update.tier_frozen)
        self.assertFalse(update.tier_changed)

    def test_rank_score_uses_resolved_tier(self):
        frozen = self.service.score_record(make_snapshot(xp=3000, tier="standard", open_disputes=1))
        cleared = self.service.score_record(make_snapshot(xp=3000, tier="standard"))
        self.assertLess(frozen.rank_score, cleared.rank_score)

    def test_deterministic(self):
        snapshot = make_snapshot()
        self.assertEqual(self.service.score_record(snapshot), self.service.score_record(snapshot))

    def test_credibility_optional(self):
        snapshot = make_snapshot(last_completed_at=NOW - timedelta(days=2))
        update = self.service.score_record(snapshot, badges=[BadgeDTO("verified-pro", 75)],
                                           now=NOW, include_credibility=True)
        # verified tier + badge + booking this week
        self.assertEqual(update.credibility_score, 500 + 75 + 50)

    def test_tier_override_kept(self):
        update = self.service.score_record(make_snapshot(xp=10, tier="signature", tier_override="signature"))
        self.assertEqual(update.tier, "signature")
        self.assertFalse(update.tier_changed)

    def test_unknown_override_is_malformed(self):
        with self.assertRaises(MalformedRecordError) as ctx:
            self.service.score_record(make_snapshot(tier_override="gold"))
        self.assertEqual(ctx.exception.field, "tier_override")

    def test_malformed_record_raises(self):
        with self.assertRaises(MalformedRecordError):
            self.service.score_record(replace(make_snapshot(), xp=-10))


class TestCredibilityOnRead(unittest.TestCase):

    def setUp(self):
        self.service = CreatorScoringService(build_test_config())
        self.repo = MagicMock()

    def test_reads_snapshot_and_badges(self):
        self.repo.get_snapshot.return_value = make_snapshot(tier="signature")
        self.repo.get_badges_for_creators.return_value = {"c-1": [BadgeDTO("first-booking", 10)]}

        score = self.service.credibility_for(self.repo, "c-1", NOW)

        self.assertEqual(score, 1000 + 10)
        self.repo.get_badges_for_creators.assert_called_once_with(["c-1"])

    def test_unknown_creator(self):
        self.repo.get_snapshot.return_value = None
        self.assertIsNone(self.service.credibility_for(self.repo, "missing", NOW))
        self.repo.get_badges_for_creators.assert_not_called()

    def test_unknown_tier_is_malformed(self):
        self.repo.get_snapshot.return_value = make_snapshot(tier="gold")
        self.repo.get_badges_for_creators.return_value = {"c-1": []}

        with self.assertRaises(MalformedRecordError) as ctx:
            self.service.credibility_for(self.repo, "c-1", NOW)
        self.assertEqual(ctx.exception.field, "tier")
        self.assertEqual(ctx.exception.creator_id, "c-1")

    def test_out_of_range_booking_time_contributes_nothing(self):
        score = self.service.credibility_score({"id": "c-1", "tier": "standard",
                                                "last_completed_at": 10 ** 20}, now=NOW)
        self.assertEqual(score, 100)


if __name__ == "__main__":
    unittest.main()
