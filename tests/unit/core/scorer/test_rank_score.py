#!/usr/bin/env python3
"""
Test suite for the rank score formula.
"""

import math
import unittest

from core.config_loader import RankScoreWeights
from core.scorer.rank_score import calc_rank_score
from core.scorer.tiers import Tier


BASE = dict(tier="verified", rating=4.0, reviews=20, xp=900, response_hrs=3.0, proximity_km=5.0)


def score(**overrides):
    args = dict(BASE)
    args.update(overrides)
    return calc_rank_score(**args)


class TestRankScoreFormula(unittest.TestCase):

    def test_known_value(self):
        expected = (
            4 * 50
            + 4.0 * 40
            + math.log10(21) * 30
            + math.sqrt(900) * 5
            + (1 / 3.0) * 40
            - 5.0 * 0.2
        )
        self.assertAlmostEqual(score(), expected, places=9)

    def test_response_denominator_floored_at_one_hour(self):
        self.assertEqual(score(response_hrs=0.0), score(response_hrs=1.0))
        self.assertEqual(score(response_hrs=0.25), score(response_hrs=1.0))

    def test_enum_and_string_tiers_agree(self):
        self.assertEqual(score(tier=Tier.SIGNATURE), score(tier="signature"))

    def test_custom_weights(self):
        weights = RankScoreWeights(tier_weights={"standard": 0, "verified": 0, "signature": 0},
                                   rating=0, reviews=0, xp=0, response=0, proximity_per_km=1)
        self.assertEqual(calc_rank_score("signature", 5, 10, 10, 1, 12.5, weights), -12.5)

    def test_not_floored_for_distant_creators(self):
        self.assertLess(
            calc_rank_score("standard", 0.0, 0, 0, 48.0, proximity_km=5000.0), 0.0
        )


class TestRankScoreMonotonicity(unittest.TestCase):

    def test_non_decreasing_in_rating(self):
        values = [score(rating=r / 2) for r in range(0, 11)]
        self.assertEqual(values, sorted(values))

    def test_non_decreasing_in_reviews(self):
        values = [score(reviews=n) for n in (0, 1, 2, 10, 100, 10_000)]
        self.assertEqual(values, sorted(values))

    def test_non_decreasing_in_xp(self):
        values = [score(xp=n) for n in (0, 1, 499, 500, 2500, 1_000_000)]
        self.assertEqual(values, sorted(values))

    def test_non_increasing_in_proximity(self):
        values = [score(proximity_km=d) for d in (0, 0.5, 10, 250, 10_000)]
        self.assertEqual(values, sorted(values, reverse=True))

    def test_non_increasing_in_response_hours(self):
        values = [score(response_hrs=h) for h in (0, 0.5, 1, 2, 24, 240)]
        self.assertEqual(values, sorted(values, reverse=True))

    def test_tier_order(self):
        self.assertLess(score(tier="standard"), score(tier="verified"))
        self.assertLess(score(tier="verified"), score(tier="signature"))


class TestTierDominance(unittest.TestCase):

    def test_signature_outranks_busier_standard_creator(self):
        signature = calc_rank_score("signature", 4.8, 35, 2000, 2, 10)
        standard = calc_rank_score("standard", 4.9, 120, 8000, 2, 10)
        self.assertGreater(signature, standard)


if __name__ == "__main__":
    unittest.main()
