#!/usr/bin/env python3
"""
Scoring Module - Creator tiering, ranking and credibility.

Public API:
- calc_rank_score: discovery ordering score
- calc_credibility_score / extract_credibility_factors: trust-signal gate
- resolve_tier: tier state machine with dispute freeze
- CreatorScoringService: applies all three to creator snapshots

Modules:

- dto.py: Detached creator and badge snapshots
- models.py: Score inputs and results
- rank_score.py: Rank score formula
- credibility.py: Credibility score and its component curves
- tiers.py: Tier Resolver
- badges.py: Core badge catalog
- service.py: CreatorScoringService orchestrator
"""

from core.scorer.credibility import calc_credibility_score, extract_credibility_factors
from core.scorer.models import CredibilityFactors, CreatorScoreUpdate
from core.scorer.rank_score import calc_rank_score
from core.scorer.service import CreatorScoringService
from core.scorer.tiers import Tier, TierResolution, resolve_tier

__all__ = [
    'calc_rank_score',
    'calc_credibility_score',
    'extract_credibility_factors',
    'resolve_tier',
    'Tier',
    'TierResolution',
    'CredibilityFactors',
    'CreatorScoreUpdate',
    'CreatorScoringService',
]
