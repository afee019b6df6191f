#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run against an in-memory SQLite database, no server needed:

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest for the TestCase based modules
    python -m unittest discover tests -v

To point the repository tests at PostgreSQL instead, set TEST_DATABASE_URL.
"""

import os
from typing import Any, Dict

from core.config_loader import AppConfig

TEST_DB_URL = os.environ.get("TEST_DATABASE_URL", "sqlite://")


def config_data(**overrides: Any) -> Dict[str, Any]:
    """Minimal valid configuration mapping; overrides replace top-level sections."""
    data = {
        "database": {"url": TEST_DB_URL},
        "schedule": {"hour": 3, "minute": 0, "timezone": "UTC", "poll_seconds": 1},
        "batch": {"page_size": 2, "max_attempts": 2, "backoff_seconds": 0, "backoff_max_seconds": 0},
        "tiers": {"signature": {"min_xp": 2500}, "verified": {"min_xp": 500}},
        "rank_score": {"tier_weights": {"standard": 1, "verified": 4, "signature": 8}},
        "credibility": {},
    }
    data.update(overrides)
    return data


def build_test_config(**overrides: Any) -> AppConfig:
    return AppConfig(**config_data(**overrides))
