import yaml
import os
from typing import Dict, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator

from core.errors import ConfigurationError

TIER_NAMES = ("standard", "verified", "signature")


def _require_all_tiers(weights: Dict[str, float]) -> Dict[str, float]:
    missing = [tier for tier in TIER_NAMES if tier not in weights]
    if missing:
        raise ValueError(f"tier weights missing for: {', '.join(missing)}")
    return weights


class DatabaseConfig(BaseModel):
    url: str


class ScheduleConfig(BaseModel):
    """Daily cadence: both jobs run once a day at hour:minute in `timezone`."""
    hour: int = Field(default=3, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)
    timezone: str = "UTC"
    poll_seconds: int = 5  # Sleep granularity while waiting, keeps shutdown responsive


class BatchConfig(BaseModel):
    """Paging and retry policy shared by the scheduled jobs."""
    page_size: int = Field(default=500, gt=0)
    creator_role: Optional[str] = "creator"  # None scans every record
    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = 1.0
    backoff_max_seconds: float = 30.0
    # Also persist credibility_score during the nightly pass
    persist_credibility: bool = False


class TierThreshold(BaseModel):
    min_xp: int = Field(ge=0)
    min_completed_bookings: int = Field(default=0, ge=0)


class TierConfig(BaseModel):
    """Promotion thresholds. standard is the floor and has no threshold."""
    signature: TierThreshold = TierThreshold(min_xp=2500)
    verified: TierThreshold = TierThreshold(min_xp=500)


class RankScoreWeights(BaseModel):
    tier_weights: Dict[str, float] = Field(
        default_factory=lambda: {"standard": 1.0, "verified": 4.0, "signature": 8.0}
    )
    tier_scale: float = 50.0
    rating: float = 40.0
    reviews: float = 30.0
    xp: float = 5.0
    response: float = 40.0
    min_response_hours: float = 1.0  # Floor on the response-time denominator
    proximity_per_km: float = 0.2

    @field_validator("tier_weights")
    @classmethod
    def check_tier_weights(cls, value: Dict[str, float]) -> Dict[str, float]:
        return _require_all_tiers(value)


# --- Credibility configuration ---

class CredibilityTierWeights(BaseModel):
    signature: float = 1000.0
    verified: float = 500.0
    standard: float = 100.0


class CreditMultipliers(BaseModel):
    ax_verified: float = 3.0
    client_confirmed: float = 2.0
    self_reported: float = 1.0


class DistinctClientCaps(BaseModel):
    max_impact: float = 100.0
    per_client_score: float = 5.0
    window_days: int = 90


class ReviewWeights(BaseModel):
    per_positive_review: float = 3.0
    max_impact: float = 150.0


class RecencyWindows(BaseModel):
    """Day counts since the last completed booking."""
    very_recent: int = 7
    recent: int = 30
    somewhat_recent: int = 90
    inactivity_threshold: int = 90
    heavy_penalty_threshold: int = 180


class RecencyBoosts(BaseModel):
    very_recent: float = 50.0
    recent: float = 25.0
    somewhat_recent: float = 10.0


class InactivityPenalties(BaseModel):
    moderate: float = -50.0
    heavy: float = -100.0


class DiminishingReturns(BaseModel):
    threshold: float = 50.0
    log_scaling: float = 10.0


class ResponseBonuses(BaseModel):
    excellent_response: float = 30.0
    good_response: float = 20.0
    decent_response: float = 10.0
    fast_time: float = 25.0
    good_time: float = 15.0
    ok_time: float = 5.0


class ResponseMetrics(BaseModel):
    # Response rate is on a 0-100 scale
    excellent_response_rate: float = 95.0
    good_response_rate: float = 90.0
    decent_response_rate: float = 80.0
    fast_response_time: float = 1.0
    good_response_time: float = 4.0
    ok_response_time: float = 12.0
    bonuses: ResponseBonuses = Field(default_factory=ResponseBonuses)


class CredibilityConfig(BaseModel):
    """
    Weight table for the credibility score.

    The defaults are the production table; YAML only needs to list the
    values it overrides.
    """
    tier_weights: CredibilityTierWeights = Field(default_factory=CredibilityTierWeights)
    credit_multipliers: CreditMultipliers = Field(default_factory=CreditMultipliers)
    distinct_client_caps: DistinctClientCaps = Field(default_factory=DistinctClientCaps)
    reviews: ReviewWeights = Field(default_factory=ReviewWeights)
    recency_windows: RecencyWindows = Field(default_factory=RecencyWindows)
    recency_boosts: RecencyBoosts = Field(default_factory=RecencyBoosts)
    inactivity_penalties: InactivityPenalties = Field(default_factory=InactivityPenalties)
    diminishing_returns: DiminishingReturns = Field(default_factory=DiminishingReturns)
    response_metrics: ResponseMetrics = Field(default_factory=ResponseMetrics)


class StreakConfig(BaseModel):
    stale_hours: float = 24.0
    cycle_days: int = 7
    seven_day_streak_xp: int = 40


class XpConfig(BaseModel):
    values: Dict[str, int] = Field(default_factory=lambda: {
        "booking_completed": 100,
        "five_star_review": 30,
        "referral_signup": 100,
        "referral_first_booking": 50,
        "profile_completed": 25,
        "booking_confirmed": 50,
        "on_time_delivery": 25,
        "creator_referral": 150,
    })
    daily_cap: int = 300


class AppConfig(BaseModel):
    database: DatabaseConfig
    schedule: ScheduleConfig
    # Weight tables have no fallback: a job must never score with undefined weights
    tiers: TierConfig
    rank_score: RankScoreWeights
    credibility: CredibilityConfig
    batch: BatchConfig = Field(default_factory=BatchConfig)
    streaks: StreakConfig = Field(default_factory=StreakConfig)
    xp: XpConfig = Field(default_factory=XpConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another directory), try the repo root
    if not os.path.isabs(config_path) and not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} is empty or not a mapping")

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        if not isinstance(data.get('database'), dict):
            data['database'] = {}
        data['database']['url'] = env_db_url

    try:
        return AppConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e
