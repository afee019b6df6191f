"""
Streak Reset Job - nightly reset of lapsed activity streaks.

A creator whose last activity is at least `stale_hours` old loses the
streak; every full `cycle_days` cycle completed before the reset is paid
out as `seven_day_streak_xp`. XP is added as a relative increment so
concurrent grants from platform activity are never lost.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from core.config_loader import StreakConfig
from core.errors import MalformedRecordError
from core.scorer.dto import CreatorSnapshot
from core.scorer.models import StreakUpdate
from core.utils import as_utc
from database.uow import CreatorUnitOfWork
from pipeline.base import BatchJob

logger = logging.getLogger(__name__)


def streak_bonus(prior_streak: int, config: StreakConfig) -> int:
    return (prior_streak // config.cycle_days) * config.seven_day_streak_xp


def is_stale(last_activity_at: Optional[datetime], cutoff: datetime) -> bool:
    return last_activity_at is None or as_utc(last_activity_at) <= cutoff


def plan_streak_reset(record: CreatorSnapshot, cutoff: datetime, config: StreakConfig) -> Optional[StreakUpdate]:
    """StreakUpdate for a stale creator with a running streak, else None."""
    streak = record.streak_count
    if streak is None or streak < 0:
        raise MalformedRecordError(record.id, 'streak_count', streak, "missing or negative")
    if streak == 0 or not is_stale(record.last_activity_at, cutoff):
        return None
    return StreakUpdate(
        creator_id=record.id,
        prior_streak=streak,
        xp_bonus=streak_bonus(streak, config),
        completed_cycles=streak // config.cycle_days
    )


class StreakResetJob(BatchJob):
    name = "streaks"

    def stale_cutoff(self, now: datetime) -> datetime:
        return as_utc(now) - timedelta(hours=self.config.streaks.stale_hours)

    def process_page(
        self,
        uow: CreatorUnitOfWork,
        records: Sequence[CreatorSnapshot],
        now: datetime
    ) -> Tuple[int, List[str]]:
        cutoff = self.stale_cutoff(now)
        updates = []
        skipped = []
        for record in records:
            try:
                update = plan_streak_reset(record, cutoff, self.config.streaks)
            except MalformedRecordError as e:
                logger.warning(f"Skipping malformed record: {e}")
                skipped.append(record.id)
                continue
            if update is None:
                continue
            if update.xp_bonus:
                logger.info(
                    f"{record.id}: streak {update.prior_streak} reset, "
                    f"{update.completed_cycles} cycle(s) paid {update.xp_bonus} XP"
                )
            updates.append(update)

        uow.creators.apply_streak_resets(updates, stale_before=cutoff)
        return len(updates), skipped
