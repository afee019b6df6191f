"""
XP Service - Award experience points for platform events.

Handles the daily cap, duplicate prevention on (creator, event, context)
and the consecutive-day activity streak that the nightly streak job later
resets and pays out. Operators can also correct XP directly; those
adjustments are audited like any award.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.config_loader import XpConfig
from core.utils import as_utc, utc_now

logger = logging.getLogger(__name__)

ADMIN_ADJUSTMENT_EVENT = "admin_adjustment"


@dataclass
class XpAward:
    """Outcome of one award_xp call."""
    success: bool
    xp_awarded: int
    daily_cap_reached: bool
    message: str
    streak_count: Optional[int] = None


def next_streak(current: int, last_activity_at: Optional[datetime], now: datetime) -> int:
    """
    Streak after activity at `now`.

    Same UTC day as the last activity keeps the streak, the following day
    extends it, anything else starts a new one.
    """
    if last_activity_at is None:
        return 1
    last_day = as_utc(last_activity_at).date()
    today = as_utc(now).date()
    if last_day == today:
        return max(current or 0, 1)
    if last_day == today - timedelta(days=1):
        return (current or 0) + 1
    return 1


class XpService:
    def __init__(self, config: XpConfig):
        self.config = config

    def xp_for(self, event: str) -> int:
        try:
            return self.config.values[event]
        except KeyError:
            raise ValueError(f"Unknown XP event: {event}") from None

    def award_xp(
        self,
        repo,
        creator_id: str,
        event: str,
        context_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> XpAward:
        """
        Award the XP configured for `event` to a creator.

        Runs inside the caller's unit of work; `repo` is a CreatorRepository.

        Args:
            repo: Repository bound to the current session
            creator_id: Creator earning the XP
            event: Key into the configured XP values
            context_id: Booking/review/referral id; repeats are rejected
            now: Award time, defaults to now

        Returns:
            XpAward describing what was granted

        Raises:
            ValueError: if the event is not configured
        """
        now = as_utc(now) if now else utc_now()
        base_xp = self.xp_for(event)

        if context_id is not None and repo.has_xp_transaction(creator_id, event, context_id):
            logger.warning(f"Duplicate XP award rejected: {creator_id} {event} {context_id}")
            return XpAward(False, 0, False, "Duplicate transaction detected")

        creator = repo.get_by_id(creator_id)
        if creator is None:
            logger.warning(f"XP award for unknown creator {creator_id}")
            return XpAward(False, 0, False, "Unknown creator")

        daily_xp = creator.daily_xp or 0
        if creator.last_xp_date is None or creator.last_xp_date < now.date():
            daily_xp = 0

        remaining = max(0, self.config.daily_cap - daily_xp)
        xp_awarded = min(base_xp, remaining)
        daily_cap_reached = xp_awarded < base_xp

        streak = next_streak(creator.streak_count, creator.last_activity_at, now)

        repo.record_xp_award(
            creator,
            event=event,
            xp_awarded=xp_awarded,
            daily_xp=daily_xp + xp_awarded,
            streak_count=streak,
            now=now,
            context_id=context_id,
            daily_cap_reached=daily_cap_reached
        )

        if daily_cap_reached:
            message = f"Awarded {xp_awarded} XP (daily cap reached)"
        else:
            message = f"Awarded {xp_awarded} XP"
        logger.info(f"{creator_id}: {message} for {event}")
        return XpAward(True, xp_awarded, daily_cap_reached, message, streak)

    def adjust_xp(
        self,
        repo,
        creator_id: str,
        amount: int,
        reason: str,
        admin_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> XpAward:
        """
        Operator XP correction: positive awards, negative deducts.

        Bypasses the daily cap and leaves the streak alone. A deduction never
        takes XP below zero; the audit row records the change actually applied.

        Raises:
            ValueError: if `amount` is zero or `reason` is blank
        """
        if amount == 0:
            raise ValueError("Amount must be non-zero")
        if not reason or not reason.strip():
            raise ValueError("Reason is required")
        now = as_utc(now) if now else utc_now()

        creator = repo.get_by_id(creator_id)
        if creator is None:
            logger.warning(f"XP adjustment for unknown creator {creator_id}")
            return XpAward(False, 0, False, "Unknown creator")

        xp_delta = max(amount, -(creator.xp or 0))
        repo.record_xp_adjustment(
            creator,
            event=ADMIN_ADJUSTMENT_EVENT,
            xp_delta=xp_delta,
            reason=reason.strip(),
            now=now,
            admin_id=admin_id
        )

        message = f"Adjusted XP by {xp_delta}"
        logger.info(f"{creator_id}: {message} by {admin_id or 'operator'} ({reason.strip()})")
        return XpAward(True, xp_delta, False, message, creator.streak_count)
