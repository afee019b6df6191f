"""Daily scheduler for the scoring jobs."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.config_loader import ScheduleConfig
from core.errors import ConfigurationError
from core.utils import utc_now

logger = logging.getLogger(__name__)


class DailySchedule:
    """Fixed time of day in a fixed IANA time zone."""

    def __init__(self, config: ScheduleConfig):
        try:
            self.tz = ZoneInfo(config.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown schedule timezone: {config.timezone}") from e
        self.hour = config.hour
        self.minute = config.minute

    def next_run_after(self, now: datetime) -> datetime:
        """First scheduled instant strictly after `now`, returned in UTC."""
        local_now = now.astimezone(self.tz)
        candidate = local_now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if candidate <= local_now:
            candidate = (candidate + timedelta(days=1)).replace(hour=self.hour, minute=self.minute)
        return candidate.astimezone(ZoneInfo("UTC"))


def wait_until(
    target: datetime,
    stop_event: threading.Event,
    poll_seconds: float = 5,
    clock: Callable[[], datetime] = utc_now
) -> bool:
    """
    Block until `target` or until stop_event is set.

    Sleeps in chunks so a shutdown signal is noticed promptly.

    Returns:
        True if the target time was reached, False if stopped
    """
    while not stop_event.is_set():
        remaining = (target - clock()).total_seconds()
        if remaining <= 0:
            return True
        stop_event.wait(min(poll_seconds, remaining))
    return False


def run_daily(
    schedule: DailySchedule,
    cycle: Callable[[], None],
    stop_event: threading.Event,
    poll_seconds: float = 5,
    clock: Callable[[], datetime] = utc_now,
    max_cycles: Optional[int] = None
) -> int:
    """
    Run `cycle` once per scheduled slot until stopped.

    An exception from one cycle is logged and the loop waits for the next slot.

    Returns:
        Number of cycles started
    """
    cycle_count = 0
    while not stop_event.is_set():
        if max_cycles is not None and cycle_count >= max_cycles:
            break
        next_run = schedule.next_run_after(clock())
        logger.info(f"Next run scheduled for {next_run.isoformat()}")
        if not wait_until(next_run, stop_event, poll_seconds, clock):
            break

        cycle_count += 1
        logger.info(f"=== Starting Cycle #{cycle_count} ===")
        try:
            cycle()
        except Exception as e:
            logger.error(f"Error in scheduled cycle: {e}", exc_info=True)
    return cycle_count
