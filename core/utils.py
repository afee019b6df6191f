import logging
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite hands them back without tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize the timestamp representations found on creator profiles.

    Accepts a datetime, milliseconds since the epoch (int/float), an
    ISO-8601 string, or any object exposing ``to_datetime()``. Returns an
    aware UTC datetime, or None when the value is missing or unreadable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Epoch milliseconds out of range: {value!r}")
            return None
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            logger.warning(f"Unparseable timestamp string: {value!r}")
            return None
    to_datetime = getattr(value, "to_datetime", None)
    if callable(to_datetime):
        return as_utc(to_datetime())
    logger.warning(f"Unsupported timestamp type: {type(value).__name__}")
    return None


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Number of complete days elapsed from `earlier` to `later`."""
    return int((as_utc(later) - as_utc(earlier)).total_seconds() // SECONDS_PER_DAY)
