"""
Exception taxonomy for the scoring engine.

- ConfigurationError: fatal, raised during startup before any job runs.
- MalformedRecordError: one creator record cannot be scored; the record is
  skipped and the page carries on.
- TransientStoreError: a read or write against the record store failed in a
  way worth retrying.

Any other ScoringEngineError raised while writing a page fails that page
without a retry; the job carries on with the next one.
"""

from typing import Any, Optional


class ScoringEngineError(Exception):
    """Base exception for the scoring engine."""
    pass


class ConfigurationError(ScoringEngineError):
    """Raised when configuration is missing or invalid."""
    pass


class MalformedRecordError(ScoringEngineError):
    """Raised when a creator record has a missing or out-of-range field."""

    def __init__(self, creator_id: Optional[str], field: str, value: Any, reason: str = "invalid"):
        self.creator_id = creator_id
        self.field = field
        self.value = value
        super().__init__(f"Creator {creator_id}: {field}={value!r} is {reason}")


class TransientStoreError(ScoringEngineError):
    """Raised when the record store is temporarily unavailable."""
    pass
