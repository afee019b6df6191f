"""Result objects returned by the scheduled jobs."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class JobRunSummary:
    """End-of-run counts for one scheduled job run."""
    job_name: str
    records_seen: int = 0
    records_processed: int = 0
    records_skipped: int = 0
    pages_committed: int = 0
    pages_failed: int = 0
    failed_ids: List[str] = field(default_factory=list)
    last_cursor: Optional[str] = None  # resume point: end of the last safely committed page
    aborted: bool = False
    interrupted: bool = False
    elapsed_seconds: float = 0.0

    @property
    def completed(self) -> bool:
        """True when the scan reached the end of the creator table."""
        return not (self.aborted or self.interrupted)

    def log(self, logger: logging.Logger) -> None:
        level = logging.INFO if self.pages_failed == 0 and not self.aborted else logging.ERROR
        logger.log(
            level,
            f"{self.job_name}: seen={self.records_seen} processed={self.records_processed} "
            f"skipped={self.records_skipped} pages_committed={self.pages_committed} "
            f"pages_failed={self.pages_failed} aborted={self.aborted} "
            f"interrupted={self.interrupted} elapsed={self.elapsed_seconds:.2f}s"
        )
        if self.failed_ids:
            logger.error(f"{self.job_name}: ids left for the next run: {', '.join(self.failed_ids)}")
