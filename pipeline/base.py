"""Scan, derive, write loop shared by the scheduled jobs."""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.config_loader import AppConfig
from core.errors import ScoringEngineError
from core.scorer.dto import CreatorSnapshot
from core.utils import utc_now
from database.uow import CreatorUnitOfWork, creator_uow
from pipeline.models import JobRunSummary
from pipeline.pagination import Page, PagedScan
from pipeline.retry import TRANSIENT_STORE_ERRORS, store_retrying

logger = logging.getLogger(__name__)


class BatchJob:
    """
    Base class for a paginated job over creator records.

    Each page is read in its own short transaction and written in another,
    so a page is applied wholly or not at all and a failed page never holds
    up the pages after it. Subclasses implement process_page.
    """

    name = "batch"

    def __init__(
        self,
        config: AppConfig,
        session_factory: Optional[sessionmaker] = None,
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Optional[Callable[[float], None]] = None
    ):
        self.config = config
        self.session_factory = session_factory
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.clock = clock
        self.retrying = store_retrying(config.batch, sleep=sleep)

    @property
    def checkpoint_key(self) -> str:
        return f"{self.name}.cursor"

    def process_page(
        self,
        uow: CreatorUnitOfWork,
        records: Sequence[CreatorSnapshot],
        now: datetime
    ) -> Tuple[int, List[str]]:
        """
        Derive and write one page inside `uow`.

        Returns:
            (records written, ids skipped as malformed)
        """
        raise NotImplementedError

    def fetch_page(self, cursor: Optional[str], page_size: int) -> List[CreatorSnapshot]:
        with creator_uow(self.session_factory) as uow:
            page = uow.creators.list_creators(self.config.batch.creator_role, cursor, page_size)
        return page.records

    def _write_page(self, records: Sequence[CreatorSnapshot], now: datetime) -> Tuple[int, List[str]]:
        with creator_uow(self.session_factory) as uow:
            return self.process_page(uow, records, now)

    def _fail_page(self, page: Page, summary: JobRunSummary, reason: str) -> None:
        ids = [record.id for record in page.records]
        summary.pages_failed += 1
        summary.failed_ids.extend(ids)
        logger.error(f"{self.name}: page after {page.start_after!r} failed ({len(ids)} records): {reason}")

    def _handle_page(self, page: Page, now: datetime, summary: JobRunSummary) -> bool:
        """Write one page. Returns True once it is committed."""
        try:
            written, skipped = self.retrying(self._write_page, page.records, now)
        except TRANSIENT_STORE_ERRORS as e:
            self._fail_page(page, summary, f"still failing after {self.config.batch.max_attempts} attempts: {e}")
            return False
        except (SQLAlchemyError, ScoringEngineError) as e:
            self._fail_page(page, summary, f"{type(e).__name__}: {e}")
            return False

        summary.pages_committed += 1
        summary.records_processed += written
        summary.records_skipped += len(skipped)
        logger.info(
            f"{self.name}: committed page ending at {page.last_id} "
            f"({written} written, {len(skipped)} skipped)"
        )
        return True

    # --- Checkpoints ---

    def load_checkpoint(self) -> Optional[str]:
        with creator_uow(self.session_factory) as uow:
            return uow.job_state.get_value(self.checkpoint_key)

    def _store_checkpoint(self, cursor: Optional[str]) -> None:
        with creator_uow(self.session_factory) as uow:
            if cursor is None:
                uow.job_state.clear(self.checkpoint_key)
            else:
                uow.job_state.set_value(self.checkpoint_key, cursor)

    def _save_checkpoint(self, cursor: Optional[str]) -> None:
        try:
            self.retrying(self._store_checkpoint, cursor)
        except (SQLAlchemyError, ScoringEngineError) as e:
            logger.error(f"{self.name}: could not save checkpoint {cursor!r}: {e}")

    # --- Driver ---

    def run(self, resume: bool = True) -> JobRunSummary:
        """
        Run one full pass over the creator table.

        Args:
            resume: Start after the checkpoint left by an interrupted run

        Returns:
            JobRunSummary, also logged
        """
        run_start = time.time()
        now = self.clock()
        summary = JobRunSummary(job_name=self.name)

        logger.info("=" * 60)
        logger.info(f"STARTING {self.name.upper()} JOB")
        logger.info("=" * 60)

        start_after = None
        if resume:
            try:
                start_after = self.retrying(self.load_checkpoint)
            except TRANSIENT_STORE_ERRORS as e:
                logger.error(f"{self.name}: could not read checkpoint, starting from the top: {e}")
            if start_after:
                logger.info(f"{self.name}: resuming after {start_after}")
        summary.last_cursor = start_after

        scan = PagedScan(
            self.fetch_page,
            self.config.batch.page_size,
            start_after=start_after,
            retrying=self.retrying,
            stop_event=self.stop_event
        )

        # last_cursor only moves past pages that committed with no failed page
        # before them, so a resumed run never starts beyond an unwritten page
        try:
            for page in scan:
                summary.records_seen += len(page.records)
                committed = self._handle_page(page, now, summary)
                if committed and summary.pages_failed == 0:
                    summary.last_cursor = page.last_id
        except TRANSIENT_STORE_ERRORS as e:
            summary.aborted = True
            logger.error(f"{self.name}: page read failed after retries, stopping at {summary.last_cursor!r}: {e}")
        except SQLAlchemyError as e:
            summary.aborted = True
            logger.error(f"{self.name}: page read failed, stopping at {summary.last_cursor!r}: {e}")

        summary.interrupted = scan.interrupted
        if summary.completed:
            self._save_checkpoint(None)
        else:
            self._save_checkpoint(summary.last_cursor)

        summary.elapsed_seconds = time.time() - run_start
        summary.log(logger)

        logger.info("=" * 60)
        logger.info(f"{self.name.upper()} JOB FINISHED")
        logger.info("=" * 60)
        return summary
