"""
Batch Recomputation Job - nightly tier, tier_frozen and rank_score refresh.

Every derived field is a pure function of already persisted inputs, so
re-running the job (after a crash, or twice in a row) converges on the same
end state.
"""

import logging
from datetime import datetime
from typing import List, Sequence, Tuple

from core.errors import MalformedRecordError
from core.scorer.dto import CreatorSnapshot
from core.scorer.service import CreatorScoringService
from database.uow import CreatorUnitOfWork
from pipeline.base import BatchJob

logger = logging.getLogger(__name__)


class RecomputeJob(BatchJob):
    name = "recompute"

    def __init__(self, config, *args, **kwargs):
        super().__init__(config, *args, **kwargs)
        self.scoring = CreatorScoringService(config)

    def process_page(
        self,
        uow: CreatorUnitOfWork,
        records: Sequence[CreatorSnapshot],
        now: datetime
    ) -> Tuple[int, List[str]]:
        include_credibility = self.config.batch.persist_credibility
        badges = {}
        if include_credibility:
            badges = uow.creators.get_badges_for_creators([record.id for record in records])

        updates = []
        skipped = []
        for record in records:
            try:
                update = self.scoring.score_record(
                    record,
                    badges=badges.get(record.id),
                    now=now,
                    include_credibility=include_credibility
                )
            except MalformedRecordError as e:
                logger.warning(f"Skipping malformed record: {e}")
                skipped.append(record.id)
                continue

            if update.tier_changed:
                logger.info(f"{record.id}: tier {record.tier} -> {update.tier}")
            updates.append(update)

        uow.creators.apply_score_updates(updates, include_credibility=include_credibility, now=now)
        return len(updates), skipped
