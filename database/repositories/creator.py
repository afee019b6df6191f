import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import bindparam, or_, select, update

from core.scorer.badges import get_badge_definition
from core.scorer.dto import BadgeDTO, CreatorSnapshot
from core.scorer.models import CreatorScoreUpdate, StreakUpdate
from core.scorer.tiers import Tier
from core.utils import as_utc, utc_now
from database.models import Creator, CreatorBadge, XpTransaction
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


@dataclass
class CreatorPage:
    """One page of a cursor scan. next_cursor is None once the scan is exhausted."""
    records: List[CreatorSnapshot]
    next_cursor: Optional[str]


def to_snapshot(creator: Creator) -> CreatorSnapshot:
    return CreatorSnapshot(
        id=creator.id,
        tier=creator.tier,
        tier_frozen=bool(creator.tier_frozen),
        xp=creator.xp,
        streak_count=creator.streak_count,
        last_activity_at=as_utc(creator.last_activity_at),
        average_rating=creator.average_rating,
        review_count=creator.review_count,
        completed_bookings=creator.completed_bookings,
        late_deliveries=creator.late_deliveries,
        open_disputes=creator.open_disputes,
        response_hrs=creator.response_hrs,
        rank_score=creator.rank_score,
        ax_verified_credits=creator.ax_verified_credits,
        client_confirmed_credits=creator.client_confirmed_credits,
        distinct_clients_90d=creator.distinct_clients_90d,
        positive_review_count=creator.positive_review_count,
        response_rate=creator.response_rate,
        avg_response_time_hours=creator.avg_response_time_hours,
        last_completed_at=as_utc(creator.last_completed_at),
        tier_override=creator.tier_override,
    )


class CreatorRepository(BaseRepository):

    # --- Reads ---

    def list_creators(
        self,
        role: Optional[str],
        cursor: Optional[str],
        page_size: int
    ) -> CreatorPage:
        """
        Fetch up to `page_size` creators ordered by id, strictly after `cursor`.

        Args:
            role: Only records with this role; None for every record
            cursor: Last id of the previous page, None for the first page
            page_size: Maximum records to return
        """
        stmt = select(Creator).order_by(Creator.id).limit(page_size)
        if role is not None:
            stmt = stmt.where(Creator.role == role)
        if cursor is not None:
            stmt = stmt.where(Creator.id > cursor)

        rows = self.db.execute(stmt).scalars().all()
        records = [to_snapshot(row) for row in rows]
        next_cursor = records[-1].id if len(records) == page_size else None
        return CreatorPage(records=records, next_cursor=next_cursor)

    def get_by_id(self, creator_id: str) -> Optional[Creator]:
        stmt = select(Creator).where(Creator.id == creator_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_snapshot(self, creator_id: str) -> Optional[CreatorSnapshot]:
        creator = self.get_by_id(creator_id)
        return to_snapshot(creator) if creator is not None else None

    def get_badges_for_creators(self, creator_ids: Sequence[str]) -> Dict[str, List[BadgeDTO]]:
        """Batch fetch badges for a page of creators in one query."""
        if not creator_ids:
            return {}

        stmt = select(CreatorBadge).where(CreatorBadge.creator_id.in_(list(creator_ids)))
        result: Dict[str, List[BadgeDTO]] = {cid: [] for cid in creator_ids}
        for row in self.db.execute(stmt).scalars().all():
            result[row.creator_id].append(BadgeDTO(
                badge_id=row.badge_id,
                score_impact=row.score_impact,
                expires_at=as_utc(row.expires_at),
            ))
        return result

    # --- Onboarding and platform activity ---

    def create_creator(self, creator_id: str, role: str = 'creator', **fields) -> Creator:
        """Onboard a creator: standard tier, zero XP unless told otherwise."""
        values = {'tier': 'standard', 'xp': 0}
        values.update(fields)
        creator = Creator(id=creator_id, role=role, **values)
        self.db.add(creator)
        self.db.flush()
        return creator

    def award_badge(
        self,
        creator_id: str,
        badge_id: str,
        now: Optional[datetime] = None,
        expires_at: Optional[datetime] = None
    ) -> CreatorBadge:
        """Grant a catalog badge, or refresh it if already held."""
        now = now or utc_now()
        definition = get_badge_definition(badge_id)
        if expires_at is None and definition.lifetime is not None:
            expires_at = now + definition.lifetime

        badge = self.db.execute(
            select(CreatorBadge).where(
                CreatorBadge.creator_id == creator_id,
                CreatorBadge.badge_id == badge_id
            )
        ).scalar_one_or_none()

        if badge is None:
            badge = CreatorBadge(creator_id=creator_id, badge_id=badge_id)
            self.db.add(badge)

        badge.score_impact = definition.score_impact
        badge.awarded_at = now
        badge.expires_at = expires_at
        self.db.flush()
        return badge

    def has_xp_transaction(self, creator_id: str, event: str, context_id: str) -> bool:
        stmt = select(XpTransaction.id).where(
            XpTransaction.creator_id == creator_id,
            XpTransaction.event == event,
            XpTransaction.context_id == context_id
        )
        return self.db.execute(stmt).first() is not None

    def record_xp_award(
        self,
        creator: Creator,
        event: str,
        xp_awarded: int,
        daily_xp: int,
        streak_count: int,
        now: datetime,
        context_id: Optional[str] = None,
        daily_cap_reached: bool = False
    ) -> XpTransaction:
        """Apply an XP award as a relative increment and write its audit row."""
        self.db.execute(
            update(Creator)
            .where(Creator.id == creator.id)
            .values(
                xp=Creator.xp + xp_awarded,
                daily_xp=daily_xp,
                last_xp_date=now.date(),
                streak_count=streak_count,
                last_activity_at=now,
            )
        )
        transaction = XpTransaction(
            creator_id=creator.id,
            event=event,
            context_id=context_id,
            xp_awarded=xp_awarded,
            daily_cap_reached=daily_cap_reached,
            created_at=now,
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    # --- Operator actions ---

    def set_tier_override(self, creator_id: str, tier: Optional[str]) -> bool:
        """
        Pin a creator to `tier`, or clear the pin with None.

        A pinned tier is applied immediately and kept by the nightly job;
        once cleared, the next run derives the tier from the thresholds again.

        Returns:
            False if the creator does not exist

        Raises:
            ValueError: if `tier` is not a known tier
        """
        values = {'tier_override': None}
        if tier is not None:
            pinned = Tier(tier).value
            values = {'tier_override': pinned, 'tier': pinned}

        result = self.db.execute(update(Creator).where(Creator.id == creator_id).values(**values))
        if result.rowcount == 0:
            return False
        logger.info(f"{creator_id}: tier override {'cleared' if tier is None else 'set to ' + values['tier']}")
        return True

    def record_xp_adjustment(
        self,
        creator: Creator,
        event: str,
        xp_delta: int,
        reason: str,
        now: datetime,
        admin_id: Optional[str] = None
    ) -> XpTransaction:
        """Apply an operator XP change outside the daily cap and write its audit row."""
        self.db.execute(
            update(Creator)
            .where(Creator.id == creator.id)
            .values(xp=Creator.xp + xp_delta)
        )
        transaction = XpTransaction(
            creator_id=creator.id,
            event=event,
            xp_awarded=xp_delta,
            admin_id=admin_id,
            reason=reason,
            created_at=now,
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    # --- Batched writes from the scheduled jobs ---

    def apply_score_updates(
        self,
        updates: Sequence[CreatorScoreUpdate],
        include_credibility: bool = False,
        now: Optional[datetime] = None
    ) -> int:
        """
        Write tier, tier_frozen and rank_score (plus credibility_score when
        enabled) for a page of creators as one executemany UPDATE.

        The fields of one creator always land together.
        """
        if not updates:
            return 0

        table = Creator.__table__
        stmt = (
            update(table)
            .where(table.c.id == bindparam('b_id'))
            .values(scores_updated_at=now or utc_now())
        )
        params = [u.as_params(include_credibility) for u in updates]
        result = self.db.execute(stmt, params)
        logger.debug(f"Score update touched {result.rowcount} rows for {len(updates)} creators")
        return len(updates)

    def apply_streak_resets(self, updates: Sequence[StreakUpdate], stale_before: datetime) -> int:
        """
        Zero streaks and add milestone XP for a page of stale creators.

        Each row is only touched if it still has the streak we read and is
        still stale, so activity recorded after the read is never clobbered
        and a concurrent run cannot pay the same bonus twice. XP is a
        relative increment.
        """
        if not updates:
            return 0

        table = Creator.__table__
        stmt = (
            update(table)
            .where(
                table.c.id == bindparam('b_id'),
                table.c.streak_count == bindparam('b_prior_streak'),
                or_(
                    table.c.last_activity_at.is_(None),
                    table.c.last_activity_at <= as_utc(stale_before),
                ),
            )
            .values(
                streak_count=0,
                xp=table.c.xp + bindparam('b_xp_bonus'),
            )
        )
        params = [
            {'b_id': u.creator_id, 'b_prior_streak': u.prior_streak, 'b_xp_bonus': u.xp_bonus}
            for u in updates
        ]
        result = self.db.execute(stmt, params)
        logger.debug(f"Streak reset touched {result.rowcount} rows for {len(updates)} creators")
        return len(updates)
