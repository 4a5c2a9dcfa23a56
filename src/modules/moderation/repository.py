from collections import Counter
from datetime import UTC, datetime

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.enums import ContentType
from src.core.repository import BaseRepository
from src.modules.moderation.models import ModerationLog
from src.modules.moderation.schemas import ModerationStats

TOP_REASONS_LIMIT = 5


class ModerationLogRepository(BaseRepository[ModerationLog]):
    """Repository for moderation log operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ModerationLog)

    async def log_moderation_check(
        self,
        moderation_id: str,
        content_text: str,
        content_type: ContentType,
        is_approved: bool,
        confidence: float,
        reasons: list[str],
        created_at: datetime | None = None,
    ) -> ModerationLog:
        """Append one moderation decision."""
        log = ModerationLog(
            moderation_id=moderation_id,
            content_text=content_text,
            content_type=content_type,
            is_approved=is_approved,
            confidence=confidence,
            reasons=list(reasons),
            created_at=created_at or datetime.now(UTC),
        )
        return await self.create(log)

    async def get_stats(self, since: datetime) -> ModerationStats:
        """Aggregate decisions made after `since`: totals, approval rate and top rejection reasons."""
        totals = await self.db.execute(
            select(
                func.count(self.model.id),
                func.coalesce(func.sum(case((self.model.is_approved.is_(True), 1), else_=0)), 0),
            ).where(self.model.created_at >= since)
        )
        total_checked, approved = totals.one()
        total_checked, approved = int(total_checked or 0), int(approved or 0)

        rejected_reasons = await self.db.scalars(
            select(self.model.reasons)
            .where(self.model.is_approved.is_(False))
            .where(self.model.created_at >= since)
        )
        counter: Counter[str] = Counter()
        for reasons in rejected_reasons.all():
            counter.update(reasons or [])

        return ModerationStats(
            total_checked=total_checked,
            approved=approved,
            rejected=total_checked - approved,
            approval_rate=round(approved / total_checked * 100, 1) if total_checked else 0.0,
            top_reasons=counter.most_common(TOP_REASONS_LIMIT),
        )
