"""Report and content-status persistence."""

from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.enums import ContentStatus, ContentType, ReportStatus
from src.core.repository import BaseRepository
from src.modules.reports.models import ContentModerationStatus, ContentReport
from src.modules.reports.schemas import ReportStats


class ReportRepository(BaseRepository[ContentReport]):
    """Repository for content report operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ContentReport)

    async def has_pending(self, content_id: str, content_type: ContentType, reporter_key: str) -> bool:
        statement = (
            select(self.model.id)
            .where(self.model.content_type == content_type)
            .where(self.model.content_id == content_id)
            .where(self.model.reporter_key == reporter_key)
            .where(self.model.status == ReportStatus.PENDING)
            .limit(1)
        )
        return await self.db.scalar(statement) is not None

    async def pending_count(self, content_id: str, content_type: ContentType) -> int:
        result = await self.db.scalar(
            select(func.count(self.model.id))
            .where(self.model.content_type == content_type)
            .where(self.model.content_id == content_id)
            .where(self.model.status == ReportStatus.PENDING)
        )
        return result or 0

    async def add_pending_and_count(self, report: ContentReport) -> tuple[int, bool]:
        """Store a pending report and return (pending count, is_duplicate).

        The partial unique index on (content, reporter) WHERE pending makes the
        duplicate check atomic even across processes.
        """
        if await self.has_pending(report.content_id, report.content_type, report.reporter_key):
            return await self.pending_count(report.content_id, report.content_type), True

        self.db.add(report)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return await self.pending_count(report.content_id, report.content_type), True

        return await self.pending_count(report.content_id, report.content_type), False

    async def get_stats(self) -> ReportStats:
        by_status_rows = await self.db.execute(
            select(self.model.status, func.count(self.model.id)).group_by(self.model.status)
        )
        by_status = {row[0]: row[1] for row in by_status_rows.all()}

        by_reason_rows = await self.db.execute(
            select(self.model.reason, func.count(self.model.id)).group_by(self.model.reason)
        )
        by_type_rows = await self.db.execute(
            select(self.model.content_type, func.count(self.model.id)).group_by(self.model.content_type)
        )

        return ReportStats(
            total=sum(by_status.values()),
            pending=by_status.get(ReportStatus.PENDING, 0),
            resolved=by_status.get(ReportStatus.RESOLVED, 0),
            by_reason={row[0].value: row[1] for row in by_reason_rows.all()},
            by_type={row[0].value: row[1] for row in by_type_rows.all()},
        )

    async def get_recent(self, limit: int = 20) -> Sequence[ContentReport]:
        return await self.get_latest(limit=limit)


class ContentStatusRepository(BaseRepository[ContentModerationStatus]):
    """Visibility status of reported content, changed only through compare-and-set."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ContentModerationStatus)

    async def get_status(self, content_id: str, content_type: ContentType) -> ContentStatus:
        status = await self.db.scalar(
            select(self.model.status)
            .where(self.model.content_type == content_type)
            .where(self.model.content_id == content_id)
        )
        return status or ContentStatus.APPROVED

    async def _ensure_row(self, content_id: str, content_type: ContentType) -> None:
        exists = await self.db.scalar(
            select(self.model.content_id)
            .where(self.model.content_type == content_type)
            .where(self.model.content_id == content_id)
        )
        if exists is not None:
            return

        self.db.add(self.model(content_type=content_type, content_id=content_id, status=ContentStatus.APPROVED))
        try:
            await self.db.commit()
        except IntegrityError:
            # Created concurrently by another writer.
            await self.db.rollback()

    async def transition(
        self,
        content_id: str,
        content_type: ContentType,
        target: ContentStatus,
        allowed_from: tuple[ContentStatus, ...],
    ) -> bool:
        """Move to `target` only if the current status is in `allowed_from`. Returns whether it moved."""
        await self._ensure_row(content_id, content_type)

        result = await self.db.execute(
            update(self.model)
            .where(self.model.content_type == content_type)
            .where(self.model.content_id == content_id)
            .where(self.model.status.in_(allowed_from))
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1  # ty:ignore[unresolved-attribute]
