from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import STORAGE_ERRORS
from src.core.enums import ContentStatus, ContentType, ReportReason
from src.core.exception import DuplicateReportError, StorageError
from src.core.logging import get_logger
from src.core.utils.locks import KeyedLock
from src.modules.reports.escalation import EscalationStateMachine
from src.modules.reports.models import ContentReport
from src.modules.reports.repository import ContentStatusRepository, ReportRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReportSubmission:
    report: ContentReport
    pending_count: int
    content_status: ContentStatus | None


class ReportService:
    """
    Records deduplicated user reports and escalates content visibility.

    Submissions for the same content are serialized through `locks` inside a
    process; the partial unique index covers concurrent processes. A redundant
    escalation check is harmless because transitions are compare-and-set.
    """

    def __init__(self, db: AsyncSession, escalation: EscalationStateMachine, locks: KeyedLock):
        self.db = db
        self.escalation = escalation
        self.locks = locks
        self.reports = ReportRepository(db)
        self.statuses = ContentStatusRepository(db)

    async def submit(
        self,
        content_id: str,
        content_type: ContentType,
        reason: ReportReason,
        reporter_key: str,
        description: str | None = None,
    ) -> ReportSubmission:
        report = ContentReport(
            content_id=content_id,
            content_type=content_type,
            reason=reason,
            description=description,
            reporter_key=reporter_key,
            created_at=datetime.now(UTC),
        )

        async with self.locks.hold(f"{content_type.value}:{content_id}"):
            try:
                pending_count, is_duplicate = await self.reports.add_pending_and_count(report)
            except STORAGE_ERRORS as e:
                await self.db.rollback()
                logger.warning(f"Failed to store report for {content_type.value}:{content_id}: {e}")
                raise StorageError("Failed to submit the report. Please try again later.") from e

            if is_duplicate:
                logger.info(f"Duplicate report ignored: {content_type.value}:{content_id} reporter={reporter_key}")
                raise DuplicateReportError()

            logger.info(
                f"Report accepted: {content_type.value}:{content_id} reason={reason.value} pending={pending_count}"
            )
            content_status = await self._escalate(content_id, content_type, pending_count)

        return ReportSubmission(report=report, pending_count=pending_count, content_status=content_status)

    async def pending_count(self, content_id: str, content_type: ContentType) -> int:
        return await self.reports.pending_count(content_id, content_type)

    async def content_status(self, content_id: str, content_type: ContentType) -> ContentStatus:
        return await self.statuses.get_status(content_id, content_type)

    async def _escalate(self, content_id: str, content_type: ContentType, pending_count: int) -> ContentStatus | None:
        """Apply the escalation decision. Storage failures here never undo the accepted report."""
        try:
            current = await self.statuses.get_status(content_id, content_type)
            target = self.escalation.next_status(current, pending_count)
            if target is None:
                return current

            moved = await self.statuses.transition(
                content_id, content_type, target, allowed_from=self.escalation.allowed_from(target)
            )
            if moved:
                logger.warning(
                    f"Content {content_type.value}:{content_id} auto-{target.value} after {pending_count} reports"
                )
            return await self.statuses.get_status(content_id, content_type)
        except STORAGE_ERRORS as e:
            await self.db.rollback()
            logger.warning(f"Escalation check failed for {content_type.value}:{content_id}: {e}")
            return None
