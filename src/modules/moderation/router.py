from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.database import STORAGE_ERRORS, get_db
from src.core.logging import get_logger
from src.core.middlewares.ratelimit import rate_limit_moderation
from src.core.schema import ErrorResponse
from src.modules.moderation.repository import ModerationLogRepository
from src.modules.moderation.schemas import ModerationRequest, ModerationResult, ModerationStats
from src.modules.moderation.services import ModerationService

logger = get_logger(__name__)

router = APIRouter()


def get_moderation_service(request: Request) -> ModerationService:
    return request.app.state.moderation_service


@router.post(
    "/moderate",
    response_model=ModerationResult,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(rate_limit_moderation)],
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
    summary="Screen a piece of text",
)
async def moderate(
    payload: ModerationRequest,
    service: ModerationService = Depends(get_moderation_service),
):
    """
    Run the moderation pipeline on a title, description or comment.

    A rejected result lists human-readable reasons so the author can revise
    and resubmit. Persisting the content is up to the caller.
    """
    return await service.moderate(payload)


@router.get(
    "/moderation/stats",
    response_model=ModerationStats,
    summary="Moderation statistics for the last 24 hours",
)
async def moderation_stats(db: AsyncSession = Depends(get_db)):
    since = datetime.now(UTC) - timedelta(hours=settings.MODERATION_STATS_WINDOW_HOURS)
    try:
        return await ModerationLogRepository(db).get_stats(since)
    except STORAGE_ERRORS as e:
        logger.warning(f"Moderation stats unavailable: {e}")
        return ModerationStats(note="Moderation log storage unavailable; live statistics are not available.")
