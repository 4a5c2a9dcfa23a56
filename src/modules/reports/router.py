from fastapi import APIRouter, Depends, Header, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.database import get_db
from src.core.middlewares.ratelimit import client_ip, rate_limit_reports
from src.core.schema import ErrorResponse
from src.modules.reports.repository import ReportRepository
from src.modules.reports.schemas import ReportCreate, ReportOut, ReportResponse, ReportStats
from src.modules.reports.service import ReportService

router = APIRouter()


def get_report_service(request: Request, db: AsyncSession = Depends(get_db)) -> ReportService:
    return ReportService(db, escalation=request.app.state.escalation, locks=request.app.state.report_locks)


def resolve_reporter_key(request: Request, payload: ReportCreate, session_header: str | None) -> str:
    if session_header:
        return f"session:{session_header}"
    if payload.reporter_session:
        return f"session:{payload.reporter_session}"
    return f"ip:{client_ip(request)}"


@router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_reports)],
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Reporter already has a pending report"},
        429: {"model": ErrorResponse},
        503: {"model": ErrorResponse, "description": "Report could not be stored, retry later"},
    },
    summary="Report a story or comment",
)
async def submit_report(
    payload: ReportCreate,
    request: Request,
    x_session_id: str | None = Header(None, max_length=128),
    service: ReportService = Depends(get_report_service),
):
    """
    File a report against content.

    Each reporter can hold one pending report per content item; a second one
    answers 409. Enough pending reports automatically hide, then block, the content.
    """
    submission = await service.submit(
        content_id=payload.content_id,
        content_type=payload.content_type,
        reason=payload.reason,
        reporter_key=resolve_reporter_key(request, payload, x_session_id),
        description=payload.description,
    )
    return ReportResponse(
        report_id=str(submission.report.id),
        message="Your report has been received. We will review it shortly.",
        content_status=submission.content_status,
    )


@router.get("/stats", response_model=ReportStats, summary="Report statistics")
async def report_stats(db: AsyncSession = Depends(get_db)):
    return await ReportRepository(db).get_stats()


@router.get("/recent", response_model=list[ReportOut], summary="Most recent reports for admin review")
async def recent_reports(
    limit: int = Query(settings.RECENT_REPORTS_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await ReportRepository(db).get_recent(limit=limit)
