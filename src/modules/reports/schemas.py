import uuid
from datetime import datetime

from pydantic import Field, field_validator

from src.core.enums import ContentStatus, ContentType, ReportReason, ReportStatus
from src.core.schema import BaseSchema


class ReportCreate(BaseSchema):
    content_id: str = Field(..., min_length=1, max_length=64)
    content_type: ContentType
    reason: ReportReason
    description: str | None = Field(None, max_length=1000)
    reporter_session: str | None = Field(None, max_length=128, description="Anonymous session id of the reporter")

    @field_validator("content_type")
    @classmethod
    def reportable_type(cls, v: ContentType) -> ContentType:
        if v == ContentType.GENERAL:
            raise ValueError("Only creature and comment content can be reported")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class ReportResponse(BaseSchema):
    success: bool = True
    report_id: str
    message: str
    content_status: ContentStatus | None = None


class ReportOut(BaseSchema):
    id: uuid.UUID
    content_id: str
    content_type: ContentType
    reason: ReportReason
    description: str | None = None
    status: ReportStatus
    created_at: datetime


class ReportStats(BaseSchema):
    total: int = 0
    pending: int = 0
    resolved: int = 0
    by_reason: dict[str, int] = {}
    by_type: dict[str, int] = {}
