import uuid

from sqlalchemy import Enum, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base
from src.core.enums import ContentStatus, ContentType, ReportReason, ReportStatus


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class ContentReport(Base):
    """A user report against a story or comment."""

    __tablename__ = "content_reports"
    __table_args__ = (
        # One pending report per reporter and content item; resolved/rejected rows don't count.
        Index(
            "uq_content_reports_pending_reporter",
            "content_type",
            "content_id",
            "reporter_key",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_content_reports_content_status", "content_type", "content_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="content_type_enum", values_callable=_values), nullable=False
    )

    reason: Mapped[ReportReason] = mapped_column(
        Enum(ReportReason, name="report_reason_enum", values_callable=_values), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reporter_key: Mapped[str] = mapped_column(String(128), nullable=False)

    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status_enum", values_callable=_values),
        default=ReportStatus.PENDING,
        nullable=False,
    )


class ContentModerationStatus(Base):
    """Visibility of a reported content item. A missing row means approved."""

    __tablename__ = "content_moderation_status"

    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="content_type_enum", values_callable=_values), primary_key=True
    )
    content_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    status: Mapped[ContentStatus] = mapped_column(
        Enum(ContentStatus, name="content_status_enum", values_callable=_values),
        default=ContentStatus.APPROVED,
        nullable=False,
        index=True,
    )
