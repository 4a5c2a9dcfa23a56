import uuid

from sqlalchemy import JSON, Boolean, Enum, Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base
from src.core.enums import ContentType


class ModerationLog(Base):
    """Append-only snapshot of every moderation decision, for the stats dashboard."""

    __tablename__ = "moderation_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    moderation_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    content_text: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="content_type_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    is_approved: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    reasons: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
