from pydantic import ConfigDict, Field, model_validator

from src.core.enums import ContentType
from src.core.schema import BaseSchema


class ModerationRequest(BaseSchema):
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, max_length=5000, description="Text to screen")
    content_type: ContentType = Field(..., alias="type", description="creature, comment or general")
    report_reason: str | None = Field(None, max_length=200)


class ModerationResult(BaseSchema):
    """Outcome of one moderation check. Rejected whenever any reason is present."""

    model_config = ConfigDict(frozen=True)

    is_approved: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasons: list[str] = []
    filtered_text: str
    moderation_id: str

    @model_validator(mode="after")
    def approval_matches_reasons(self) -> "ModerationResult":
        if self.is_approved == bool(self.reasons):
            raise ValueError("is_approved must be true exactly when there are no reasons")
        return self


class ModerationStats(BaseSchema):
    total_checked: int = 0
    approved: int = 0
    rejected: int = 0
    approval_rate: float = Field(0.0, description="Approved share in percent, one decimal")
    top_reasons: list[tuple[str, int]] = Field(default_factory=list, description="Top 5 rejection reasons")
    note: str | None = None
