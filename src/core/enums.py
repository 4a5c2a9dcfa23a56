"""Core enums shared by the moderation and report modules."""

from enum import Enum as PyEnum


class ContentType(str, PyEnum):
    """Kind of user content being moderated or reported."""

    CREATURE = "creature"
    COMMENT = "comment"
    GENERAL = "general"


class ReportReason(str, PyEnum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    VIOLENCE = "violence"
    HARASSMENT = "harassment"
    OTHER = "other"


class ReportStatus(str, PyEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ContentStatus(str, PyEnum):
    """Visibility of a content item. Only moves forward: approved -> hidden -> blocked."""

    APPROVED = "approved"
    HIDDEN = "hidden"
    BLOCKED = "blocked"
