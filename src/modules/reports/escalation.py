from src.core.enums import ContentStatus

# Statuses each target may be reached from. Nothing leads back to approved.
PREDECESSORS: dict[ContentStatus, tuple[ContentStatus, ...]] = {
    ContentStatus.HIDDEN: (ContentStatus.APPROVED,),
    ContentStatus.BLOCKED: (ContentStatus.APPROVED, ContentStatus.HIDDEN),
}


class EscalationStateMachine:
    """
    Report-driven visibility escalation: approved -> hidden -> blocked.

    Evaluated after every accepted report with the live pending count.
    Re-evaluating an already escalated item is a no-op; only an admin
    action outside this service can restore content.
    """

    def __init__(self, hide_threshold: int = 3, block_threshold: int = 5):
        if hide_threshold < 1:
            raise ValueError("hide_threshold must be at least 1")
        if block_threshold < hide_threshold:
            raise ValueError("block_threshold must not be lower than hide_threshold")
        self.hide_threshold = hide_threshold
        self.block_threshold = block_threshold

    def next_status(self, current: ContentStatus, pending_count: int) -> ContentStatus | None:
        """Return the status to move to, or None when nothing changes."""
        if pending_count >= self.block_threshold and current in PREDECESSORS[ContentStatus.BLOCKED]:
            return ContentStatus.BLOCKED
        if pending_count >= self.hide_threshold and current in PREDECESSORS[ContentStatus.HIDDEN]:
            return ContentStatus.HIDDEN
        return None

    @staticmethod
    def allowed_from(target: ContentStatus) -> tuple[ContentStatus, ...]:
        return PREDECESSORS.get(target, ())
