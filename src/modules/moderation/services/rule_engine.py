import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.core.enums import ContentType
from src.modules.moderation.constants import (
    CONFIDENCE_HARD_BLOCK,
    CONFIDENCE_HARMFUL_TO_MINORS,
    CONFIDENCE_SPAM,
    EXTREME_VIOLENCE_WORDS,
    HARMFUL_TO_MINORS_WORDS,
    REASON_EXTREME_VIOLENCE,
    REASON_HARMFUL_TO_MINORS,
    REASON_SPAM,
    REPEATED_CHARACTER_RUN,
)

SPAM_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"(.)\1{{{REPEATED_CHARACTER_RUN - 1},}}"),
    re.compile(r"(http|www\.)", re.IGNORECASE),
    re.compile(r"\d{2,3}-\d{3,4}-\d{4}"),
)


@dataclass(frozen=True)
class RuleFlag:
    reason: str
    confidence: float


@dataclass(frozen=True)
class RuleVerdict:
    hard_block: bool = False
    flags: list[RuleFlag] = field(default_factory=list)


class RuleEngine:
    """
    Platform-specific keyword and pattern rules.

    Rule families:
        - extreme violence (hard block, creature stories only)
        - harmful to minors (soft flag, creature stories only)
        - spam patterns (soft flag, every content type)

    Flags are returned in that order. A soft flag still rejects content once
    the aggregator turns it into a reason; it just never sets `hard_block`.
    """

    def __init__(
        self,
        hard_block_words: Iterable[str] = EXTREME_VIOLENCE_WORDS,
        minors_words: Iterable[str] = HARMFUL_TO_MINORS_WORDS,
        spam_patterns: Iterable[re.Pattern[str]] = SPAM_PATTERNS,
    ):
        self.hard_block_words = tuple(w.lower() for w in hard_block_words)
        self.minors_words = tuple(w.lower() for w in minors_words)
        self.spam_patterns = tuple(spam_patterns)

    @staticmethod
    def _contains_any(text: str, words: tuple[str, ...]) -> bool:
        return any(word in text for word in words)

    def evaluate(self, text: str, content_type: ContentType) -> RuleVerdict:
        lowered = text.lower()
        flags: list[RuleFlag] = []
        hard_block = False

        if content_type == ContentType.CREATURE:
            if self._contains_any(lowered, self.hard_block_words):
                hard_block = True
                flags.append(RuleFlag(REASON_EXTREME_VIOLENCE, CONFIDENCE_HARD_BLOCK))

            if self._contains_any(lowered, self.minors_words):
                flags.append(RuleFlag(REASON_HARMFUL_TO_MINORS, CONFIDENCE_HARMFUL_TO_MINORS))

        if any(pattern.search(text) for pattern in self.spam_patterns):
            flags.append(RuleFlag(REASON_SPAM, CONFIDENCE_SPAM))

        return RuleVerdict(hard_block=hard_block, flags=flags)
