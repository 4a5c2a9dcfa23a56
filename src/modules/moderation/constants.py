"""Moderation dictionaries, reason tags and confidence contributions.

USAGE:
    from src.modules.moderation.constants import REASONS, PROFANITY_WORDS

Reason tags are the human-readable strings returned to authors, in the order
the aggregator reports them. Edit the word lists here; deployments can extend
the profanity dictionary with MODERATION_EXTRA_PROFANITY.
"""

from typing import Final

# =============================================================================
# REASON TAGS
# =============================================================================

REASON_PROFANITY: Final = "inappropriate language"
REASON_HATE: Final = "hate speech"
REASON_HARASSMENT: Final = "harassment or threats"
REASON_SEXUAL: Final = "sexual content"
REASON_VIOLENCE: Final = "violent content"
REASON_SELF_HARM: Final = "self-harm"
REASON_EXTREME_VIOLENCE: Final = "extreme violence"
REASON_HARMFUL_TO_MINORS: Final = "potentially harmful to minors"
REASON_SPAM: Final = "suspected spam"
REASON_SYSTEM_ERROR: Final = "moderation system error"


# =============================================================================
# CONFIDENCE CONTRIBUTIONS
# Every signal starts at 1.0; a firing signal lowers the result to its value.
# =============================================================================

CONFIDENCE_PROFANITY: Final = 0.9
CONFIDENCE_EXTERNAL: Final = 0.8
CONFIDENCE_HARD_BLOCK: Final = 0.7
CONFIDENCE_HARMFUL_TO_MINORS: Final = 0.8
CONFIDENCE_SPAM: Final = 0.6
CONFIDENCE_SYSTEM_ERROR: Final = 0.5


# =============================================================================
# LEXICAL DICTIONARY
# Korean entries match as substrings, ASCII entries on word boundaries.
# =============================================================================

PROFANITY_WORDS: tuple[str, ...] = (
    # Korean
    "시발",
    "씨발",
    "씨바",
    "씨팔",
    "시팔",
    "ㅅㅂ",
    "ㅆㅂ",
    "개새끼",
    "개새기",
    "개색기",
    "개색끼",
    "새끼야",
    "병신",
    "븅신",
    "ㅂㅅ",
    "좆",
    "존나",
    "졸라",
    "지랄",
    "염병",
    "미친놈",
    "미친년",
    "닥쳐",
    "꺼져",
    "썅",
    "니미",
    "느금마",
    "엠창",
    # English
    "fuck",
    "fucking",
    "fucker",
    "shit",
    "bitch",
    "bastard",
    "asshole",
    "dickhead",
    "motherfucker",
    "cunt",
)

MASK_CHAR: Final = "*"


# =============================================================================
# RULE ENGINE WORD LISTS
# =============================================================================

EXTREME_VIOLENCE_WORDS: tuple[str, ...] = (
    "살인",
    "죽이",
    "고문",
    "절단",
    "시체",
    "시신",
    "강간",
    "성폭행",
)
"""Hard-block list. Applied to creature stories only."""

HARMFUL_TO_MINORS_WORDS: tuple[str, ...] = (
    "자살",
    "약물",
    "마약",
    "도박",
    "성인",
    "19금",
)
"""Soft-flag list. Lowers confidence and adds a reason, never a hard block."""

REPEATED_CHARACTER_RUN: Final = 6
