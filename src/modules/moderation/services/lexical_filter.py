import re
from collections.abc import Iterable
from dataclasses import dataclass

from src.modules.moderation.constants import MASK_CHAR, PROFANITY_WORDS


@dataclass(frozen=True)
class LexicalCheck:
    is_profane: bool
    cleaned: str


# Inflections an ASCII term may carry ("shitty", "fuckers", "fucking").
ASCII_SUFFIX = r"(?:s|es|ed|er|ers|ing|y|ty)?"


def _term_pattern(term: str) -> str:
    escaped = re.escape(term)
    # Only Latin letters bound an ASCII term, so "shit같은" matches but "classic" does not.
    # Korean is agglutinative, so Hangul terms match anywhere inside a word.
    return rf"(?<![a-z]){escaped}{ASCII_SUFFIX}(?![a-z])" if term.isascii() else escaped


class LexicalFilter:
    """Dictionary-based profanity detector and masker."""

    def __init__(self, words: Iterable[str] = PROFANITY_WORDS, extra_words: Iterable[str] = ()):
        terms = {w.strip().lower() for w in (*words, *extra_words) if w and w.strip()}
        self.terms: frozenset[str] = frozenset(terms)
        self._pattern: re.Pattern[str] | None = None
        if terms:
            # Longest first so "motherfucker" wins over "fucker".
            ordered = sorted(terms, key=len, reverse=True)
            self._pattern = re.compile("|".join(_term_pattern(t) for t in ordered), re.IGNORECASE)

    def check(self, text: str) -> LexicalCheck:
        if not text or self._pattern is None:
            return LexicalCheck(is_profane=False, cleaned=text)

        cleaned, count = self._pattern.subn(lambda m: MASK_CHAR * len(m.group(0)), text)
        return LexicalCheck(is_profane=count > 0, cleaned=cleaned)
