"""Tests for the dictionary profanity filter."""

from src.modules.moderation.services.lexical_filter import LexicalFilter


def test_clean_text_passes_through():
    result = LexicalFilter().check("완전 좋은 이야기입니다")
    assert result.is_profane is False
    assert result.cleaned == "완전 좋은 이야기입니다"


def test_korean_term_matches_inside_word_and_is_masked():
    result = LexicalFilter().check("이 병신같은 귀신")
    assert result.is_profane is True
    assert "병신" not in result.cleaned
    assert result.cleaned == "이 **같은 귀신"


def test_english_match_is_case_insensitive():
    result = LexicalFilter().check("What the FUCK was that")
    assert result.is_profane is True
    assert result.cleaned == "What the **** was that"


def test_ascii_terms_inside_longer_words_are_ignored():
    # "class" and "shitake" must not trip "ass"/"shit"-style entries.
    result = LexicalFilter(words=["ass", "shit"]).check("classic shitake soup")
    assert result.is_profane is False


def test_longest_term_wins():
    result = LexicalFilter(words=["fucker", "motherfucker"]).check("you motherfucker")
    assert result.cleaned == "you ************"


def test_extra_words_extend_dictionary():
    lexical = LexicalFilter(words=[], extra_words=["괴담꾼"])
    assert lexical.check("저 괴담꾼 또 왔네").is_profane is True
    assert lexical.check("무서운 괴담").is_profane is False


def test_empty_text_and_empty_dictionary():
    assert LexicalFilter().check("").is_profane is False
    assert LexicalFilter(words=[]).check("fuck").is_profane is False


def test_english_term_glued_to_hangul_is_caught():
    lexical = LexicalFilter()
    for text, masked in (("shit같은 이야기", "****같은 이야기"), ("fuck놈아", "****놈아")):
        result = lexical.check(text)
        assert result.is_profane is True
        assert result.cleaned == masked


def test_inflected_english_terms_are_masked_whole():
    lexical = LexicalFilter(words=["shit", "fucker"])
    assert lexical.check("this is shitty").cleaned == "this is ******"
    assert lexical.check("fuckers everywhere").cleaned == "******* everywhere"
    assert lexical.check("Shits happen").is_profane is True
