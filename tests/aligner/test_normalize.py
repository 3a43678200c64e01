"""
Tests for word normalization and tokenization.
"""

import pytest

from readalong.aligner import normalize_word, tokenize


class TestNormalizeWord:
    """Tests for normalize_word()."""

    def test_lowercases(self) -> None:
        assert normalize_word("The") == "the"
        assert normalize_word("PLANETS") == "planets"

    def test_punctuation_and_case_insensitive(self) -> None:
        assert normalize_word("Cat,") == normalize_word("cat")

    @pytest.mark.parametrize("raw", ["mat.", "mat,", "mat!", "mat?", "mat;", "mat:"])
    def test_strips_each_punctuation_mark(self, raw: str) -> None:
        assert normalize_word(raw) == "mat"

    def test_strips_inside_word(self) -> None:
        """Marks are removed wherever they appear, not just at the end."""
        assert normalize_word("e.g.") == "eg"
        assert normalize_word("1,000") == "1000"

    def test_keeps_apostrophe(self) -> None:
        assert normalize_word("Word's") == "word's"

    def test_keeps_other_punctuation(self) -> None:
        assert normalize_word('"hello"') == '"hello"'
        assert normalize_word("(cat)") == "(cat)"
        assert normalize_word("well-known") == "well-known"

    def test_does_not_trim_whitespace(self) -> None:
        assert normalize_word(" cat ") == " cat "

    def test_empty_and_punctuation_only(self) -> None:
        assert normalize_word("") == ""
        assert normalize_word("...") == ""
        assert normalize_word(",") == ""


class TestTokenize:
    """Tests for tokenize()."""

    def test_splits_on_whitespace(self) -> None:
        assert tokenize("The cat sat.") == ["The", "cat", "sat."]

    def test_ignores_extra_whitespace(self) -> None:
        assert tokenize("  the   cat\n\tsat  ") == ["the", "cat", "sat"]

    def test_empty_string(self) -> None:
        assert tokenize("") == []
        assert tokenize("   ") == []

    def test_keeps_raw_text(self) -> None:
        """Tokens keep their case and punctuation for display."""
        assert tokenize("In 2023, the") == ["In", "2023,", "the"]
