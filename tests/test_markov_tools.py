"""
Tests for tokenization and text helpers.
"""
import pytest

from babble.services.markov_tools import (
    filter_words,
    foul_play,
    join_chain,
    normalize_word,
    split_chain,
    tokenize_sentence,
    trim_punctuation,
)


class TestTokenizeSentence:
    """Test suite for tokenize_sentence."""

    def test_window_count(self):
        """Test a sentence of length L yields L - N + 1 windows."""
        words = "the quick brown fox jumps".split()

        for order in range(1, 6):
            windows = tokenize_sentence(words, order)
            assert len(windows) == len(words) - order + 1
            assert all(len(w) == order + 1 for w in windows)

    def test_windows_reconstruct_sentence(self):
        """Test the first N words of each window rebuild the sentence."""
        words = "one two three four five six".split()
        order = 3

        windows = tokenize_sentence(words, order)
        rebuilt = list(windows[0][:order])
        for window in windows[1:]:
            rebuilt.append(window[order - 1])

        assert rebuilt == words

    def test_last_window_ends_with_terminator(self):
        """Test the final slot past the sentence end is None."""
        windows = tokenize_sentence(["the", "cat", "sat"], 2)

        assert windows == [["the", "cat", "sat"], ["cat", "sat", None]]

    def test_short_sentence_is_empty(self):
        """Test sentences shorter than the order produce nothing."""
        assert tokenize_sentence(["lonely"], 2) == []
        assert tokenize_sentence([], 1) == []

    def test_sentence_of_exactly_order(self):
        """Test a sentence of length N gives a single terminated window."""
        assert tokenize_sentence(["a", "b"], 2) == [["a", "b", None]]

    def test_invalid_order(self):
        """Test order below 1 is rejected."""
        with pytest.raises(ValueError):
            tokenize_sentence(["a"], 0)


class TestWordHelpers:
    """Test suite for word filtering and normalization."""

    def test_chain_join_split(self):
        assert join_chain(["a", "b"]) == "a b"
        assert split_chain("a b") == ["a", "b"]

    def test_filter_words(self):
        """Test blanks and None are dropped and words trimmed."""
        assert filter_words([" hi ", "", None, "  ", "there"]) == ["hi", "there"]

    def test_trim_punctuation(self):
        """Test leading and trailing punctuation is stripped."""
        assert trim_punctuation("\"hello!\"") == "hello"
        assert trim_punctuation("...") == ""
        assert trim_punctuation("don't") == "don't"
        assert trim_punctuation("¿qué?") == "qué"

    def test_normalize_word(self):
        """Test normalization strips punctuation and case-folds."""
        assert normalize_word("Cat!") == "cat"
        assert normalize_word("  CAT ") == "cat"
        assert normalize_word("Straße") == "strasse"

    def test_normalize_pure_punctuation(self):
        """Test punctuation-only words are kept as-is."""
        assert normalize_word("?!") == "?!"
        assert normalize_word(" ... ") == "..."


class TestFoulPlay:
    """Test suite for repetition spam detection."""

    def test_clean_sentence(self):
        assert not foul_play("the cat sat on the mat".split(), 3, 5)

    def test_consecutive_repeats(self):
        """Test too many repeats in a row trips the check."""
        assert foul_play("spam spam SPAM spam".split(), 3, 5)
        assert not foul_play("spam spam spam".split(), 3, 5)

    def test_total_repeats(self):
        """Test too many repeats overall trips the check."""
        words = "a x a y a z a w a v a".split()
        assert foul_play(words, 3, 5)

    def test_empty_and_single(self):
        assert not foul_play([], 3, 5)
        assert not foul_play(["a"], 3, 5)
