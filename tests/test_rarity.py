"""
Tests for rarity scoring.
"""
import math

from babble.services.rarity import Sentence, calculate_rarity, rarity_key


class TestCalculateRarity:
    """Test suite for calculate_rarity."""

    def test_unseen_words_are_infinitely_rare(self):
        assert calculate_rarity([0]) == math.inf
        assert calculate_rarity([0, 0, -1]) == math.inf

    def test_no_valid_words(self):
        assert calculate_rarity([]) == -math.inf
        assert calculate_rarity([-1, -1]) == -math.inf

    def test_ratio(self):
        """Test rarity is word count over summed counts."""
        assert calculate_rarity([2, 2]) == 0.5
        assert calculate_rarity([1, 3, -1]) == 0.5
        assert calculate_rarity([1]) == 1.0

    def test_rarer_words_score_higher(self):
        assert calculate_rarity([1, 1]) > calculate_rarity([10, 10])

    def test_accepts_generators(self):
        assert calculate_rarity(c for c in [4]) == 0.25


class TestRarityKey:
    """Test suite for rarity ordering."""

    def test_sort_order(self):
        """Test NaN sorts below -inf and inf sorts highest."""
        values = [1.0, math.inf, -math.inf, math.nan, 0.25]

        ordered = sorted(values, key=rarity_key)

        assert math.isnan(ordered[0])
        assert ordered[1:] == [-math.inf, 0.25, 1.0, math.inf]

    def test_sentence_str(self):
        assert str(Sentence("hello world", 0.5)) == "hello world"
