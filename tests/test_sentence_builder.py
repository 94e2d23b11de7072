"""
Tests for bidirectional sentence construction.
"""
import pytest

from babble.services.chain_store import ChainRow
from babble.services.sentence_builder import SentenceBuilder, SentenceConstruct


class TestSentenceConstruct:
    """Test suite for SentenceConstruct."""

    def test_initial_state(self):
        construct = SentenceConstruct("the cat", 2)

        assert construct.word_count == 2
        assert construct.sentence == "the cat"
        assert construct.latest_forward_chain == "the cat"
        assert construct.latest_backward_chain == "the cat"

    def test_append_and_prepend(self):
        """Test words grow at both ends without duplicating the window."""
        construct = SentenceConstruct("cat sat", 2)
        construct.append("on")
        construct.prepend("the")
        construct.prepend("so")

        assert construct.word_count == 5
        assert construct.sentence == "so the cat sat on"
        assert construct.latest_forward_chain == "sat on"
        assert construct.latest_backward_chain == "so the"

    def test_rejects_wrong_window(self):
        with pytest.raises(ValueError):
            SentenceConstruct("just", 2)
        with pytest.raises(ValueError):
            SentenceConstruct("", 1)


class TestSentenceBuilder:
    """Test suite for SentenceBuilder."""

    def test_invalid_max_words(self, cycle_store):
        with pytest.raises(ValueError):
            SentenceBuilder(cycle_store, 1, max_words=0)
        with pytest.raises(ValueError):
            SentenceBuilder(cycle_store, 1).build(ChainRow("", "a", ""), max_words=-1)

    def test_cycle_terminates_at_max_words(self, cycle_store):
        """Test a two-word cycle stops at the word ceiling."""
        builder = SentenceBuilder(cycle_store, 1, max_words=25)

        sentence = builder.build(ChainRow("b", "a", "b"))

        assert len(sentence.split()) == 25
        assert set(sentence.split()) == {"a", "b"}

    def test_max_words_snapshot(self, cycle_store):
        """Test lowering max_words mid-build doesn't affect that build."""
        builder = SentenceBuilder(cycle_store, 1, max_words=20)
        original_lookup = cycle_store.lookup_random_continuation

        def shrinking_lookup(chain, direction, source=None):
            builder.max_words = 3
            return original_lookup(chain, direction, source)

        cycle_store.lookup_random_continuation = shrinking_lookup

        assert len(builder.build(ChainRow("b", "a", "b")).split()) == 20
        assert len(builder.build(ChainRow("b", "a", "b")).split()) == 3

    def test_builds_whole_sentence_from_store(self, store):
        """Test a single learned path is rebuilt from any of its rows."""
        words = "one two three four five".split()
        store.add_sentence(words)
        builder = SentenceBuilder(store, store.order)

        for row in store.chain_rows():
            assert builder.build(row) == "one two three four five"

    def test_stops_at_boundaries(self, store):
        store.add_sentence("the cat sat".split())
        builder = SentenceBuilder(store, store.order)

        assert builder.build(ChainRow("", "the cat", "")) == "the cat"
        assert builder.build(ChainRow("", "the cat", "sat")) == "the cat sat"

    def test_branches_are_random(self, store):
        """Test a shared chain leads to different endings across builds."""
        store.add_sentence("big dog saw the cat sat down".split())
        store.add_sentence("the cat ran away".split())
        builder = SentenceBuilder(store, store.order)

        built = {builder.build(ChainRow("big", "dog saw", "the")) for _ in range(40)}

        assert built == {"big dog saw the cat sat down", "big dog saw the cat ran away"}
