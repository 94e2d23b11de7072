"""
Bidirectional random-walk sentence construction.

A sentence grows outwards from one chain row: forwards by asking the store
for a random word that follows the last ``order`` words, backwards by asking
for a random word that precedes the first ``order`` words.
"""
from __future__ import annotations

from typing import List, Optional, Protocol

from .chain_store import ChainRow, Direction
from .markov_tools import join_chain, split_chain

DEFAULT_MAX_WORDS = 100


class ContinuationLookup(Protocol):
    def lookup_random_continuation(
        self, chain: str, direction: Direction, source: Optional[str] = None
    ) -> Optional[str]:
        ...


class SentenceConstruct:
    """
    Sentence under construction.

    ``forwards`` holds the starting window followed by appended words;
    ``backwards`` holds the starting window reversed followed by prepended
    words, so both grow at the end of their list.
    """

    def __init__(self, initial_chain: str, order: int):
        window = split_chain(initial_chain)
        if len(window) != order or not all(window):
            raise ValueError(f"chain {initial_chain!r} is not a window of {order} words")
        self.order = order
        self.forwards: List[str] = list(window)
        self.backwards: List[str] = list(reversed(window))

    @property
    def word_count(self) -> int:
        return len(self.forwards) + len(self.backwards) - self.order

    @property
    def latest_forward_chain(self) -> str:
        return join_chain(self.forwards[-self.order:])

    @property
    def latest_backward_chain(self) -> str:
        # Stored reversed, so flip back into sentence order.
        return join_chain(reversed(self.backwards[-self.order:]))

    def append(self, word: str) -> None:
        self.forwards.append(word)

    def prepend(self, word: str) -> None:
        self.backwards.append(word)

    @property
    def sentence(self) -> str:
        head = list(reversed(self.backwards[self.order:]))
        return " ".join(head + self.forwards)


class SentenceBuilder:
    """Grows chain rows into full sentences using a store's random lookups."""

    def __init__(self, store: ContinuationLookup, order: int, max_words: int = DEFAULT_MAX_WORDS):
        if max_words <= 0:
            raise ValueError(f"max_words must be larger than 0, got {max_words}")
        self.store = store
        self.order = order
        self.max_words = max_words

    def build(self, row: ChainRow, source: Optional[str] = None, max_words: Optional[int] = None) -> str:
        """
        Build one sentence around ``row``.

        The row's own backward/forward words are used as the first step in
        each direction. Extension stops once both directions hit a sentence
        boundary, or the sentence reaches ``max_words`` words.

        Args:
            row: Starting chain row
            source: Restrict lookups to chains learned from this source
            max_words: Word ceiling; defaults to the builder's current value

        Returns:
            The assembled sentence
        """
        limit = self.max_words if max_words is None else max_words
        if limit <= 0:
            raise ValueError(f"max_words must be larger than 0, got {limit}")

        construct = SentenceConstruct(row.chain, self.order)
        forward_open = True
        backward_open = True

        if construct.word_count < limit:
            if row.forward:
                construct.append(row.forward)
            else:
                forward_open = False
        if construct.word_count < limit:
            if row.backward:
                construct.prepend(row.backward)
            else:
                backward_open = False

        while (forward_open or backward_open) and construct.word_count < limit:
            if forward_open:
                word = self.store.lookup_random_continuation(
                    construct.latest_forward_chain, Direction.FORWARD, source
                )
                if word:
                    construct.append(word)
                else:
                    forward_open = False

            if backward_open and construct.word_count < limit:
                word = self.store.lookup_random_continuation(
                    construct.latest_backward_chain, Direction.BACKWARD, source
                )
                if word:
                    construct.prepend(word)
                else:
                    backward_open = False

        return construct.sentence
