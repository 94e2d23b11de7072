"""
Brain frontend: turns an inbound message into a single reply.

Generation runs against a wall-clock budget. Candidate sentences are
scored by rarity, anything said recently is filtered out through the
History, and a reply is chosen from what remains. When nothing survives
a random sentence is returned instead.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Iterable, Iterator, List, Literal, Optional, Sequence, Union

from .brain import ChainBrain
from .history import History
from .markov_tools import filter_words, trim_punctuation
from .rarity import Sentence, calculate_rarity
from .selectors import get_seeds, most_rare, select

logger = logging.getLogger(__name__)

SelectionPolicy = Literal["rarest", "tiered"]
Words = Union[str, Sequence[str]]


class BrainFrontend:
    """
    Reply orchestration on top of a ChainBrain.

    Holds per-conversation state (History, time budget); share the brain,
    not the frontend, between independent conversations.
    """

    def __init__(
        self,
        brain: ChainBrain,
        source: Optional[str] = None,
        memory: int = 100,
        time_limit: float = 2.0,
        filter_input: bool = True,
        selection: SelectionPolicy = "rarest",
    ):
        """
        Args:
            brain: Chain brain to learn into and generate from
            source: Restrict generation to chains learned from this source
            memory: History capacity (0 disables de-duplication)
            time_limit: Generation budget in seconds (<= 0 disables it)
            filter_input: Trim words and drop blanks before using them
            selection: "rarest" or "tiered" reply selection
        """
        if brain is None:
            raise ValueError("brain is required")
        if selection not in ("rarest", "tiered"):
            raise ValueError(f"unknown selection policy: {selection}")

        self.brain = brain
        self.source = source
        self.filter_input = filter_input
        self.selection = selection

        self._history_lock = threading.Lock()
        self._history: History[str] = History(memory)
        self._limit_lock = threading.Lock()
        self._time_limit = time_limit

    # --- live settings ---
    @property
    def memory(self) -> int:
        with self._history_lock:
            return self._history.length

    @memory.setter
    def memory(self, value: int) -> None:
        with self._history_lock:
            self._history = History(value)

    @property
    def time_limit(self) -> float:
        with self._limit_lock:
            return self._time_limit

    @time_limit.setter
    def time_limit(self, value: float) -> None:
        with self._limit_lock:
            self._time_limit = value

    def remember(self, text: str) -> bool:
        with self._history_lock:
            return self._history.add(text)

    def remembers(self, text: str) -> bool:
        with self._history_lock:
            return self._history.contains(text)

    # --- learning ---
    def _prepare(self, words: Words) -> List[str]:
        if words is None:
            raise ValueError("words is required")
        if isinstance(words, str):
            return words.split()
        if self.filter_input:
            return filter_words(words)
        return list(words)

    def add(self, sentence: Words, source: Optional[str] = None) -> None:
        """Learn a sentence, remembering it so it isn't parroted straight back."""
        words = self._prepare(sentence)
        self.remember(" ".join(words))
        self.brain.add_sentence(words, source)

    def remove(self, sentence: Words) -> None:
        self.brain.remove_sentence(self._prepare(sentence))

    # --- replies ---
    def build_response(self, message: Words) -> Sentence:
        """
        Build a reply to ``message``.

        The message's words, punctuation trimmed, seed generation rarest
        first. Falls back to a random sentence when no new candidate could
        be built in time.
        """
        words = self._prepare(message)
        self.remember(" ".join(words))

        seeds = [trim_punctuation(w) for w in self.order_by_rarity(words)]
        responses = self._build(seeds, memory_filter=True)
        if not responses:
            logger.debug("[Frontend] No candidates survived, falling back to a random sentence")
            return self.build_random()

        if self.selection == "tiered":
            response = select(responses)
        else:
            response = most_rare(responses)
        self.remember(response.content)
        return response

    def build_random(self) -> Sentence:
        sentence = self.brain.build_random_sentence(self.source) or ""
        return Sentence(sentence, self.sentence_rarity(sentence))

    def build(self, seeds: Iterable[str], memory_filter: bool = False) -> List[Sentence]:
        """Time-budgeted candidates for ``seeds``, in generation order."""
        if seeds is None:
            raise ValueError("seeds is required")
        return self._build(seeds, memory_filter)

    def _build(self, seeds: Iterable[str], memory_filter: bool) -> List[Sentence]:
        responses = self._collect(seeds)
        if memory_filter:
            with self._history_lock:
                responses = [s for s in responses if not self._history.contains(s.content)]
        return responses

    def _collect(self, seeds: Iterable[str]) -> List[Sentence]:
        start = time.monotonic()
        limit = self.time_limit

        sentences = self.brain.build_sentences(seeds, self.source)
        collected: List[Sentence] = []
        try:
            for sentence in self._with_rarity(sentences):
                collected.append(sentence)
                if limit > 0 and time.monotonic() - start > limit:
                    logger.debug(
                        f"[Frontend] Time limit of {limit}s reached after {len(collected)} candidate(s)"
                    )
                    break
        finally:
            sentences.close()

        logger.debug(f"[Frontend] Collected {len(collected)} candidate(s)")
        return collected

    def _with_rarity(self, sentences: Iterable[str]) -> Iterator[Sentence]:
        for sentence in sentences:
            yield Sentence(sentence, self.sentence_rarity(sentence))

    # --- rarity ---
    def sentence_rarity(self, sentence: str) -> float:
        return calculate_rarity(self.brain.word_count(sentence.split()))

    def order_by_rarity(self, words: Sequence[str]) -> List[str]:
        """Copy of ``words`` ordered by ascending corpus count (rarest first)."""
        counts = self.brain.word_count(words)
        return [w for _, w in sorted(zip(counts, words), key=lambda pair: pair[0])]

    def get_seeds(self, message: Words, count: int) -> List[str]:
        """Up to ``count`` of the rarest known words of ``message``, punctuation trimmed."""
        return get_seeds(self._prepare(message), count, self.brain.word_count)
