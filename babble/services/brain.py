"""
Chain brain: the learn/generate surface used by the frontend and the API.

Wraps a SqliteChainStore with a SentenceBuilder and exposes lazy sentence
generators, seeded by word prefixes or drawn from random rows.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .chain_store import ChainRow, SqliteChainStore
from .sentence_builder import DEFAULT_MAX_WORDS, SentenceBuilder

logger = logging.getLogger(__name__)


class ChainBrain:
    """
    Persistent Markov chain brain.

    Usage:
        brain = ChainBrain("var/babble.sqlite3", order=2)
        brain.add_sentence("the cat sat".split(), source="alice")
        for sentence in brain.build_sentences(["cat"]):
            ...
    """

    def __init__(
        self,
        path: str | Path,
        order: int = 2,
        max_words: int = DEFAULT_MAX_WORDS,
        idle_timeout: float = 600.0,
    ):
        self.store = SqliteChainStore(path, order=order, idle_timeout=idle_timeout)
        self.builder = SentenceBuilder(self.store, self.store.order, max_words)

    @property
    def order(self) -> int:
        return self.store.order

    @property
    def max_words(self) -> int:
        return self.builder.max_words

    @max_words.setter
    def max_words(self, value: int) -> None:
        if value <= 0:
            raise ValueError(f"max_words must be larger than 0, got {value}")
        self.builder.max_words = value

    def close(self) -> None:
        self.store.close()

    # --- learning ---
    def add_sentence(self, words: Sequence[str], source: Optional[str] = None) -> None:
        self.store.add_sentence(words, source)

    def remove_sentence(self, words: Sequence[str]) -> None:
        self.store.remove_sentence(words)

    def word_count(self, words: Iterable[Optional[str]]) -> List[int]:
        return self.store.word_count(words)

    # --- generation ---
    def build_sentences(self, seeds: Iterable[str], source: Optional[str] = None) -> Iterator[str]:
        """
        Lazily build sentences around each seed in turn.

        Every row whose chain or forward word starts with the seed yields one
        sentence. Empty seeds are skipped.
        """
        if seeds is None:
            raise ValueError("seeds is required")
        return self._from_seeds(seeds, source)

    def _from_seeds(self, seeds: Iterable[str], source: Optional[str]) -> Iterator[str]:
        for seed in seeds:
            if not seed or not seed.strip():
                continue
            yield from self._build_all(self.store.seed_rows(seed, source), source)

    def build_random_sentences(self, source: Optional[str] = None) -> Iterator[str]:
        """Lazily build sentences from every row, in random order."""
        return self._build_all(self.store.random_rows(source), source)

    def build_random_sentence(self, source: Optional[str] = None) -> Optional[str]:
        """One random sentence, or None when nothing has been learned."""
        sentences = self.build_random_sentences(source)
        try:
            return next(sentences, None)
        finally:
            sentences.close()

    def _build_all(self, rows: Iterator[ChainRow], source: Optional[str]) -> Iterator[str]:
        try:
            for row in rows:
                if not row.chain:
                    logger.warning(f"[Brain] Skipping row with empty chain: {row!r}")
                    continue
                try:
                    sentence = self.builder.build(row, source)
                except ValueError as e:
                    logger.warning(f"[Brain] Skipping malformed row {row!r}: {e}")
                    continue
                yield sentence
        finally:
            rows.close()
