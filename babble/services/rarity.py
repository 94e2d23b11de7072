"""
Sentence rarity scoring.

Rarity is the number of known words divided by the sum of their corpus
counts: the rarer the words, the higher the score.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Sentence:
    """A generated sentence with its rarity score."""
    content: str
    rarity: float

    def __str__(self) -> str:
        return self.content


def calculate_rarity(counts: Iterable[int]) -> float:
    """
    Rarity of a sentence from its word counts.

    Negative counts (blank words) are ignored. Returns ``inf`` when every
    remaining word is unseen and ``-inf`` when no words remain.
    """
    length = 0
    total = 0
    for count in counts:
        if count >= 0:
            total += count
            length += 1

    if length == 0:
        return -math.inf
    if total == 0:
        return math.inf
    return length / total


def rarity_key(rarity: float) -> Tuple[int, float]:
    """Sort key ordering NaN < -inf < ... < inf."""
    if math.isnan(rarity):
        return (0, 0.0)
    return (1, rarity)


def sentence_key(sentence: Sentence) -> Tuple[int, float]:
    return rarity_key(sentence.rarity)
