"""
Seed and sentence selection policies.

- get_seeds: rarest words of a message, used to seed generation
- select: random pick from the middle rarity band of a batch
- select_random / most_rare / least_rare: simpler policies
"""
from __future__ import annotations

import random
from typing import Callable, List, Sequence

from .markov_tools import trim_punctuation
from .rarity import Sentence, sentence_key

# Minimum width of a rarity band before select() restricts itself to it.
BAND_THRESHOLD = 7


def get_seeds(
    words: Sequence[str],
    count: int,
    word_count: Callable[[Sequence[str]], List[int]],
) -> List[str]:
    """
    Pick up to ``count`` seed words, rarest first.

    Words are ordered by ascending corpus count; unseen words and words that
    are pure punctuation are dropped, and punctuation is trimmed off the rest.

    Args:
        words: Words of a message
        count: Maximum number of seeds
        word_count: Callable returning corpus counts for a list of words

    Returns:
        Trimmed seed words in rarity order
    """
    if words is None:
        raise ValueError("words is required")
    if count <= 0:
        raise ValueError(f"count must be larger than 0, got {count}")

    copy = list(words)
    counts = word_count(copy)
    ranked = sorted(zip(counts, copy), key=lambda pair: pair[0])

    seeds = []
    for wc, word in ranked:
        if len(seeds) >= count:
            break
        if wc <= 0:
            continue
        trimmed = trim_punctuation(word)
        if trimmed:
            seeds.append(trimmed)
    return seeds


def _require_sentences(sentences: Sequence[Sentence]) -> None:
    if sentences is None:
        raise ValueError("sentences is required")
    if len(sentences) == 0:
        raise ValueError("sentences must be non-empty")


def sort_by_rarity(sentences: List[Sentence]) -> None:
    """Sort in place, least rare first."""
    if sentences is None:
        raise ValueError("sentences is required")
    sentences.sort(key=sentence_key)


def select(sentences: List[Sentence]) -> Sentence:
    """
    Randomly pick a sentence, avoiding the rarest third when possible.

    The rarest sentences tend to be the ones containing typos. When the
    band between 1/2 and 2/3 of the sorted batch is wide enough the pick
    comes from there, else from the band between 1/3 and 2/3, else from
    the whole batch. Sorts ``sentences`` in place.
    """
    _require_sentences(sentences)
    sort_by_rarity(sentences)

    n = len(sentences)
    half = (n - 1) // 2
    third = (n - 1) // 3
    two_thirds = third * 2

    if two_thirds - half >= BAND_THRESHOLD:
        index = random.randint(half, two_thirds)
    elif two_thirds - third >= BAND_THRESHOLD:
        index = random.randint(third, two_thirds)
    else:
        index = random.randrange(n)
    return sentences[index]


def select_random(sentences: Sequence[Sentence]) -> Sentence:
    _require_sentences(sentences)
    return random.choice(sentences)


def most_rare(sentences: Sequence[Sentence]) -> Sentence:
    """Highest-rarity sentence; the first one wins a tie."""
    _require_sentences(sentences)
    return max(sentences, key=sentence_key)


def least_rare(sentences: Sequence[Sentence]) -> Sentence:
    _require_sentences(sentences)
    return min(sentences, key=sentence_key)
