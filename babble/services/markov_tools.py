"""
Text helpers shared by the chain store and the frontend.

- Tokenization of a sentence into overlapping chain windows
- Word filtering and punctuation trimming
- Word normalization for the word-count index
- Foul-play (repetition spam) detection
"""
from __future__ import annotations

import unicodedata
from typing import Iterable, List, Optional, Sequence

# Joins the words of a chain window; words never contain whitespace.
CHAIN_DELIMITER = " "


def tokenize_sentence(words: Sequence[str], order: int) -> List[List[Optional[str]]]:
    """
    Split a sentence into overlapping windows of ``order + 1`` words.

    Window ``i`` holds ``words[i:i + order + 1]``. The final slot of the last
    window runs past the end of the sentence and is ``None``, marking the
    sentence terminator.

    Args:
        words: Words of the sentence
        order: Chain order (N)

    Returns:
        List of windows, empty when the sentence is shorter than ``order``
    """
    if order < 1:
        raise ValueError(f"order must be 1 or larger, got {order}")
    if len(words) < order:
        return []

    windows = []
    for i in range(len(words) - order + 1):
        window: List[Optional[str]] = []
        for j in range(order + 1):
            window.append(words[i + j] if i + j < len(words) else None)
        windows.append(window)
    return windows


def join_chain(words: Iterable[str]) -> str:
    return CHAIN_DELIMITER.join(words)


def split_chain(chain: str) -> List[str]:
    return chain.split(CHAIN_DELIMITER)


def filter_words(words: Iterable[Optional[str]]) -> List[str]:
    """Trim every word and drop the ones that are None or blank."""
    cleaned = []
    for word in words:
        if word is None:
            continue
        trimmed = word.strip()
        if trimmed:
            cleaned.append(trimmed)
    return cleaned


def _is_punctuation(char: str) -> bool:
    return unicodedata.category(char).startswith("P")


def trim_punctuation(word: str) -> str:
    """Strip leading and trailing punctuation."""
    start, end = 0, len(word)
    while start < end and _is_punctuation(word[start]):
        start += 1
    while end > start and _is_punctuation(word[end - 1]):
        end -= 1
    return word[start:end]


def normalize_word(word: str) -> str:
    """
    Key used by the word-count index.

    Whitespace and punctuation are stripped and the result is case-folded.
    A word made of punctuation only is kept as-is (minus whitespace).
    """
    stripped = word.strip()
    trimmed = trim_punctuation(stripped).strip()
    if not trimmed:
        return stripped
    return trimmed.casefold()


def foul_play(words: Sequence[str], consecutive_threshold: int, total_threshold: int) -> bool:
    """
    Detect repetition spam.

    Returns True when any word (case-insensitive) occurs more than
    ``total_threshold`` times in the sentence, or more than
    ``consecutive_threshold`` times in a row.
    """
    folded = [w.casefold() for w in words]
    for i, to_check in enumerate(folded[:-1]):
        occurrences = 1
        consecutive = 1
        for other in folded[i + 1:]:
            if other == to_check:
                occurrences += 1
                consecutive += 1
                if occurrences > total_threshold or consecutive > consecutive_threshold:
                    return True
            else:
                consecutive = 0
    return False
