"""
Shared pytest fixtures for chain brain tests.
"""
from pathlib import Path
from typing import List

import pytest

from babble.services.brain import ChainBrain
from babble.services.chain_store import SqliteChainStore
from babble.services.frontend import BrainFrontend


@pytest.fixture
def sample_corpus() -> List[str]:
    """Sample sentences to learn from."""
    return [
        "Hello friend how are you today",
        "The universe is full of amazing wonders",
        "I love exploring new planets and stars",
        "Would you like to play a game together",
        "Safety and discipline are very important",
        "Let me tell you about space exploration",
        "Friends always support each other",
        "The stars are beautiful tonight",
        "I feel happy when we talk together",
        "This is a wonderful adventure we share",
    ]


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Path for a fresh SQLite chain file."""
    return tmp_path / "chains.sqlite3"


@pytest.fixture
def store(db_path):
    """Empty order-2 chain store."""
    s = SqliteChainStore(db_path, order=2)
    yield s
    s.close()


@pytest.fixture
def brain(db_path):
    """Empty order-2 brain."""
    b = ChainBrain(db_path, order=2)
    yield b
    b.close()


@pytest.fixture
def trained_brain(brain, sample_corpus):
    """Order-2 brain that has learned sample_corpus."""
    for line in sample_corpus:
        brain.add_sentence(line.split())
    return brain


@pytest.fixture
def frontend(trained_brain) -> BrainFrontend:
    """Frontend over the trained brain with no time budget."""
    return BrainFrontend(trained_brain, memory=100, time_limit=0)


class CycleStore:
    """Lookup stub where 'a' is always followed by 'b' and 'b' by 'a'."""

    def __init__(self):
        self.calls = 0

    def lookup_random_continuation(self, chain, direction, source=None):
        self.calls += 1
        return "b" if chain.split()[-1] == "a" else "a"


@pytest.fixture
def cycle_store() -> CycleStore:
    return CycleStore()
