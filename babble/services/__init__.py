"""
Markov chain brain services.
Persistent chain store, sentence building, rarity scoring and reply selection.
"""

from .brain import ChainBrain
from .chain_store import ChainRow, Direction, SqliteChainStore
from .frontend import BrainFrontend
from .history import History
from .rarity import Sentence, calculate_rarity

__all__ = [
    "ChainBrain",
    "ChainRow",
    "Direction",
    "SqliteChainStore",
    "BrainFrontend",
    "History",
    "Sentence",
    "calculate_rarity",
]
