"""
SQLite-backed chain store.

Persists three tables:
- Chains: unique (backward, chain, forward) rows, one per observed window
- WordCount: normalized word -> occurrence count
- Sources / SrcMap: many-to-many attribution of chain rows to sources

Random picks are delegated to SQLite's ``ORDER BY RANDOM()`` so that a
continuation is drawn uniformly among all matching rows.
"""
from __future__ import annotations

import logging
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from .local_sqlite import ThreadLocalSqlite
from .markov_tools import join_chain, normalize_word, tokenize_sentence

logger = logging.getLogger(__name__)


class ChainRow(NamedTuple):
    """A window of ``order`` words with its predecessor and successor ('' when absent)."""
    backward: str
    chain: str
    forward: str


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


_SCHEMA = """
CREATE TABLE IF NOT EXISTS Meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS Chains (
    id       INTEGER PRIMARY KEY,
    backward TEXT NOT NULL DEFAULT '',
    chain    TEXT NOT NULL,
    forward  TEXT NOT NULL DEFAULT '',
    UNIQUE(chain, backward, forward)
);
CREATE INDEX IF NOT EXISTS idx_chains_forward ON Chains(forward);

CREATE TABLE IF NOT EXISTS WordCount (
    word  TEXT PRIMARY KEY,
    count INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS Sources (
    id     INTEGER PRIMARY KEY,
    source TEXT UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS SrcMap (
    sId INTEGER NOT NULL REFERENCES Sources(id) ON DELETE CASCADE,
    cId INTEGER NOT NULL REFERENCES Chains(id) ON DELETE CASCADE,
    PRIMARY KEY (sId, cId)
);
CREATE INDEX IF NOT EXISTS idx_srcmap_chain ON SrcMap(cId);
"""

_SOURCE_JOIN = (
    "FROM Chains "
    "JOIN SrcMap ON SrcMap.cId = Chains.id "
    "JOIN Sources ON Sources.id = SrcMap.sId "
    "WHERE Sources.source = ?"
)


def escape_glob(text: str) -> str:
    """Escape GLOB metacharacters so ``text`` only matches itself."""
    return "".join(f"[{c}]" if c in "*?[" else c for c in text)


def sentence_rows(words: Sequence[str], order: int) -> List[ChainRow]:
    """Chain rows observed in one sentence, in sentence order."""
    rows = []
    for i, window in enumerate(tokenize_sentence(words, order)):
        rows.append(
            ChainRow(
                backward=words[i - 1] if i > 0 else "",
                chain=join_chain(window[:order]),
                forward=window[order] or "",
            )
        )
    return rows


class SqliteChainStore:
    """
    Persistent n-gram chain store.

    Safe to share between threads: each thread talks to SQLite through its
    own connection, and each write is one ``BEGIN IMMEDIATE`` transaction.
    """

    def __init__(self, path: str | Path, order: int = 2, idle_timeout: float = 600.0):
        """
        Open (or create) a chain store.

        Args:
            path: SQLite database file
            order: Chain order (N); fixed for the lifetime of the file
            idle_timeout: Seconds before an unused per-thread connection is closed
        """
        if order < 1:
            raise ValueError(f"order must be 1 or larger, got {order}")

        self._order = order
        self.db = ThreadLocalSqlite(path, idle_timeout=idle_timeout)
        self._bootstrap_schema()

    @property
    def order(self) -> int:
        return self._order

    def _bootstrap_schema(self) -> None:
        with self.db.connection() as conn:
            conn.executescript(_SCHEMA)
        with self.db.transaction() as conn:
            row = conn.execute("SELECT value FROM Meta WHERE key = 'order'").fetchone()
            if row is None:
                conn.execute("INSERT INTO Meta(key, value) VALUES ('order', ?)", (str(self._order),))
            elif int(row[0]) != self._order:
                raise ValueError(
                    f"{self.db.path} was created with order {row[0]}, not {self._order}"
                )

    def close(self) -> None:
        self.db.close()

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #
    def add_sentence(self, words: Sequence[str], source: Optional[str] = None) -> None:
        """
        Learn a sentence.

        Word counts, chain rows and source links are written in one
        transaction. Sentences shorter than the order are ignored.
        """
        if words is None:
            raise ValueError("words is required")
        words = list(words)
        if len(words) < self._order:
            return

        rows = sentence_rows(words, self._order)
        try:
            with self.db.transaction() as conn:
                source_id = self._register_source(conn, source) if source else None
                self._update_word_counts(conn, words)
                for row in rows:
                    conn.execute(
                        "INSERT OR IGNORE INTO Chains(backward, chain, forward) VALUES (?, ?, ?)",
                        row,
                    )
                    if source_id is not None:
                        chain_id = self._chain_id(conn, row)
                        conn.execute(
                            "INSERT OR IGNORE INTO SrcMap(sId, cId) VALUES (?, ?)",
                            (source_id, chain_id),
                        )
        except sqlite3.Error:
            logger.error(f"[ChainStore] Failed to add sentence: {' '.join(words)!r}", exc_info=True)
            raise

    def remove_sentence(self, words: Sequence[str]) -> None:
        """Delete the chain rows of a sentence. Word counts are left untouched."""
        if words is None:
            raise ValueError("words is required")
        words = list(words)
        if len(words) < self._order:
            return

        rows = sentence_rows(words, self._order)
        try:
            with self.db.transaction() as conn:
                for row in rows:
                    conn.execute(
                        "DELETE FROM SrcMap WHERE cId IN "
                        "(SELECT id FROM Chains WHERE chain = ? AND backward = ? AND forward = ?)",
                        (row.chain, row.backward, row.forward),
                    )
                    conn.execute(
                        "DELETE FROM Chains WHERE chain = ? AND backward = ? AND forward = ?",
                        (row.chain, row.backward, row.forward),
                    )
        except sqlite3.Error:
            logger.error(f"[ChainStore] Failed to remove sentence: {' '.join(words)!r}", exc_info=True)
            raise

    @staticmethod
    def _register_source(conn: sqlite3.Connection, source: str) -> int:
        conn.execute("INSERT OR IGNORE INTO Sources(source) VALUES (?)", (source,))
        return conn.execute("SELECT id FROM Sources WHERE source = ?", (source,)).fetchone()[0]

    @staticmethod
    def _chain_id(conn: sqlite3.Connection, row: ChainRow) -> int:
        return conn.execute(
            "SELECT id FROM Chains WHERE chain = ? AND backward = ? AND forward = ?",
            (row.chain, row.backward, row.forward),
        ).fetchone()[0]

    @staticmethod
    def _update_word_counts(conn: sqlite3.Connection, words: Iterable[str]) -> None:
        for word in words:
            key = normalize_word(word)
            if not key:
                continue
            conn.execute(
                "INSERT INTO WordCount(word, count) VALUES (?, 1) "
                "ON CONFLICT(word) DO UPDATE SET count = count + 1",
                (key,),
            )

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def word_count(self, words: Iterable[Optional[str]]) -> List[int]:
        """
        Corpus counts, one per word and in the same order.

        Returns -1 for a None/blank word and 0 for a word never seen.
        """
        if words is None:
            raise ValueError("words is required")

        counts = []
        with self.db.connection() as conn:
            for word in words:
                if word is None or not word.strip():
                    counts.append(-1)
                    continue
                row = conn.execute(
                    "SELECT count FROM WordCount WHERE word = ?", (normalize_word(word),)
                ).fetchone()
                counts.append(row[0] if row else 0)
        return counts

    def lookup_random_continuation(
        self,
        chain: str,
        direction: Direction,
        source: Optional[str] = None,
    ) -> Optional[str]:
        """
        Pick a continuation word for ``chain`` uniformly among matching rows.

        Returns None when no row matches, and '' when the picked row ends
        (or starts) the sentence.
        """
        column = Direction(direction).value
        if source:
            sql = f"SELECT Chains.{column} {_SOURCE_JOIN} AND Chains.chain = ? ORDER BY RANDOM() LIMIT 1"
            params: Tuple[str, ...] = (source, chain)
        else:
            sql = f"SELECT {column} FROM Chains WHERE chain = ? ORDER BY RANDOM() LIMIT 1"
            params = (chain,)

        with self.db.connection() as conn:
            row = conn.execute(sql, params).fetchone()
        return row[0] if row else None

    def seed_rows(self, seed: str, source: Optional[str] = None) -> Iterator[ChainRow]:
        """
        Lazily yield, in random order, rows whose chain or forward word starts with ``seed``.

        Matching is case-sensitive, on the raw stored words.
        """
        if not seed:
            raise ValueError("seed can't be empty")
        pattern = escape_glob(seed) + "*"
        if source:
            sql = (
                f"SELECT Chains.backward, Chains.chain, Chains.forward {_SOURCE_JOIN} "
                "AND (Chains.chain GLOB ? OR Chains.forward GLOB ?) ORDER BY RANDOM()"
            )
            params: Tuple[str, ...] = (source, pattern, pattern)
        else:
            sql = (
                "SELECT backward, chain, forward FROM Chains "
                "WHERE chain GLOB ? OR forward GLOB ? ORDER BY RANDOM()"
            )
            params = (pattern, pattern)
        return self._stream(sql, params)

    def random_rows(self, source: Optional[str] = None) -> Iterator[ChainRow]:
        """Lazily yield every row (optionally only ``source``'s) in random order."""
        if source:
            sql = f"SELECT Chains.backward, Chains.chain, Chains.forward {_SOURCE_JOIN} ORDER BY RANDOM()"
            params: Tuple[str, ...] = (source,)
        else:
            sql = "SELECT backward, chain, forward FROM Chains ORDER BY RANDOM()"
            params = ()
        return self._stream(sql, params)

    def _stream(self, sql: str, params: Tuple[str, ...]) -> Iterator[ChainRow]:
        with self.db.connection() as conn:
            cursor = conn.execute(sql, params)
            try:
                for backward, chain, forward in cursor:
                    yield ChainRow(backward, chain, forward)
            finally:
                cursor.close()

    def chain_rows(self, source: Optional[str] = None) -> Set[ChainRow]:
        """Snapshot of stored rows, for inspection."""
        return set(self.random_rows(source))

    def sources(self) -> List[str]:
        with self.db.connection() as conn:
            return [r[0] for r in conn.execute("SELECT source FROM Sources ORDER BY source")]

    def has_source(self, source: str) -> bool:
        with self.db.connection() as conn:
            row = conn.execute("SELECT 1 FROM Sources WHERE source = ?", (source,)).fetchone()
        return row is not None
