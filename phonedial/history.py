# file: phonedial/history.py
"""
SQLite query history.

An append-only log of parse results with a capacity bound: after each append
the oldest entries beyond `capacity` are evicted. Entries can be deleted by id
or cleared all at once. Results are stored as JSON (`ParseResult.to_dict`) and
rebuilt against the country table on read.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from contextlib import closing, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from phonedial.core.parser import ParseResult
from phonedial.reference import CountryTable, default_country_table

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    id: str
    input: str
    result: ParseResult
    timestamp: int  # milliseconds since the epoch

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "input": self.input,
            "result": self.result.to_dict(),
            "timestamp": self.timestamp,
        }


class SQLiteHistoryStore:
    def __init__(
        self,
        path: Path,
        *,
        capacity: int = DEFAULT_CAPACITY,
        table: CountryTable | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.path = path
        self.capacity = capacity
        self._table = table
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back on error, always close."""

        with closing(self._connect()) as conn:
            with conn:
                yield conn

    def _init_db(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._session() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS history (
                    id TEXT PRIMARY KEY,
                    input TEXT NOT NULL,
                    result_json TEXT NOT NULL,
                    created_at INTEGER NOT NULL
                );
                """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_history_created_at ON history(created_at);"
            )

    def _row_to_entry(self, row: tuple[Any, ...]) -> HistoryEntry:
        entry_id, input_text, result_json, created_at = row
        table = self._table if self._table is not None else default_country_table()
        result = ParseResult.from_dict(json.loads(result_json), table=table)
        return HistoryEntry(
            id=str(entry_id), input=str(input_text), result=result, timestamp=int(created_at)
        )

    def append(self, result: ParseResult) -> HistoryEntry:
        """Store a result and evict entries beyond capacity."""

        now_ms = int(time.time() * 1000)
        result_json = json.dumps(result.to_dict(), ensure_ascii=False, separators=(",", ":"))
        with self._session() as conn:
            entry_id = str(now_ms)
            suffix = 0
            while conn.execute("SELECT 1 FROM history WHERE id = ?", (entry_id,)).fetchone():
                suffix += 1
                entry_id = f"{now_ms}-{suffix}"
            conn.execute(
                "INSERT INTO history(id, input, result_json, created_at) VALUES (?, ?, ?, ?)",
                (entry_id, result.original_input, result_json, now_ms),
            )
            cur = conn.execute(
                """
                DELETE FROM history WHERE rowid NOT IN (
                    SELECT rowid FROM history ORDER BY created_at DESC, rowid DESC LIMIT ?
                )
                """,
                (self.capacity,),
            )
            evicted = int(cur.rowcount or 0)
        if evicted:
            logger.debug("Evicted %d history entries (capacity %d)", evicted, self.capacity)
        return HistoryEntry(
            id=entry_id, input=result.original_input, result=result, timestamp=now_ms
        )

    def entries(self, limit: int | None = None) -> list[HistoryEntry]:
        """Return entries newest first."""

        sql = (
            "SELECT id, input, result_json, created_at FROM history "
            "ORDER BY created_at DESC, rowid DESC"
        )
        params: tuple[Any, ...] = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (int(limit),)
        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def get(self, entry_id: str) -> HistoryEntry | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT id, input, result_json, created_at FROM history WHERE id = ?",
                (entry_id,),
            ).fetchone()
        return self._row_to_entry(row) if row is not None else None

    def delete(self, entry_id: str) -> bool:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM history WHERE id = ?", (entry_id,))
            return bool(cur.rowcount)

    def clear(self) -> int:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM history")
            return int(cur.rowcount or 0)

    def __len__(self) -> int:
        with self._session() as conn:
            row = conn.execute("SELECT COUNT(*) FROM history").fetchone()
        return int(row[0]) if row else 0
