import os
import sqlite3
import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

FEED_CACHE_KEY = "ics_feed_json"


class Cache(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryCache:
    """Process-local cache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


class SQLiteCache:
    """SQLite-backed cache so the feed survives restarts."""

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time):
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._clock = clock
        self._lock = threading.Lock()
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS cache (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                expires_at REAL NOT NULL
            );
            """
        )
        self.conn.commit()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self.conn.execute(
                "SELECT value, expires_at FROM cache WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                return None
            if self._clock() >= row["expires_at"]:
                self.conn.execute("DELETE FROM cache WHERE key = ?", (key,))
                self.conn.commit()
                return None
            return row["value"]

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self.conn.execute(
                """
                INSERT OR REPLACE INTO cache (key, value, expires_at)
                VALUES (?, ?, ?)
                """,
                (key, value, self._clock() + ttl_seconds),
            )
            self.conn.commit()

    def remove(self, key: str) -> None:
        with self._lock:
            self.conn.execute("DELETE FROM cache WHERE key = ?", (key,))
            self.conn.commit()


def create_cache(backend: str, path: str) -> Cache:
    backend = backend.lower()
    if backend == "sqlite":
        return SQLiteCache(path)
    return InMemoryCache()
