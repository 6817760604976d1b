"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

cache/store.py
Persistent content cache on SQLite, plus a disabled null object.

Tables:
  scan_cache         fingerprint -> serialized similarity groups (JSON)
  preview_cache      path -> (internal preview path, modification tag)
  visual_hash_cache  path -> (pHash as 16 hex digits, modification tag)
  ignored_groups     group hashes the operator marked "not a duplicate"

Rows keyed by modification tag are self-invalidating: a lookup whose stored
tag differs from the current one is a miss. Every write commits on its own,
so an interrupted pass leaves only whole rows behind. A store error after
opening (lock held elsewhere, full disk, I/O error) is logged once and the
cache falls back to missing every lookup and dropping every write.
"""

import json
import logging
import os
import sqlite3
import threading
from typing import Iterable, List, Optional

from arcdupe.cache.keys import group_hash
from arcdupe.core.interfaces import ContentCache
from arcdupe.core.models import SimilarityGroup
from arcdupe.errors import CacheUnavailableError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS scan_cache(
  fingerprint  TEXT PRIMARY KEY,
  results_json TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS preview_cache(
  path          TEXT PRIMARY KEY,
  internal_path TEXT NOT NULL,
  mod_time      TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS visual_hash_cache(
  path     TEXT PRIMARY KEY,
  phash    TEXT NOT NULL,
  mod_time TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS ignored_groups(
  group_hash TEXT PRIMARY KEY
);
"""

_TABLES = ("scan_cache", "preview_cache", "visual_hash_cache", "ignored_groups")


class SqliteContentCache(ContentCache):
    """
    Thread-safe SQLite store shared by every component of one analysis.
    A single connection is used from many worker threads, serialized by one lock.
    """

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self._lock = threading.Lock()
        self._failed = False
        try:
            if os.path.dirname(db_path):
                os.makedirs(os.path.dirname(db_path), exist_ok=True)
            self.conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.executescript(_SCHEMA)
            self.conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise CacheUnavailableError(f"Cannot open cache at {db_path}: {e}") from e

    @property
    def enabled(self) -> bool:
        return not self._failed

    def _degrade(self, error: sqlite3.Error) -> None:
        # Called with the lock held
        self._failed = True
        logger.warning(f"Cache at {self.db_path} failed: {error}; continuing without cache")

    def _fetch_one(self, query: str, params: tuple):
        with self._lock:
            if self._failed:
                return None
            try:
                return self.conn.execute(query, params).fetchone()
            except sqlite3.Error as e:
                self._degrade(e)
                return None

    def _write(self, query: str, params: tuple) -> None:
        with self._lock:
            if self._failed:
                return
            try:
                with self.conn:  # commits, or rolls back on error
                    self.conn.execute(query, params)
            except sqlite3.Error as e:
                self._degrade(e)

    # ===== Scan results =====

    def get_results(self, fingerprint: str) -> Optional[List[SimilarityGroup]]:
        row = self._fetch_one("SELECT results_json FROM scan_cache WHERE fingerprint=?", (fingerprint,))
        if row is None:
            return None
        try:
            return [SimilarityGroup.from_dict(item) for item in json.loads(row[0])]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable scan cache row {fingerprint[:12]}: {e}")
            return None

    def put_results(self, fingerprint: str, groups: List[SimilarityGroup]) -> None:
        payload = json.dumps([group.to_dict() for group in groups])
        self._write(
            "INSERT OR REPLACE INTO scan_cache(fingerprint, results_json) VALUES(?, ?)",
            (fingerprint, payload),
        )

    # ===== Preview paths =====

    def get_preview_path(self, path: str, mod_time_tag: str) -> Optional[str]:
        row = self._fetch_one("SELECT internal_path, mod_time FROM preview_cache WHERE path=?", (path,))
        if row is None or row[1] != mod_time_tag:
            return None
        return row[0]

    def put_preview_path(self, path: str, mod_time_tag: str, internal_path: str) -> None:
        self._write(
            "INSERT OR REPLACE INTO preview_cache(path, internal_path, mod_time) VALUES(?, ?, ?)",
            (path, internal_path, mod_time_tag),
        )

    # ===== Visual hashes =====

    def get_visual_hash(self, path: str, mod_time_tag: str) -> Optional[int]:
        row = self._fetch_one("SELECT phash, mod_time FROM visual_hash_cache WHERE path=?", (path,))
        if row is None or row[1] != mod_time_tag:
            return None
        return int(row[0], 16)

    def put_visual_hash(self, path: str, mod_time_tag: str, phash: int) -> None:
        # Hex text: SQLite integers are signed and a 64-bit hash may not fit
        self._write(
            "INSERT OR REPLACE INTO visual_hash_cache(path, phash, mod_time) VALUES(?, ?, ?)",
            (path, f"{phash:016x}", mod_time_tag),
        )

    # ===== Ignored groups =====

    def add_ignored_group(self, paths: Iterable[str]) -> str:
        key = group_hash(paths)
        self._write("INSERT OR IGNORE INTO ignored_groups(group_hash) VALUES(?)", (key,))
        return key

    def is_group_ignored(self, paths: Iterable[str]) -> bool:
        row = self._fetch_one("SELECT 1 FROM ignored_groups WHERE group_hash=?", (group_hash(paths),))
        return row is not None

    # ===== Lifecycle =====

    def reset(self) -> None:
        """Drops every cached row, ignored groups included."""
        with self._lock:
            if self._failed:
                return
            try:
                with self.conn:
                    for table in _TABLES:
                        self.conn.execute(f"DELETE FROM {table}")
            except sqlite3.Error as e:
                self._degrade(e)

    def close(self) -> None:
        with self._lock:
            try:
                self.conn.commit()
            except sqlite3.Error as e:
                logger.warning(f"Final commit of cache at {self.db_path} failed: {e}")
            finally:
                self.conn.close()


class DisabledCache(ContentCache):
    """Null object used when the store cannot be opened: every lookup misses, writes are dropped."""

    @property
    def enabled(self) -> bool:
        return False

    def get_results(self, fingerprint: str) -> Optional[List[SimilarityGroup]]:
        return None

    def put_results(self, fingerprint: str, groups: List[SimilarityGroup]) -> None:
        pass

    def get_preview_path(self, path: str, mod_time_tag: str) -> Optional[str]:
        return None

    def put_preview_path(self, path: str, mod_time_tag: str, internal_path: str) -> None:
        pass

    def get_visual_hash(self, path: str, mod_time_tag: str) -> Optional[int]:
        return None

    def put_visual_hash(self, path: str, mod_time_tag: str, phash: int) -> None:
        pass

    def add_ignored_group(self, paths: Iterable[str]) -> str:
        return group_hash(paths)

    def is_group_ignored(self, paths: Iterable[str]) -> bool:
        return False

    def reset(self) -> None:
        pass

    def close(self) -> None:
        pass


def open_cache(db_path: Optional[str]) -> ContentCache:
    """
    Opens the persistent cache, degrading to DisabledCache when it is unavailable.
    The failure is logged once here and never again per operation.
    """
    if not db_path:
        logger.info("Content cache disabled")
        return DisabledCache()
    try:
        return SqliteContentCache(db_path)
    except CacheUnavailableError as e:
        logger.warning(f"{e}; continuing without cache")
        return DisabledCache()
