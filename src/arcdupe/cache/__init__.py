"""Persistent content cache (SQLite) and its deterministic keys."""

from .keys import scan_fingerprint, group_hash, XXHashAlgorithmImpl, Sha256AlgorithmImpl
from .store import SqliteContentCache, DisabledCache, open_cache

__all__ = [
    "scan_fingerprint",
    "group_hash",
    "XXHashAlgorithmImpl",
    "Sha256AlgorithmImpl",
    "SqliteContentCache",
    "DisabledCache",
    "open_cache",
]
