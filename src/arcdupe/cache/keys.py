"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

cache/keys.py
Deterministic cache keys.

- scan_fingerprint: SHA-256 over (path, modification tag) of every entry,
  sorted by path, so directory iteration order never changes the key.
- group_hash: xxHash64 over the sorted, de-duplicated member paths, so an
  ignored group is recognised whatever order its members are found in.
"""

import hashlib
from typing import Iterable

import xxhash

from arcdupe.core.interfaces import HashAlgorithm
from arcdupe.core.models import ArchiveEntry

_FIELD_SEPARATOR = b"\x00"


class XXHashAlgorithmImpl(HashAlgorithm):
    """xxHash64: fast, non-cryptographic. Used for ignored-group keys."""

    @staticmethod
    def hexdigest(data: bytes) -> str:
        return xxhash.xxh64(data).hexdigest()


class Sha256AlgorithmImpl(HashAlgorithm):
    """SHA-256. Used for whole-scan fingerprints."""

    @staticmethod
    def hexdigest(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()


def _join(parts: Iterable[str]) -> bytes:
    return _FIELD_SEPARATOR.join(part.encode("utf-8") for part in parts)


def scan_fingerprint(entries: Iterable[ArchiveEntry], algorithm: HashAlgorithm = Sha256AlgorithmImpl) -> str:
    """Fingerprint of a whole scan; independent of input order."""
    ordered = sorted(entries, key=lambda e: e.path)
    fields = []
    for entry in ordered:
        fields.append(entry.path)
        fields.append(entry.mod_time_tag)
    return algorithm.hexdigest(_join(fields))


def group_hash(paths: Iterable[str], algorithm: HashAlgorithm = XXHashAlgorithmImpl) -> str:
    """Key of a member-path set; order and duplicates do not matter."""
    return algorithm.hexdigest(_join(sorted(set(paths))))
