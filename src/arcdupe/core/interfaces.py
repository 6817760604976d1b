"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the analysis engine.
These protocols enforce structural typing using Python's `typing.Protocol` so
components can be swapped (e.g. a disabled cache, a fake reader in tests)
without inheritance.

Key Components:
---------------
- HashAlgorithm: Interface for hash functions used to key ignored groups.
- ArchiveReader: Read-only access to one container format (ZIP/RAR/7Z).
- ContentCache: Persistent memoization store injected into every component.
- VisualHashLookup: Read-only view of perceptual hashes used by clustering.
- ProgressCallback: Signature of progress reporting hooks.
"""

from typing import Callable, Dict, Iterable, List, Optional, Protocol

from arcdupe.core.models import PreviewCandidate, SimilarityGroup


# ===== Type aliases =====

ProgressCallback = Callable[[str, float], None]
"""(stage name, percent complete in [0, 100]) -> None"""


# ===== Interfaces =====

class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions (xxHash, SHA-256)
    without affecting the code that derives keys from them.
    """

    @staticmethod
    def hexdigest(data: bytes) -> str:
        """Computes the hex digest of the provided byte data."""
        ...


class ArchiveReader(Protocol):
    """
    Interface for reading one archive container format.

    Implementations raise CorruptArchiveError for any failure of the
    underlying library and EntryNotFoundError for a missing member.
    """

    def list_files(self, archive_path: str) -> List[PreviewCandidate]:
        """List every non-directory member with its uncompressed size."""
        ...

    def read(self, archive_path: str, internal_path: str) -> bytes:
        """Read a single member."""
        ...

    def read_all(self, archive_path: str) -> Dict[str, bytes]:
        """Read every non-directory member."""
        ...


class ContentCache(Protocol):
    """
    Interface for the persistent key/value store.

    Four logical tables: scan results keyed by fingerprint, preview paths and
    perceptual hashes keyed by (path, modification tag), and the set of
    ignored group hashes. Lookups whose stored tag differs from the current
    one are misses.
    """

    @property
    def enabled(self) -> bool:
        ...

    def get_results(self, fingerprint: str) -> Optional[List[SimilarityGroup]]:
        ...

    def put_results(self, fingerprint: str, groups: List[SimilarityGroup]) -> None:
        ...

    def get_preview_path(self, path: str, mod_time_tag: str) -> Optional[str]:
        ...

    def put_preview_path(self, path: str, mod_time_tag: str, internal_path: str) -> None:
        ...

    def get_visual_hash(self, path: str, mod_time_tag: str) -> Optional[int]:
        ...

    def put_visual_hash(self, path: str, mod_time_tag: str, phash: int) -> None:
        ...

    def add_ignored_group(self, paths: Iterable[str]) -> str:
        ...

    def is_group_ignored(self, paths: Iterable[str]) -> bool:
        ...

    def reset(self) -> None:
        ...

    def close(self) -> None:
        ...


class VisualHashLookup(Protocol):
    """Read side of the visual hash table; what visual clustering consumes."""

    def get_visual_hash(self, path: str, mod_time_tag: str) -> Optional[int]:
        ...
