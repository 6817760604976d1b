"""
arcdupe: duplicate and near-duplicate finder for 3D-asset archives.

Core features:
- O(N) canonical-name clustering with split-archive (multi-volume) suppression
- Fuzzy name scoring (Levenshtein + Jaro-Winkler + bigram Jaccard)
- Uniform ZIP/RAR/7Z access with a preview-selection heuristic
- STL geometry parsing and diffing
- Perceptual-hash clustering of archive previews
- SQLite content cache with ignore marks, degrading to no-cache mode

Directory walking, CLI and dashboard layers live outside this package.
"""

from importlib.metadata import PackageNotFoundError, version as _version

try:
    __version__ = _version("arcdupe")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from arcdupe.commands import AnalysisCommand
from arcdupe.config import AnalysisParams, AnalysisMode, default_cache_path
from arcdupe.core import ArchiveEntry, SimilarityGroup, SimilarityPair, MeshDiff, normalize_key, score
from arcdupe.cache import open_cache
from arcdupe.errors import ArcdupeError

__all__ = [
    "AnalysisCommand",
    "AnalysisParams",
    "AnalysisMode",
    "default_cache_path",
    "ArchiveEntry",
    "SimilarityGroup",
    "SimilarityPair",
    "MeshDiff",
    "normalize_key",
    "score",
    "open_cache",
    "ArcdupeError",
    "__version__",
]
