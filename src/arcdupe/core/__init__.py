"""
Core analysis engine: normalization, grouping, fuzzy scoring, volumes and mesh diffing.

This package holds the pure, I/O-free foundation of arcdupe:
- normalize_key: canonical clustering key of an archive name
- EntryGrouper: O(N) size and canonical-key grouping with multi-volume suppression
- score / find_similar_pairs: weighted Levenshtein + Jaro-Winkler + bigram scoring
- detect_part / is_same_set: split-archive detection
- parse_mesh / compare_mesh: STL parsing and geometry classification
- Models: ArchiveEntry, SimilarityGroup, SimilarityPair, MeshInfo, MeshDiff, ...
"""

from .normalizer import normalize_key
from .grouper import EntryGrouper
from .similarity import score, score_normalized, find_similar_pairs, passes_length_gate
from .volumes import VolumePart, detect_part, is_same_set, is_multi_volume_set, blocks_auto_delete
from .mesh import is_mesh_file, parse_mesh, compare_mesh, compare_mesh_info, compare_archive_meshes
from .models import (
    ArchiveEntry, ArchiveKind, SimilarityGroup, SimilarityPair, SizeGroup, PreviewCandidate,
    ArchiveContentDiff, Bounds, MeshInfo, MeshDiff, MeshChange, MeshFileComparison,
    ContentStatus, VisualHash, IgnoredGroupMark, JobResult)

__all__ = [
    "normalize_key",
    "EntryGrouper",
    "score",
    "score_normalized",
    "find_similar_pairs",
    "passes_length_gate",
    "VolumePart",
    "detect_part",
    "is_same_set",
    "is_multi_volume_set",
    "blocks_auto_delete",
    "is_mesh_file",
    "parse_mesh",
    "compare_mesh",
    "compare_mesh_info",
    "compare_archive_meshes",
    "ArchiveEntry",
    "ArchiveKind",
    "SimilarityGroup",
    "SimilarityPair",
    "SizeGroup",
    "PreviewCandidate",
    "ArchiveContentDiff",
    "Bounds",
    "MeshInfo",
    "MeshDiff",
    "MeshChange",
    "MeshFileComparison",
    "ContentStatus",
    "VisualHash",
    "IgnoredGroupMark",
    "JobResult",
]
