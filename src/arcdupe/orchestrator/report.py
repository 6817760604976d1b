"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

orchestrator/report.py
In-memory analysis report shared between the pipeline and its readers.

All state sits behind one lock. Readers take consistent copies through
snapshot(); the ignore action may arrive at any time, mid-scan included, and
prunes matching groups both now and from every later snapshot.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from arcdupe.cache.keys import group_hash
from arcdupe.core.interfaces import ContentCache
from arcdupe.core.models import IgnoredGroupMark, SimilarityGroup, SimilarityPair, SizeGroup

logger = logging.getLogger(__name__)


class AnalysisStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass
class ReportSnapshot:
    """Point-in-time copy of a report with ignored groups filtered out."""
    status: AnalysisStatus
    progress: Dict[str, float]
    size_groups: List[SizeGroup] = field(default_factory=list)
    name_groups: List[SimilarityGroup] = field(default_factory=list)
    similar_pairs: List[SimilarityPair] = field(default_factory=list)
    visual_groups: List[SimilarityGroup] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)


class AnalysisReport:
    """Mutex-guarded report built up by one AnalysisCommand run."""

    def __init__(self, cache: ContentCache):
        self.cache = cache
        self._lock = threading.Lock()
        self._status = AnalysisStatus.IDLE
        self._progress: Dict[str, float] = {}
        self._size_groups: List[SizeGroup] = []
        self._name_groups: List[SimilarityGroup] = []
        self._similar_pairs: List[SimilarityPair] = []
        self._visual_groups: List[SimilarityGroup] = []
        self._errors: List[Tuple[str, str]] = []
        self._ignored = set()

    # ===== Writers =====

    def set_status(self, status: AnalysisStatus) -> None:
        with self._lock:
            self._status = status

    def update_progress(self, stage: str, percent: float) -> None:
        """Stores the stage's progress; never moves backwards."""
        with self._lock:
            self._progress[stage] = max(self._progress.get(stage, 0.0), percent)

    def set_size_groups(self, groups: List[SizeGroup]) -> None:
        with self._lock:
            self._size_groups = list(groups)

    def set_name_groups(self, groups: List[SimilarityGroup]) -> None:
        with self._lock:
            self._name_groups = list(groups)

    def set_similar_pairs(self, pairs: List[SimilarityPair]) -> None:
        with self._lock:
            self._similar_pairs = list(pairs)

    def set_visual_groups(self, groups: List[SimilarityGroup]) -> None:
        with self._lock:
            self._visual_groups = list(groups)

    def record_error(self, path: str, error: BaseException) -> None:
        with self._lock:
            self._errors.append((path, f"{type(error).__name__}: {error}"))

    def mark_ignored(self, paths: Iterable[str]) -> IgnoredGroupMark:
        """
        Marks a member-path set as "not a duplicate".
        Persists the mark and prunes every in-memory group with exactly that membership.
        """
        paths = list(paths)
        key = self.cache.add_ignored_group(paths)
        with self._lock:
            self._ignored.add(key)
            self._size_groups = [g for g in self._size_groups if not self._is_ignored(g.member_paths())]
            self._name_groups = [g for g in self._name_groups if not self._is_ignored(g.member_paths())]
            self._similar_pairs = [p for p in self._similar_pairs if not self._is_ignored((p.a.path, p.b.path))]
            self._visual_groups = [g for g in self._visual_groups if not self._is_ignored(g.member_paths())]
        logger.info(f"Ignored group {key} ({len(paths)} members)")
        return IgnoredGroupMark(key)

    # ===== Readers =====

    def _is_ignored(self, paths: Iterable[str]) -> bool:
        paths = list(paths)
        return group_hash(paths) in self._ignored or self.cache.is_group_ignored(paths)

    def snapshot(self) -> ReportSnapshot:
        with self._lock:
            return ReportSnapshot(
                status=self._status,
                progress=dict(self._progress),
                size_groups=[g for g in self._size_groups if not self._is_ignored(g.member_paths())],
                name_groups=[g for g in self._name_groups if not self._is_ignored(g.member_paths())],
                similar_pairs=[p for p in self._similar_pairs if not self._is_ignored((p.a.path, p.b.path))],
                visual_groups=[g for g in self._visual_groups if not self._is_ignored(g.member_paths())],
                errors=list(self._errors),
            )
