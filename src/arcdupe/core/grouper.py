"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Groups scanned archives by size and by canonical name key.
One pass, one dict insert per entry: never compares names pairwise.
"""

import logging
from collections import defaultdict
from itertools import combinations
from typing import Any, Callable, Dict, List

from arcdupe.core.models import ArchiveEntry, SimilarityGroup, SimilarityPair, SizeGroup
from arcdupe.core.normalizer import normalize_key
from arcdupe.core.similarity import score_normalized
from arcdupe.core.volumes import is_multi_volume_set, is_same_set

logger = logging.getLogger(__name__)


class EntryGrouper:
    """Canonical clustering engine plus same-size grouping."""

    def group_by_size(self, entries: List[ArchiveEntry]) -> Dict[int, List[ArchiveEntry]]:
        """Groups entries by their size."""
        return self._group_by(entries, lambda e: e.size)

    def group_by_key(self, entries: List[ArchiveEntry]) -> Dict[str, List[ArchiveEntry]]:
        """Groups entries by canonical name key. The "" key collects purely numeric names."""
        return self._group_by(entries, lambda e: normalize_key(e.name))

    def cluster(self, entries: List[ArchiveEntry]) -> List[SimilarityGroup]:
        """
        Clusters entries by canonical key.

        Buckets made of one split archive's volumes are suppressed. Surviving
        groups are ordered largest first, then by key; members keep input order.
        """
        buckets = self.group_by_key(entries)
        groups = []
        suppressed = 0

        for key in sorted(buckets, key=lambda k: (-len(buckets[k]), k)):
            members = buckets[key]
            if is_multi_volume_set(e.name for e in members):
                suppressed += 1
                continue
            groups.append(SimilarityGroup(base_name=key, members=members))

        logger.debug(
            f"Clustered {len(entries)} entries into {len(groups)} groups "
            f"({suppressed} multi-volume buckets suppressed)"
        )
        return groups

    def analyze_size_groups(self, entries: List[ArchiveEntry], threshold: float) -> List[SizeGroup]:
        """
        For each same-size bucket, keeps the name pairs scoring at least `threshold`.
        Volumes of one split archive are never paired. Largest size first.
        """
        result = []
        for size, members in sorted(self.group_by_size(entries).items(), key=lambda kv: -kv[0]):
            pairs = []
            for a, b in combinations(members, 2):
                if is_same_set(a.name, b.name):
                    continue
                value = score_normalized(normalize_key(a.name), normalize_key(b.name))
                if value >= threshold:
                    pairs.append(SimilarityPair(a, b, value))
            result.append(SizeGroup(size=size, members=members, pairs=pairs))
        return result

    @staticmethod
    def _group_by(entries: List[ArchiveEntry], key_func: Callable[[ArchiveEntry], Any]) -> Dict[Any, List[ArchiveEntry]]:
        """
        Helper method to group entries by any computed key.
        Args:
            entries: List of entries to group
            key_func: Function that computes a hashable key from an ArchiveEntry
        Returns:
            Dict[key, List[ArchiveEntry]] holding only buckets of 2+ entries
        """
        groups = defaultdict(list)
        for entry in entries:
            groups[key_func(entry)].append(entry)

        return {key: group for key, group in groups.items() if len(group) >= 2}
