"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

visual/clustering.py
Greedy seed-based clustering of archives by preview pHash.

Entries are visited in input order. Each unvisited entry seeds a cluster and
absorbs every later unvisited entry within `max_distance` bits of the seed.
Membership therefore depends on order when three hashes are pairwise close
but not all within the bound of the first seed; this approximation is
accepted. Only entries that already have a cached hash take part: this pass
never decodes images.
"""

import logging
from typing import List, Optional

from arcdupe.core.interfaces import VisualHashLookup
from arcdupe.core.models import ArchiveEntry, SimilarityGroup
from arcdupe.visual.phash import hamming_distance

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE = 8
GROUP_NAME_PREFIX = "Visual Match: "


def cluster_visual(
        entries: List[ArchiveEntry],
        cache: VisualHashLookup,
        threshold: Optional[int] = None,
        max_distance: int = DEFAULT_MAX_DISTANCE
) -> List[SimilarityGroup]:
    """
    Cluster entries by cached perceptual hash.

    Args:
        entries: Candidates, in the order that decides seeds.
        cache: Source of hashes; entries whose hash is missing or stale are skipped.
        threshold: Caller's name-similarity percentage. Logged only: it is not
            on the same scale as a bit distance.
        max_distance: Inclusive Hamming bound between a seed and a member.

    Returns:
        Groups of 2+ members named "Visual Match: <seed name>", in seed order.
    """
    hashed = []
    for entry in entries:
        value = cache.get_visual_hash(entry.path, entry.mod_time_tag)
        if value is not None:
            hashed.append((entry, value))

    logger.debug(
        f"Visual clustering: {len(hashed)}/{len(entries)} entries hashed, "
        f"max distance {max_distance} bits (name threshold {threshold})"
    )

    groups = []
    visited = set()

    for i, (seed, seed_hash) in enumerate(hashed):
        if seed.path in visited:
            continue
        visited.add(seed.path)
        members = [seed]

        for candidate, candidate_hash in hashed[i + 1:]:
            if candidate.path in visited:
                continue
            if hamming_distance(seed_hash, candidate_hash) <= max_distance:
                members.append(candidate)
                visited.add(candidate.path)

        if len(members) > 1:
            groups.append(SimilarityGroup(base_name=GROUP_NAME_PREFIX + seed.name, members=members))

    return groups
