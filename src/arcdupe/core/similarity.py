"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/similarity.py
Fuzzy name similarity scoring.

Score = 0.5 * Levenshtein + 0.3 * Jaro-Winkler + 0.2 * bigram Jaccard,
scaled to 0..100 and rounded to one decimal. Names are first reduced to their
canonical key (see normalizer.normalize_key), the same key clustering uses.
"""

import logging
from itertools import combinations
from typing import List, Set

import Levenshtein

from arcdupe.core.models import ArchiveEntry, SimilarityPair
from arcdupe.core.normalizer import normalize_key
from arcdupe.core.volumes import is_same_set

logger = logging.getLogger(__name__)

LEVENSHTEIN_WEIGHT = 0.5
JARO_WINKLER_WEIGHT = 0.3
BIGRAM_WEIGHT = 0.2

MAX_LENGTH_RATIO = 2.5


# ===== Metrics =====

def levenshtein_distance(s1: str, s2: str) -> int:
    """Edit distance (insert, delete, substitute)."""
    return Levenshtein.distance(s1, s2)


def levenshtein_similarity(s1: str, s2: str) -> float:
    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / max_len


def jaro_similarity(s1: str, s2: str) -> float:
    return Levenshtein.jaro(s1, s2)


def jaro_winkler_similarity(s1: str, s2: str, prefix_scale: float = 0.1) -> float:
    """Jaro similarity boosted by up to 4 shared leading characters."""
    return Levenshtein.jaro_winkler(s1, s2, prefix_weight=prefix_scale)


def _ngrams(text: str, n: int) -> Set[str]:
    # A string shorter than n counts as a single gram of itself
    if len(text) < n:
        return {text}
    return {text[i:i + n] for i in range(len(text) - n + 1)}


def bigram_similarity(s1: str, s2: str) -> float:
    """Jaccard index over the sets of character bigrams."""
    grams1 = _ngrams(s1, 2)
    grams2 = _ngrams(s2, 2)
    union = len(grams1 | grams2)
    if union == 0:
        return 0.0
    return len(grams1 & grams2) / union


# ===== Public scoring =====

def score_normalized(key_a: str, key_b: str) -> float:
    """Scores two already normalized keys."""
    if key_a == key_b:
        return 100.0
    # Order the pair so the result never depends on argument order
    first, second = sorted((key_a, key_b))
    combined = (
        levenshtein_similarity(first, second) * LEVENSHTEIN_WEIGHT
        + jaro_winkler_similarity(first, second) * JARO_WINKLER_WEIGHT
        + bigram_similarity(first, second) * BIGRAM_WEIGHT
    )
    return round(combined * 100, 1)


def score(name_a: str, name_b: str) -> float:
    """
    Similarity of two raw archive names on a 0..100 scale.

    Symmetric, and score(x, x) == 100 for every x.

    Examples:
        score("Report_v2.zip", "Report_v3.zip") → 100.0
    """
    return score_normalized(normalize_key(name_a), normalize_key(name_b))


def passes_length_gate(key_a: str, key_b: str, max_ratio: float = MAX_LENGTH_RATIO) -> bool:
    """
    Cheap prefilter for bulk pairwise search: rejects keys whose lengths
    differ by more than max_ratio:1. Never alters score().
    """
    len_a, len_b = len(key_a), len(key_b)
    if len_a == 0 or len_b == 0:
        return True
    ratio = len_a / len_b
    return 1.0 / max_ratio <= ratio <= max_ratio


def find_similar_pairs(
        entries: List[ArchiveEntry],
        threshold: float,
        different_sizes_only: bool = True
) -> List[SimilarityPair]:
    """
    Pairwise name search over a candidate list.

    Args:
        entries: Candidate archives.
        threshold: Minimum score (0..100) a pair must reach.
        different_sizes_only: Skip same-size pairs, which size grouping already covers.

    Returns:
        Pairs ordered by score descending, then by paths.
    """
    keyed = [(entry, normalize_key(entry.name)) for entry in entries]
    pairs = []
    gated = 0

    for (entry_a, key_a), (entry_b, key_b) in combinations(keyed, 2):
        if different_sizes_only and entry_a.size == entry_b.size:
            continue
        if not passes_length_gate(key_a, key_b):
            gated += 1
            continue
        if is_same_set(entry_a.name, entry_b.name):
            continue

        value = score_normalized(key_a, key_b)
        if value >= threshold:
            pairs.append(SimilarityPair(entry_a, entry_b, value))

    logger.debug(f"Pairwise search: {len(pairs)} pairs >= {threshold}, {gated} skipped by length gate")
    pairs.sort(key=lambda p: (-p.score, p.a.path, p.b.path))
    return pairs
