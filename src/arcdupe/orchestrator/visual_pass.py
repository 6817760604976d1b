"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

orchestrator/visual_pass.py
Computes missing preview hashes for a set of archives.

Jobs run on the worker pool; archive reads additionally pass through a
bounded semaphore smaller than the pool, so only a few archives are open at
once while the remaining workers decode and hash. Each hash is committed as
soon as it is computed.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from arcdupe.archive.extractor import ArchiveExtractor
from arcdupe.archive.preview import is_image_file
from arcdupe.config import DEFAULT_MAX_EXTRACTIONS
from arcdupe.core.interfaces import ContentCache
from arcdupe.core.models import ArchiveEntry, JobResult, VisualHash
from arcdupe.orchestrator.pool import ProgressReporter, WorkerPool
from arcdupe.visual.phash import hash_image

logger = logging.getLogger(__name__)


class VisualHashPass:
    """Fills the visual hash cache for the given entries."""

    def __init__(
            self,
            extractor: ArchiveExtractor,
            cache: ContentCache,
            pool: WorkerPool,
            max_extractions: int = DEFAULT_MAX_EXTRACTIONS
    ):
        if max_extractions < 1:
            raise ValueError("max_extractions must be >= 1")
        self.extractor = extractor
        self.cache = cache
        self.pool = pool
        self.max_extractions = max_extractions
        self._extraction_slots = threading.BoundedSemaphore(max_extractions)

    def _resolve_preview(self, entry: ArchiveEntry) -> str:
        internal_path = self.cache.get_preview_path(entry.path, entry.mod_time_tag)
        if internal_path is None:
            with self._extraction_slots:
                internal_path = self.extractor.find_best_preview_path(entry.path)
            self.cache.put_preview_path(entry.path, entry.mod_time_tag, internal_path)
        return internal_path

    def hash_entry(self, entry: ArchiveEntry) -> Optional[VisualHash]:
        """
        Returns the entry's preview hash, computing and caching it when missing.
        None when the best preview is a video or model, which cannot be hashed.

        Raises:
            ExtractionError: archive unreadable or without a preview.
            HashError: preview bytes are not a decodable image.
        """
        cached = self.cache.get_visual_hash(entry.path, entry.mod_time_tag)
        if cached is not None:
            return VisualHash(entry.path, entry.mod_time_tag, cached)

        internal_path = self._resolve_preview(entry)
        if not is_image_file(internal_path):
            logger.debug(f"No image preview in {entry.name} (best is {internal_path})")
            return None

        with self._extraction_slots:
            data = self.extractor.read_one(entry.path, internal_path)

        phash = hash_image(data)
        self.cache.put_visual_hash(entry.path, entry.mod_time_tag, phash)
        return VisualHash(entry.path, entry.mod_time_tag, phash)

    def run(self, entries: List[ArchiveEntry], progress: Optional[ProgressReporter] = None) -> List[JobResult]:
        results = self.pool.run(self.hash_entry, entries, progress)
        hashed = sum(1 for r in results if r.ok and r.value is not None)
        logger.info(f"Visual hashing: {hashed}/{len(entries)} archives hashed")
        return results


class PassHashLookup:
    """
    Hashes produced by one pass, served under the cache's lookup interface.
    Clustering reads these rather than the store, so it works the same when
    the cache is disabled or fails mid-pass.
    """

    def __init__(self, results: List[JobResult]):
        self._hashes: Dict[Tuple[str, str], int] = {
            (r.value.path, r.value.mod_time_tag): r.value.hash
            for r in results
            if r.ok and r.value is not None
        }

    def get_visual_hash(self, path: str, mod_time_tag: str) -> Optional[int]:
        return self._hashes.get((path, mod_time_tag))
