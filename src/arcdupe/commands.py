"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

commands.py
Unified command orchestrator for archive analysis.
This is the SINGLE entry point used by every outer layer (CLI, dashboard).
The scan itself is external: the command only consumes an ordered list of entries.
"""

import logging
from typing import List, Optional

from arcdupe.archive.extractor import ArchiveExtractor
from arcdupe.cache.keys import scan_fingerprint
from arcdupe.cache.store import open_cache
from arcdupe.config import AnalysisParams
from arcdupe.core.grouper import EntryGrouper
from arcdupe.core.interfaces import ContentCache, ProgressCallback
from arcdupe.core.models import ArchiveEntry
from arcdupe.core.similarity import find_similar_pairs
from arcdupe.orchestrator.pool import ProgressReporter, WorkerPool
from arcdupe.orchestrator.report import AnalysisReport, AnalysisStatus
from arcdupe.orchestrator.visual_pass import PassHashLookup, VisualHashPass
from arcdupe.visual.clustering import cluster_visual

logger = logging.getLogger(__name__)

STAGE_SIZE = "Size grouping"
STAGE_NAMES = "Name clustering"
STAGE_PAIRS = "Similar names"
STAGE_VISUAL = "Visual hashing"


class AnalysisCommand:
    """
    Orchestrates the analysis workflow:
    1. Group by size and pair similar names inside each size bucket
    2. Cluster by canonical name key (memoized per scan fingerprint)
    3. Search similar-name pairs across different sizes
    4. Hash previews on the worker pool and cluster them visually

    Usage:
        command = AnalysisCommand(params=AnalysisParams(threshold=80))
        report = command.execute(entries, progress_callback=print_progress)
        groups = report.snapshot().name_groups

    `command.report` is available as soon as execute() starts, so an outer
    layer may call `command.report.mark_ignored(paths)` mid-scan.
    """

    def __init__(
            self,
            cache: Optional[ContentCache] = None,
            params: Optional[AnalysisParams] = None,
            extractor: Optional[ArchiveExtractor] = None
    ):
        self.params = params or AnalysisParams()
        self.cache = cache if cache is not None else open_cache(self.params.cache_path)
        self.extractor = extractor or ArchiveExtractor()
        self.grouper = EntryGrouper()
        self.report = AnalysisReport(self.cache)

    def execute(
            self,
            entries: List[ArchiveEntry],
            progress_callback: Optional[ProgressCallback] = None
    ) -> AnalysisReport:
        """
        Run every pass the configured mode enables.

        Args:
            entries: Scanned archives, in scan order.
            progress_callback: (stage: str, percent: float) -> None

        Returns:
            The AnalysisReport, status DONE.
        """
        report = self.report
        report.set_status(AnalysisStatus.RUNNING)
        mode = self.params.mode
        threshold = self.params.threshold

        def on_progress(stage: str, percent: float) -> None:
            report.update_progress(stage, percent)
            if progress_callback:
                progress_callback(stage, percent)

        logger.info(f"Analyzing {len(entries)} archives (mode={mode.value}, threshold={threshold})")

        if mode.runs_size:
            report.set_size_groups(self.grouper.analyze_size_groups(entries, threshold))
            on_progress(STAGE_SIZE, 100.0)

        if mode.runs_names:
            report.set_name_groups(self._cluster_names(entries))
            on_progress(STAGE_NAMES, 100.0)

            report.set_similar_pairs(find_similar_pairs(entries, threshold))
            on_progress(STAGE_PAIRS, 100.0)

        if mode.runs_visual:
            report.set_visual_groups(self._cluster_visual(entries, on_progress))

        report.set_status(AnalysisStatus.DONE)
        return report

    def _cluster_names(self, entries: List[ArchiveEntry]):
        fingerprint = scan_fingerprint(entries)
        groups = self.cache.get_results(fingerprint)
        if groups is not None:
            logger.info(f"Name clusters loaded from cache ({len(groups)} groups)")
            return groups

        groups = self.grouper.cluster(entries)
        self.cache.put_results(fingerprint, groups)
        return groups

    def _cluster_visual(self, entries: List[ArchiveEntry], on_progress: ProgressCallback):
        pool = WorkerPool(self.params.workers)
        visual_pass = VisualHashPass(self.extractor, self.cache, pool, self.params.max_extractions)
        progress = ProgressReporter(on_progress, len(entries), self.params.progress_interval, STAGE_VISUAL)

        results = visual_pass.run(entries, progress)
        for result in results:
            if not result.ok:
                self.report.record_error(result.item.path, result.error)

        # Cached and freshly computed hashes both come back as pass results
        return cluster_visual(entries, PassHashLookup(results), threshold=self.params.threshold)
