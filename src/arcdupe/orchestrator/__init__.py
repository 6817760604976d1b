"""Bounded worker pool, progress reporting, the shared report and the visual hashing pass."""

from .pool import WorkerPool, ProgressReporter
from .report import AnalysisReport, AnalysisStatus, ReportSnapshot
from .visual_pass import VisualHashPass, PassHashLookup

__all__ = [
    "WorkerPool",
    "ProgressReporter",
    "AnalysisReport",
    "AnalysisStatus",
    "ReportSnapshot",
    "VisualHashPass",
    "PassHashLookup",
]
