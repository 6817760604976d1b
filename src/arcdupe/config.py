"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

config.py
Analysis parameters and per-user cache location.
"""

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

APP_DIR_NAME = "arcdupe"
CACHE_FILE_NAME = "cache.db"

DEFAULT_THRESHOLD = 70
DEFAULT_WORKERS = 4
DEFAULT_MAX_EXTRACTIONS = 2
DEFAULT_PROGRESS_INTERVAL = 50


def user_config_dir() -> str:
    """Per-user configuration directory of the current platform."""
    if sys.platform == "win32":
        base = os.environ.get("APPDATA")
        if base:
            return base
        return os.path.join(os.path.expanduser("~"), "AppData", "Roaming")
    if sys.platform == "darwin":
        return os.path.join(os.path.expanduser("~"), "Library", "Application Support")
    return os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")


def default_cache_path() -> str:
    return os.path.join(user_config_dir(), APP_DIR_NAME, CACHE_FILE_NAME)


class AnalysisMode(Enum):
    """Which passes an analysis runs."""
    ALL = "all"
    SIZE = "size"
    NAME = "name"
    VISUAL = "visual"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            AnalysisMode.ALL: "All passes",
            AnalysisMode.SIZE: "Size only",
            AnalysisMode.NAME: "Names only",
            AnalysisMode.VISUAL: "Visual only",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            AnalysisMode.ALL: "Size groups, name clusters, similar-name pairs and preview matches",
            AnalysisMode.SIZE: "Same-size archives and their similar-name pairs",
            AnalysisMode.NAME: "Canonical name clusters and similar-name pairs",
            AnalysisMode.VISUAL: "Archives whose preview images look alike",
        }
        return mapping.get(self, "")

    @property
    def runs_size(self) -> bool:
        return self in (AnalysisMode.ALL, AnalysisMode.SIZE)

    @property
    def runs_names(self) -> bool:
        return self in (AnalysisMode.ALL, AnalysisMode.NAME)

    @property
    def runs_visual(self) -> bool:
        return self in (AnalysisMode.ALL, AnalysisMode.VISUAL)


@dataclass
class AnalysisParams:
    """Parameters for one analysis run with validation."""
    threshold: int = DEFAULT_THRESHOLD
    workers: int = DEFAULT_WORKERS
    max_extractions: int = DEFAULT_MAX_EXTRACTIONS
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    mode: AnalysisMode = AnalysisMode.ALL
    cache_path: Optional[str] = field(default_factory=default_cache_path)  # None disables the cache

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not 0 <= self.threshold <= 100:
            raise ValueError("Threshold must be between 0 and 100")

        if self.workers < 1:
            raise ValueError("Worker count must be at least 1")

        if not 1 <= self.max_extractions <= self.workers:
            raise ValueError("Concurrent extractions must be between 1 and the worker count")

        if self.progress_interval < 1:
            raise ValueError("Progress interval must be at least 1")

    @staticmethod
    def from_human_readable(
            threshold_str: str = "",
            workers_str: str = "",
            mode_str: str = "",
            cache_path: Optional[str] = None,
            no_cache: bool = False,
    ) -> 'AnalysisParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing or dashboard form conversion.

        Examples:
            from_human_readable("85%", "8", "visual")
            from_human_readable(cache_path="/tmp/arcdupe.db")
            from_human_readable(no_cache=True)
        """
        threshold = int(threshold_str.strip().rstrip("%")) if threshold_str.strip() else DEFAULT_THRESHOLD
        workers = int(workers_str) if workers_str.strip() else DEFAULT_WORKERS
        mode = AnalysisMode(mode_str.strip().lower()) if mode_str.strip() else AnalysisMode.ALL

        return AnalysisParams(
            threshold=threshold,
            workers=workers,
            max_extractions=min(DEFAULT_MAX_EXTRACTIONS, workers),
            mode=mode,
            cache_path=None if no_cache else (cache_path or default_cache_path()),
        )

