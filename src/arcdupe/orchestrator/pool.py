"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

orchestrator/pool.py
Bounded worker pool and batched progress reporting.

WorkerPool runs one job per item on a fixed number of threads and returns a
JobResult per item in input order, so results never depend on the pool size.
A job that raises is logged and recorded as an error result; sibling jobs and
completed results are unaffected.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

from arcdupe.config import DEFAULT_PROGRESS_INTERVAL
from arcdupe.core.interfaces import ProgressCallback
from arcdupe.core.models import JobResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V")


class ProgressReporter:
    """
    Thread-safe progress counter that calls back once per `interval` items.

    Reported percentages never decrease, and the last report is always 100.
    """

    def __init__(
            self,
            callback: Optional[ProgressCallback],
            total: int,
            interval: int = DEFAULT_PROGRESS_INTERVAL,
            stage: str = ""
    ):
        if interval < 1:
            raise ValueError("Progress interval must be >= 1")
        self.callback = callback
        self.total = total
        self.interval = interval
        self.stage = stage
        self._lock = threading.Lock()
        self._processed = 0
        self._last_reported = 0
        self._finished = False

    @property
    def processed(self) -> int:
        return self._processed

    def _percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return min(100.0, self._processed / self.total * 100.0)

    def _emit(self, percent: float) -> None:
        # Called with the lock held so reports are delivered in order
        if self.callback:
            self.callback(self.stage, percent)

    def advance(self, count: int = 1) -> None:
        with self._lock:
            if self._finished:
                return
            self._processed += count
            if self._processed >= self.total:
                self._finished = True
                self._emit(100.0)
            elif self._processed - self._last_reported >= self.interval:
                self._last_reported = self._processed
                self._emit(self._percent())

    def finish(self) -> None:
        """Reports 100% unless that was already reported."""
        with self._lock:
            if not self._finished:
                self._finished = True
                self._emit(100.0)


class WorkerPool:
    """Fixed-size thread pool draining one job per item."""

    def __init__(self, max_workers: int = 4):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers

    def run(
            self,
            func: Callable[[T], V],
            items: Iterable[T],
            progress: Optional[ProgressReporter] = None
    ) -> List[JobResult[V]]:
        """
        Runs func(item) for every item.

        Returns:
            One JobResult per item, in input order.
        """
        items = list(items)

        def job(item: T) -> JobResult[V]:
            try:
                return JobResult(item=item, value=func(item))
            except Exception as e:
                logger.warning(f"Job failed for {item!r}: {e}", exc_info=True)
                return JobResult(item=item, error=e)
            finally:
                if progress:
                    progress.advance()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="arcdupe") as executor:
            futures = [executor.submit(job, item) for item in items]
            results = [future.result() for future in futures]

        if progress:
            progress.finish()

        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.info(f"{failed}/{len(results)} jobs failed")
        return results
