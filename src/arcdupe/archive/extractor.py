"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

archive/extractor.py
Dispatching facade over the per-format archive readers.

Callers get exactly three outcomes from every method: a value,
UnsupportedFormatError (extension not handled, or no tool installed to read
it), or an ExtractionError subclass. Any other exception escaping a reader
library is logged with its traceback and converted to CorruptArchiveError,
so one malformed archive never stops a batch.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from arcdupe.archive.preview import filter_candidates, select_model, select_preview
from arcdupe.archive.readers import RarArchiveReader, SevenZipArchiveReader, ZipArchiveReader
from arcdupe.core.interfaces import ArchiveReader
from arcdupe.core.mesh import compare_archive_meshes
from arcdupe.core.models import ArchiveContentDiff, ArchiveKind, MeshFileComparison, PreviewCandidate
from arcdupe.errors import CorruptArchiveError, ExtractionError, NoPreviewError, UnsupportedFormatError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ArchiveExtractor:
    """Uniform read-only access to ZIP, RAR and 7Z archives."""

    def __init__(self, readers: Optional[Dict[ArchiveKind, ArchiveReader]] = None):
        self.readers = readers or {
            ArchiveKind.ZIP: ZipArchiveReader(),
            ArchiveKind.RAR: RarArchiveReader(),
            ArchiveKind.SEVEN_ZIP: SevenZipArchiveReader(),
        }

    def reader_for(self, archive_path: str) -> ArchiveReader:
        kind = ArchiveKind.from_path(archive_path)
        reader = self.readers.get(kind) if kind else None
        if reader is None:
            raise UnsupportedFormatError(f"Unsupported archive format: {archive_path}")
        return reader

    def _guarded(self, archive_path: str, operation: Callable[[ArchiveReader], R]) -> R:
        reader = self.reader_for(archive_path)
        try:
            return operation(reader)
        except (ExtractionError, UnsupportedFormatError):
            raise
        except Exception as e:
            logger.exception(f"Archive reader fault on {archive_path}")
            raise CorruptArchiveError(archive_path, f"Reader fault: {e}") from e

    # ===== Raw access =====

    def extract_all(self, archive_path: str) -> Dict[str, bytes]:
        """Every non-directory member keyed by its internal path."""
        return self._guarded(archive_path, lambda r: r.read_all(archive_path))

    def list_entries(self, archive_path: str) -> List[PreviewCandidate]:
        """Preview candidates only (images, videos, models), system folders excluded."""
        return filter_candidates(self._list_all(archive_path))

    def read_one(self, archive_path: str, internal_path: str) -> bytes:
        return self._guarded(archive_path, lambda r: r.read(archive_path, internal_path))

    def _list_all(self, archive_path: str) -> List[PreviewCandidate]:
        return self._guarded(archive_path, lambda r: r.list_files(archive_path))

    # ===== Heuristics =====

    def find_best_preview_path(self, archive_path: str) -> str:
        """
        Internal path of the file that best represents the archive visually.

        Raises:
            NoPreviewError: archive is readable but holds no image, video or model.
            CorruptArchiveError: archive could not be read.
        """
        best = select_preview(self.list_entries(archive_path))
        if best is None:
            raise NoPreviewError(archive_path, "No preview found")
        return best

    def find_best_model_path(self, archive_path: str) -> str:
        best = select_model(self.list_entries(archive_path))
        if best is None:
            raise NoPreviewError(archive_path, "No 3D model found")
        return best

    def find_preview(self, archive_path: str) -> Tuple[str, bytes]:
        """Resolves the best preview and reads it: (internal_path, data)."""
        internal_path = self.find_best_preview_path(archive_path)
        return internal_path, self.read_one(archive_path, internal_path)

    def compare_contents(self, path_a: str, path_b: str) -> ArchiveContentDiff:
        """Internal paths shared by both archives and those unique to each, sorted."""
        names_a = {f.internal_path for f in self._list_all(path_a)}
        names_b = {f.internal_path for f in self._list_all(path_b)}
        return ArchiveContentDiff(
            common=sorted(names_a & names_b),
            only_in_a=sorted(names_a - names_b),
            only_in_b=sorted(names_b - names_a),
        )

    def compare_meshes(self, path_a: str, path_b: str) -> List[MeshFileComparison]:
        """File-by-file diff of two archives, with a geometry diff for changed meshes."""
        return compare_archive_meshes(self.extract_all(path_a), self.extract_all(path_b))
