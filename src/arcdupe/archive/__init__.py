"""
Archive access: ZIP (zipfile), RAR (rarfile) and 7Z (py7zr) readers behind one
dispatching ArchiveExtractor, plus the preview-selection heuristic.
"""

from .extractor import ArchiveExtractor
from .readers import ZipArchiveReader, RarArchiveReader, SevenZipArchiveReader
from .preview import select_preview, select_model, filter_candidates

__all__ = [
    "ArchiveExtractor",
    "ZipArchiveReader",
    "RarArchiveReader",
    "SevenZipArchiveReader",
    "select_preview",
    "select_model",
    "filter_candidates",
]
