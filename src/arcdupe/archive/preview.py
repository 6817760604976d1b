"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

archive/preview.py
Classifies files inside an archive and picks the one that best represents it.

Priority chain, each tier tried only when the previous one yields nothing:
  1. largest non-empty image (jpg, jpeg, png, webp)
  2. largest non-empty video (mp4, webm, mkv, mov, avi)
  3. first 3D model whose path carries a "whole model" keyword
  4. largest non-empty 3D model
"""

import os
from typing import Callable, Iterable, List, Optional

from arcdupe.core.models import PreviewCandidate

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".webm", ".mkv", ".mov", ".avi"})
MODEL_EXTENSIONS = frozenset({".stl", ".obj"})

SYSTEM_FOLDERS = ("__macosx", "@eadir")
MODEL_KEYWORDS = ("full", "whole", "body", "complete", "merged", "single")


def _extension(internal_path: str) -> str:
    return os.path.splitext(internal_path.lower())[1]


def is_system_path(internal_path: str) -> bool:
    """True for entries under OS metadata folders (macOS resource forks, Synology thumbnails)."""
    lower = internal_path.lower()
    return any(folder in lower for folder in SYSTEM_FOLDERS)


def is_image_file(internal_path: str) -> bool:
    return _extension(internal_path) in IMAGE_EXTENSIONS and not is_system_path(internal_path)


def is_video_file(internal_path: str) -> bool:
    return _extension(internal_path) in VIDEO_EXTENSIONS and not is_system_path(internal_path)


def is_model_file(internal_path: str) -> bool:
    return _extension(internal_path) in MODEL_EXTENSIONS and not is_system_path(internal_path)


def is_preview_candidate(internal_path: str) -> bool:
    return is_image_file(internal_path) or is_video_file(internal_path) or is_model_file(internal_path)


def has_model_keyword(internal_path: str) -> bool:
    lower = internal_path.lower()
    return any(keyword in lower for keyword in MODEL_KEYWORDS)


def filter_candidates(files: Iterable[PreviewCandidate]) -> List[PreviewCandidate]:
    """Keeps images, videos and models outside system folders, in archive order."""
    return [f for f in files if is_preview_candidate(f.internal_path)]


def _largest(candidates: List[PreviewCandidate], predicate: Callable[[str], bool]) -> Optional[str]:
    # Empty files never win; ties keep the first entry in archive order
    best = None
    for candidate in candidates:
        if candidate.size <= 0 or not predicate(candidate.internal_path):
            continue
        if best is None or candidate.size > best.size:
            best = candidate
    return best.internal_path if best else None


def _first_keyword_model(candidates: List[PreviewCandidate]) -> Optional[str]:
    for candidate in candidates:
        if is_model_file(candidate.internal_path) and has_model_keyword(candidate.internal_path):
            return candidate.internal_path
    return None


def select_model(candidates: List[PreviewCandidate]) -> Optional[str]:
    """Keyword model first, then the largest model. None when the archive has no model."""
    return _first_keyword_model(candidates) or _largest(candidates, is_model_file)


def select_preview(candidates: List[PreviewCandidate]) -> Optional[str]:
    """Runs the full priority chain. None when nothing is eligible."""
    return (
        _largest(candidates, is_image_file)
        or _largest(candidates, is_video_file)
        or select_model(candidates)
    )
