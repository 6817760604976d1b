"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/volumes.py
Multi-volume archive detection.

Two independent naming families are recognised:
  • separator-delimited parts: "name.part3.rar", "name_part03.zip", "name part2.7z"
  • numeric extension sets:    "archive.zip.001", "archive.z01", "archive.7z.002"

Two files belong to the same set only when both are parts, their base names
match and their part tokens differ. This predicate suppresses clusters made
of one split archive and must also veto automatic deletion between parts.
"""

import os
from typing import Iterable, NamedTuple

from arcdupe.core.normalizer import KNOWN_ARCHIVE_EXTENSIONS

PART_SEPARATORS = (".part", "_part", "-part", " part")


class VolumePart(NamedTuple):
    """Result of multi-volume detection for one filename."""
    is_part: bool
    base_name: str
    part_token: str


NOT_A_PART = VolumePart(False, "", "")


def _leading_digits(text: str) -> str:
    digits = []
    for char in text:
        if not char.isascii() or not char.isdigit():
            break
        digits.append(char)
    return "".join(digits)


def _detect_separator_part(name: str) -> VolumePart:
    for sep in PART_SEPARATORS:
        idx = name.rfind(sep)
        if idx == -1:
            continue
        part_num = _leading_digits(name[idx + len(sep):])
        if part_num:
            return VolumePart(True, name[:idx], part_num)
    return NOT_A_PART


def _detect_numeric_extension(name: str) -> VolumePart:
    base, ext = os.path.splitext(name)
    token = ext[1:]
    if not token:
        return NOT_A_PART

    if token.isascii() and token.isdigit():
        # "archive.zip.001" and "archive.zip.002" share the base "archive"
        sub_ext = os.path.splitext(base)[1]
        if sub_ext in KNOWN_ARCHIVE_EXTENSIONS:
            base = base[:-len(sub_ext)]
        return VolumePart(True, base, token)

    # Old-style split zips: "archive.z01", "archive.z02" (+ "archive.zip" as the last volume)
    if len(token) >= 3 and token[0] == "z" and token[1:].isascii() and token[1:].isdigit():
        return VolumePart(True, base, token)

    return NOT_A_PART


def detect_part(filename: str) -> VolumePart:
    """
    Detect whether a filename is one volume of a split archive.

    Args:
        filename: Basename (or path; only the basename is inspected).

    Returns:
        VolumePart(is_part, base_name, part_token). base_name is lowercase.

    Examples:
        "Model.part3.rar"  → (True, "model", "3")
        "backup.zip.001"   → (True, "backup", "001")
        "backup.z01"       → (True, "backup", "z01")
        "model.zip"        → (False, "", "")
    """
    name = os.path.basename(filename).lower()
    if not name:
        return NOT_A_PART

    part = _detect_separator_part(name)
    if part.is_part:
        return part
    return _detect_numeric_extension(name)


def is_same_set(name_a: str, name_b: str) -> bool:
    """True if both names are different volumes of one split archive."""
    part_a = detect_part(name_a)
    part_b = detect_part(name_b)
    return (
        part_a.is_part
        and part_b.is_part
        and part_a.base_name == part_b.base_name
        and part_a.part_token != part_b.part_token
    )


def blocks_auto_delete(name_a: str, name_b: str) -> bool:
    """Cleanup policies must never auto-delete one volume because of another."""
    return is_same_set(name_a, name_b)


def is_multi_volume_set(names: Iterable[str]) -> bool:
    """
    True if the names form exactly one split archive: at least two members,
    every member is a part, all share one base name and no token repeats.
    """
    parts = [detect_part(name) for name in names]
    if len(parts) < 2 or not all(p.is_part for p in parts):
        return False
    if len({p.base_name for p in parts}) != 1:
        return False
    tokens = [p.part_token for p in parts]
    return len(set(tokens)) == len(tokens)
