"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/normalizer.py
Canonical key normalization for archive names.

The same key feeds both the clustering engine and the fuzzy scorer, so
both paths always agree on what "the same name" means.
"""

import re
from functools import lru_cache

KNOWN_ARCHIVE_EXTENSIONS = (".zip", ".rar", ".7z", ".tar", ".gz")

NOISE_WORDS = frozenset({
    "copy", "final", "new", "old", "backup", "fixed", "update", "updated",
    "remix", "stl", "obj", "files", "supported", "presupported", "pre",
    "unsupported",
})

# Pre-compiled regex patterns
_PATTERN_BRACKETS = re.compile(r'[\(\[\{][^\)\]\}]*[\)\]\}]')
_PATTERN_SEPARATORS = re.compile(r'[\s_\-.+]+')
_PATTERN_VERSION_PHRASE = re.compile(r'\bversion \d+\b')
_PATTERN_VERSION_TOKEN = re.compile(r'^(?:v|ver|rev|r|part|pt|vol)\d+$')
_PATTERN_NUMERIC_TOKEN = re.compile(r'^\d+$')
_PATTERN_EXTENSION = re.compile(r'\.[a-z0-9]{1,5}$')


def _strip_extensions(name: str) -> str:
    """Drops the last extension, then a trailing known archive extension if one is left."""
    name = _PATTERN_EXTENSION.sub('', name)
    for ext in KNOWN_ARCHIVE_EXTENSIONS:
        if name.endswith(ext):
            return name[:-len(ext)]
    return name


@lru_cache(maxsize=65536)
def normalize_key(filename: str) -> str:
    """
    Normalize an archive filename into its canonical clustering key.

    Normalization rules:
    - Convert to lowercase (str.lower, locale independent)
    - Remove the extension, plus a known archive extension left in front of
      a numeric volume extension ("set.zip.001" -> "set")
    - Remove bracket content: (1), [v2], {copy}
    - Collapse separators (underscore, hyphen, dot, plus, whitespace) to single spaces
    - Remove version and volume tokens: v2, v1.2, ver3, rev2, r3, part2, "version 4"
    - Remove noise words: copy, final, new, old, backup, stl, ...
    - Remove isolated numeric tokens

    Returns:
        str: The canonical key; "" for names that are purely numeric/noise.

    Examples:
        "Report_v2.zip" → "report"
        "Dragon Bust (1).rar" → "dragon bust"
        "knight-v1.2-presupported.7z" → "knight"
        "2024_0001.zip" → ""
    """
    if not filename:
        return ""

    name = _strip_extensions(filename.lower())
    name = _PATTERN_BRACKETS.sub(' ', name)
    name = _PATTERN_SEPARATORS.sub(' ', name).strip()
    name = _PATTERN_VERSION_PHRASE.sub(' ', name)

    # "v1.2" arrives as "v1" "2" after separator collapsing; both tokens go
    tokens = [
        token for token in name.split()
        if not _PATTERN_VERSION_TOKEN.match(token)
        and not _PATTERN_NUMERIC_TOKEN.match(token)
        and token not in NOISE_WORDS
    ]

    return " ".join(tokens)

