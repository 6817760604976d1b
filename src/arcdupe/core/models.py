"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for archive scanning, grouping, mesh diffing and visual hashing.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar


# =============================
# Enums
# =============================

class ArchiveKind(Enum):
    """Supported archive container formats."""
    ZIP = "zip"
    RAR = "rar"
    SEVEN_ZIP = "7z"

    @classmethod
    def from_path(cls, path: str) -> Optional["ArchiveKind"]:
        """Detects the archive kind by lowercase extension, None when unsupported."""
        ext = os.path.splitext(path)[1].lower()
        return _EXTENSION_KINDS.get(ext)

    @property
    def display_name(self) -> str:
        mapping = {
            ArchiveKind.ZIP: "ZIP",
            ArchiveKind.RAR: "RAR",
            ArchiveKind.SEVEN_ZIP: "7-Zip",
        }
        return mapping.get(self, self.value)


_EXTENSION_KINDS = {
    ".zip": ArchiveKind.ZIP,
    ".rar": ArchiveKind.RAR,
    ".7z": ArchiveKind.SEVEN_ZIP,
}


class MeshChange(Enum):
    """Classification carried by a MeshDiff."""
    IDENTICAL = "identical"
    EXPANDED = "expanded"
    SIMPLIFIED = "simplified"
    TRANSFORMED = "transformed"
    MINOR_MODIFICATION = "minor-modification"
    UNPARSABLE = "unparsable"


class ContentStatus(Enum):
    """Per-file outcome when comparing the contents of two archives."""
    ONLY_IN_A = "only-in-a"
    ONLY_IN_B = "only-in-b"
    IDENTICAL = "identical"
    MODIFIED = "modified"
    NOT_A_MESH = "not-a-mesh"


# ======================
#  Scan Models
# ======================

@dataclass(frozen=True, eq=False)
class ArchiveEntry:
    """
    One archive found by the external directory walker.
    Identity is the absolute path; re-scanning produces a fresh instance.
    """
    path: str
    size: int  # in bytes
    modified_at: datetime
    name: Optional[str] = None
    kind: Optional[ArchiveKind] = None
    entry_count: Optional[int] = None

    def __post_init__(self):
        """Derive basename and archive kind from path if not provided."""
        if self.name is None:
            object.__setattr__(self, "name", os.path.basename(self.path))
        if self.kind is None:
            object.__setattr__(self, "kind", ArchiveKind.from_path(self.path))

    @classmethod
    def from_path(cls, path: str) -> "ArchiveEntry":
        """Builds an entry by stat-ing a single file. Does not walk directories."""
        stat_result = os.stat(path)
        return cls(
            path=os.path.abspath(path),
            size=stat_result.st_size,
            modified_at=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
        )

    @property
    def mod_time_tag(self) -> str:
        """Modification tag used as the invalidation key of cache rows."""
        return self.modified_at.isoformat()

    def __eq__(self, other):
        if not isinstance(other, ArchiveEntry):
            return NotImplemented
        return self.path == other.path

    def __hash__(self):
        return hash(self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "size": self.size,
            "kind": self.kind.value if self.kind else None,
            "modified_at": self.mod_time_tag,
            "entry_count": self.entry_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArchiveEntry":
        kind = data.get("kind")
        return cls(
            path=data["path"],
            size=int(data["size"]),
            modified_at=datetime.fromisoformat(data["modified_at"]),
            name=data.get("name"),
            kind=ArchiveKind(kind) if kind else None,
            entry_count=data.get("entry_count"),
        )

    def __repr__(self):
        return f"<ArchiveEntry path={self.path}, size={self.size}>"


@dataclass
class SimilarityPair:
    """Two entries whose names scored at or above the caller's threshold."""
    a: ArchiveEntry
    b: ArchiveEntry
    score: float

    def __post_init__(self):
        if not 0.0 <= self.score <= 100.0:
            raise ValueError(f"Similarity score out of range: {self.score}")


@dataclass
class SimilarityGroup:
    """
    A cluster of entries sharing one canonical key (or one visual seed).
    Always holds at least two members.
    """
    base_name: str
    members: List[ArchiveEntry]
    discovered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if len(self.members) < 2:
            raise ValueError("A similarity group needs at least two members")

    @property
    def member_count(self) -> int:
        return len(self.members)

    def member_paths(self) -> List[str]:
        return [entry.path for entry in self.members]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_name": self.base_name,
            "members": [entry.to_dict() for entry in self.members],
            "discovered_at": self.discovered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimilarityGroup":
        return cls(
            base_name=data["base_name"],
            members=[ArchiveEntry.from_dict(m) for m in data["members"]],
            discovered_at=datetime.fromisoformat(data["discovered_at"]),
        )

    def __repr__(self):
        return f"<SimilarityGroup base_name={self.base_name!r}, count={len(self.members)}>"


@dataclass
class SizeGroup:
    """Entries of identical byte size plus the name pairs that passed the threshold."""
    size: int
    members: List[ArchiveEntry]
    pairs: List[SimilarityPair] = field(default_factory=list)

    def member_paths(self) -> List[str]:
        return [entry.path for entry in self.members]

    def __repr__(self):
        return f"<SizeGroup size={self.size}, count={len(self.members)}, pairs={len(self.pairs)}>"


# ======================
#  Archive Content Models
# ======================

@dataclass(frozen=True)
class PreviewCandidate:
    """A file inside an archive (path as stored in the archive, uncompressed size)."""
    internal_path: str
    size: int


@dataclass(frozen=True)
class ArchiveContentDiff:
    """Internal paths shared by two archives and those unique to each side."""
    common: List[str]
    only_in_a: List[str]
    only_in_b: List[str]


# ======================
#  Geometry Models
# ======================

@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a mesh."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float

    @classmethod
    def empty(cls) -> "Bounds":
        inf = float("inf")
        return cls(inf, -inf, inf, -inf, inf, -inf)

    def include(self, x: float, y: float, z: float) -> "Bounds":
        return Bounds(
            min(self.min_x, x), max(self.max_x, x),
            min(self.min_y, y), max(self.max_y, y),
            min(self.min_z, z), max(self.max_z, z),
        )

    def approx_equal(self, other: "Bounds", epsilon: float = 1e-3) -> bool:
        mine = (self.min_x, self.max_x, self.min_y, self.max_y, self.min_z, self.max_z)
        theirs = (other.min_x, other.max_x, other.min_y, other.max_y, other.min_z, other.max_z)
        for a, b in zip(mine, theirs):
            if a == b:  # covers the infinities of an empty box
                continue
            if abs(a - b) >= epsilon:
                return False
        return True


@dataclass(frozen=True)
class MeshInfo:
    """Summary of a parsed mesh byte stream."""
    triangle_count: int
    vertex_count: int
    bounds: Bounds
    is_binary: bool


@dataclass(frozen=True)
class MeshDiff:
    """
    Result of comparing two meshes.
    Counts are None when the comparison short-circuited or a side was unparsable.
    """
    kind: MeshChange
    description: str
    triangles_a: Optional[int] = None
    triangles_b: Optional[int] = None
    vertices_a: Optional[int] = None
    vertices_b: Optional[int] = None

    @property
    def is_identical(self) -> bool:
        return self.kind == MeshChange.IDENTICAL


@dataclass(frozen=True)
class MeshFileComparison:
    """Outcome for one internal path when diffing two extracted archives."""
    internal_path: str
    status: ContentStatus
    diff: Optional[MeshDiff] = None


# ======================
#  Cache Models
# ======================

@dataclass(frozen=True)
class VisualHash:
    """Perceptual hash of one archive's preview, valid for one modification tag."""
    path: str
    mod_time_tag: str
    hash: int  # unsigned 64-bit


@dataclass(frozen=True)
class IgnoredGroupMark:
    """Hash of a member-path set the operator marked as "not a duplicate"."""
    group_hash: str


# ======================
#  Orchestration Models
# ======================

T = TypeVar("T")


@dataclass
class JobResult(Generic[T]):
    """Outcome of one pooled job: either a value or the error that stopped it."""
    item: Any
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None
