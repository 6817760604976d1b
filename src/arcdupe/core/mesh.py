"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/mesh.py
STL geometry parsing and diffing.

Binary layout: 80-byte header, uint32 LE triangle count, then 50 bytes per
triangle (normal 3×f32, three vertices 3×f32 each, uint16 attribute).
Text layout: "facet" lines count triangles, "vertex x y z" lines count vertices.
"""

import logging
import struct
from typing import Dict, List, Optional

from arcdupe.core.models import (
    Bounds, ContentStatus, MeshChange, MeshDiff, MeshFileComparison, MeshInfo
)
from arcdupe.errors import MeshParseError

logger = logging.getLogger(__name__)

MESH_EXTENSIONS = (".stl",)

_HEADER_SIZE = 80
_PREFIX_SIZE = 84
_TRIANGLE_SIZE = 50
_TRIANGLE_STRUCT = struct.Struct("<12x9f2x")  # skip normal, 9 vertex floats, skip attribute
_COUNT_STRUCT = struct.Struct("<I")

UNPARSABLE_DESCRIPTION = "Unable to parse mesh format"


def is_mesh_file(filename: str) -> bool:
    return filename.lower().endswith(MESH_EXTENSIONS)


def _is_binary(data: bytes) -> bool:
    return len(data) >= _PREFIX_SIZE and not data.startswith(b"solid")


def _parse_binary(data: bytes) -> MeshInfo:
    (triangle_count,) = _COUNT_STRUCT.unpack_from(data, _HEADER_SIZE)
    expected = _PREFIX_SIZE + triangle_count * _TRIANGLE_SIZE
    if len(data) != expected:
        raise MeshParseError(
            f"Binary mesh declares {triangle_count} triangles ({expected} bytes), got {len(data)} bytes"
        )

    bounds = Bounds.empty()
    for values in _TRIANGLE_STRUCT.iter_unpack(data[_PREFIX_SIZE:]):
        for i in range(0, 9, 3):
            bounds = bounds.include(values[i], values[i + 1], values[i + 2])

    return MeshInfo(
        triangle_count=triangle_count,
        vertex_count=triangle_count * 3,
        bounds=bounds,
        is_binary=True,
    )


def _parse_text(data: bytes) -> MeshInfo:
    triangles = 0
    vertices = 0
    bounds = Bounds.empty()

    for raw_line in data.split(b"\n"):
        line = raw_line.strip()
        if line.startswith(b"facet"):
            triangles += 1
        elif line.startswith(b"vertex"):
            vertices += 1
            parts = line.split()
            if len(parts) < 4:
                continue
            try:
                x, y, z = (float(p) for p in parts[1:4])
            except ValueError:
                continue  # counted, but does not move the bounds
            bounds = bounds.include(x, y, z)

    return MeshInfo(
        triangle_count=triangles,
        vertex_count=vertices,
        bounds=bounds,
        is_binary=False,
    )


def parse_mesh(data: bytes) -> MeshInfo:
    """
    Parses an STL payload, detecting binary vs text.

    Raises:
        MeshParseError: binary length does not match the declared triangle count.
    """
    if _is_binary(data):
        return _parse_binary(data)
    return _parse_text(data)


def compare_mesh_info(info_a: MeshInfo, info_b: MeshInfo) -> MeshDiff:
    """Classifies the change from mesh A to mesh B."""
    same_bounds = info_a.bounds.approx_equal(info_b.bounds)
    delta = info_b.triangle_count - info_a.triangle_count

    if delta > 0:
        kind = MeshChange.EXPANDED
        description = f"Geometry expanded (+{delta} triangles)"
    elif delta < 0:
        kind = MeshChange.SIMPLIFIED
        description = f"Geometry simplified ({delta} triangles)"
    elif not same_bounds:
        kind = MeshChange.TRANSFORMED
        description = "Geometry transformed (same triangle count, different dimensions)"
    else:
        kind = MeshChange.MINOR_MODIFICATION
        description = "Minor modifications (same structure, different vertex data)"

    if delta != 0 and not same_bounds:
        description += ", dimensions changed"

    return MeshDiff(
        kind=kind,
        description=description,
        triangles_a=info_a.triangle_count,
        triangles_b=info_b.triangle_count,
        vertices_a=info_a.vertex_count,
        vertices_b=info_b.vertex_count,
    )


def compare_mesh(data_a: bytes, data_b: bytes) -> MeshDiff:
    """
    Compares two mesh payloads. Never raises on bad input.

    Byte-identical payloads short-circuit to IDENTICAL without parsing;
    if either side fails to parse the result is UNPARSABLE with no counts.
    """
    if data_a == data_b:
        return MeshDiff(kind=MeshChange.IDENTICAL, description="Identical")

    try:
        info_a = parse_mesh(data_a)
        info_b = parse_mesh(data_b)
    except MeshParseError as e:
        logger.debug(f"Mesh comparison fell back to byte equality: {e}")
        return MeshDiff(kind=MeshChange.UNPARSABLE, description=UNPARSABLE_DESCRIPTION)

    return compare_mesh_info(info_a, info_b)


def compare_archive_meshes(
        contents_a: Dict[str, bytes],
        contents_b: Dict[str, bytes]
) -> List[MeshFileComparison]:
    """
    File-by-file comparison of two extracted archives, sorted by internal path.
    Non-mesh files present on both sides are reported as NOT_A_MESH unless identical.
    """
    results = []
    for internal_path in sorted(set(contents_a) | set(contents_b)):
        data_a: Optional[bytes] = contents_a.get(internal_path)
        data_b: Optional[bytes] = contents_b.get(internal_path)

        if data_b is None:
            results.append(MeshFileComparison(internal_path, ContentStatus.ONLY_IN_A))
        elif data_a is None:
            results.append(MeshFileComparison(internal_path, ContentStatus.ONLY_IN_B))
        elif data_a == data_b:
            results.append(MeshFileComparison(internal_path, ContentStatus.IDENTICAL))
        elif not is_mesh_file(internal_path):
            results.append(MeshFileComparison(internal_path, ContentStatus.NOT_A_MESH))
        else:
            results.append(MeshFileComparison(
                internal_path, ContentStatus.MODIFIED, compare_mesh(data_a, data_b)
            ))
    return results
