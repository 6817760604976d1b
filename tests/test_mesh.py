"""
Unit tests for STL parsing and geometry diffing.
"""
import pytest

from arcdupe.core.mesh import (
    compare_archive_meshes, compare_mesh, compare_mesh_info, is_mesh_file, parse_mesh
)
from arcdupe.core.models import ContentStatus, MeshChange
from arcdupe.errors import MeshParseError
from builders import ascii_stl, binary_stl, unit_triangles


class TestParseMesh:
    def test_binary_round_trip_counts(self):
        info = parse_mesh(binary_stl(unit_triangles(12)))
        assert info.is_binary
        assert info.triangle_count == 12
        assert info.vertex_count == 36

    def test_binary_bounds(self):
        info = parse_mesh(binary_stl(unit_triangles(2, scale=5.0)))
        assert (info.bounds.min_x, info.bounds.max_x) == (0.0, 5.0)
        assert (info.bounds.min_z, info.bounds.max_z) == (0.0, 5.0)

    def test_binary_length_mismatch_is_parse_error(self):
        """A truncated binary payload is an error, never a partial read."""
        data = binary_stl(unit_triangles(3))
        with pytest.raises(MeshParseError):
            parse_mesh(data[:-10])
        with pytest.raises(MeshParseError):
            parse_mesh(data + b"\x00")

    def test_ascii_counts_and_bounds(self):
        info = parse_mesh(ascii_stl(unit_triangles(4, scale=2.0)))
        assert not info.is_binary
        assert info.triangle_count == 4
        assert info.vertex_count == 12
        assert info.bounds.max_y == 2.0

    def test_ascii_unparsable_vertex_is_counted_but_ignored_for_bounds(self):
        data = b"solid x\nfacet normal 0 0 1\nvertex 1 2 3\nvertex a b c\nvertex 0 0 0\nendfacet\nendsolid x"
        info = parse_mesh(data)
        assert info.vertex_count == 3
        assert info.bounds.max_x == 1.0

    def test_short_payload_parses_as_text(self):
        info = parse_mesh(b"not a mesh")
        assert not info.is_binary
        assert info.triangle_count == 0

    def test_is_mesh_file(self):
        assert is_mesh_file("Body.STL")
        assert not is_mesh_file("body.obj")


class TestCompareMesh:
    def test_identical_bytes_short_circuit_without_parsing(self):
        """Even unparsable payloads are identical when their bytes match."""
        broken = binary_stl(unit_triangles(3))[:-7]
        diff = compare_mesh(broken, broken)
        assert diff.is_identical
        assert diff.triangles_a is None

    def test_expanded(self):
        diff = compare_mesh(binary_stl(unit_triangles(10)), binary_stl(unit_triangles(15)))
        assert diff.kind == MeshChange.EXPANDED
        assert diff.description == "Geometry expanded (+5 triangles)"
        assert (diff.triangles_a, diff.triangles_b) == (10, 15)
        assert (diff.vertices_a, diff.vertices_b) == (30, 45)

    def test_simplified_with_dimensions_changed(self):
        diff = compare_mesh(binary_stl(unit_triangles(10)), binary_stl(unit_triangles(4, scale=3.0)))
        assert diff.kind == MeshChange.SIMPLIFIED
        assert diff.description == "Geometry simplified (-6 triangles), dimensions changed"

    def test_transformed(self):
        diff = compare_mesh(binary_stl(unit_triangles(5)), binary_stl(unit_triangles(5, scale=2.0)))
        assert diff.kind == MeshChange.TRANSFORMED
        assert diff.description == "Geometry transformed (same triangle count, different dimensions)"

    def test_minor_modification(self):
        a = binary_stl(unit_triangles(5), header=b"exporter A")
        b = binary_stl(unit_triangles(5), header=b"exporter B")
        diff = compare_mesh(a, b)
        assert diff.kind == MeshChange.MINOR_MODIFICATION
        assert diff.description == "Minor modifications (same structure, different vertex data)"

    def test_bounds_within_epsilon_are_equal(self):
        a = binary_stl(unit_triangles(5, scale=1.0))
        b = binary_stl(unit_triangles(5, scale=1.0004))
        assert compare_mesh(a, b).kind == MeshChange.MINOR_MODIFICATION

    def test_unparsable_side_never_raises(self):
        good = binary_stl(unit_triangles(3))
        diff = compare_mesh(good, good[:-1])
        assert diff.kind == MeshChange.UNPARSABLE
        assert diff.description == "Unable to parse mesh format"
        assert diff.triangles_a is None and diff.triangles_b is None

    def test_binary_and_ascii_of_same_geometry(self):
        triangles = unit_triangles(6)
        diff = compare_mesh_info(parse_mesh(binary_stl(triangles)), parse_mesh(ascii_stl(triangles)))
        assert diff.kind == MeshChange.MINOR_MODIFICATION


class TestCompareArchiveMeshes:
    def test_statuses(self):
        mesh_a = binary_stl(unit_triangles(3))
        mesh_b = binary_stl(unit_triangles(4))
        contents_a = {"body.stl": mesh_a, "readme.txt": b"v1", "same.stl": mesh_a, "only_a.stl": mesh_a}
        contents_b = {"body.stl": mesh_b, "readme.txt": b"v2", "same.stl": mesh_a, "only_b.png": b"png"}

        results = {r.internal_path: r for r in compare_archive_meshes(contents_a, contents_b)}

        assert list(results) == sorted(results)
        assert results["body.stl"].status == ContentStatus.MODIFIED
        assert results["body.stl"].diff.kind == MeshChange.EXPANDED
        assert results["readme.txt"].status == ContentStatus.NOT_A_MESH
        assert results["same.stl"].status == ContentStatus.IDENTICAL
        assert results["only_a.stl"].status == ContentStatus.ONLY_IN_A
        assert results["only_b.png"].status == ContentStatus.ONLY_IN_B
