"""Tests for mesh_types and grid_builder helpers."""
import numpy as np
import pytest

from grid_builder import GridFeatures, breakpoints, in_band
from mesh_types import (
    Polygon3D,
    PolygonMesh,
    facet_normal,
    is_closed,
    open_edges,
    translation_matrix,
    triangulate,
    with_transform,
)


def unit_cube() -> PolygonMesh:
    mesh = PolygonMesh()
    mesh.add([(0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)])  # bottom, -Z
    mesh.add([(0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)])  # top, +Z
    mesh.add([(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)])  # front, -Y
    mesh.add([(1, 1, 0), (0, 1, 0), (0, 1, 1), (1, 1, 1)])  # back, +Y
    mesh.add([(0, 1, 0), (0, 0, 0), (0, 0, 1), (0, 1, 1)])  # left, -X
    mesh.add([(1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)])  # right, +X
    return mesh


class TestPolygon:
    """Polygon normals and areas."""

    def test_normal_follows_winding(self):
        poly = Polygon3D(((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)))
        assert np.allclose(poly.normal(), [0, 0, 1])

    def test_area(self):
        poly = Polygon3D(((0, 0, 0), (2, 0, 0), (2, 3, 0), (0, 3, 0)))
        assert poly.area() == pytest.approx(6.0)

    def test_needs_three_vertices(self):
        with pytest.raises(ValueError):
            Polygon3D(((0, 0, 0), (1, 0, 0)))

    def test_degenerate_facet_normal_is_zero(self):
        assert facet_normal((0, 0, 0), (1, 0, 0), (2, 0, 0)) == (0.0, 0.0, 0.0)


class TestMesh:
    """Triangulation, transforms and the closedness audit."""

    def test_fan_triangulation_count(self):
        mesh = PolygonMesh()
        mesh.add([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)])
        mesh.add([(0, 0, 0), (1, 0, 0), (1.5, 0.5, 0), (1, 1, 0), (0, 1, 0)])
        assert len(triangulate(mesh)) == 2 + 3

    def test_cube_is_closed(self):
        assert is_closed(unit_cube())

    def test_missing_face_is_reported(self):
        mesh = unit_cube()
        mesh.polygons.pop()
        assert len(open_edges(mesh)) == 4

    def test_flipped_face_is_reported(self):
        mesh = unit_cube()
        top = mesh.polygons[1]
        mesh.polygons[1] = Polygon3D(tuple(reversed(top.vertices)))
        assert not is_closed(mesh)

    def test_residual_transform_applied(self):
        mesh = with_transform(unit_cube(), translation_matrix((10, 0, 0)))
        bounds = mesh.bounds()
        assert np.allclose(bounds, [[10, 0, 0], [11, 1, 1]])
        moved = with_transform(mesh, translation_matrix((0, 0, 5)))
        assert np.allclose(moved.bounds(), [[10, 0, 5], [11, 1, 6]])

    def test_triangle_normals_after_transform(self):
        mesh = with_transform(unit_cube(), translation_matrix((3, 3, 3)))
        normals = {tuple(np.round(t.normal, 6)) for t in triangulate(mesh)}
        assert (0.0, 0.0, 1.0) in normals
        assert (0.0, 0.0, -1.0) in normals
        assert len(normals) == 6


class TestGridHelpers:
    """Breakpoint merging and band classification."""

    def test_breakpoints_sort_and_merge(self):
        assert breakpoints([3, 1, 1.0005, 2]) == [1, 2, 3]

    def test_in_band_uses_midpoint(self):
        assert in_band(-1, 1, [0.0], 1.0)
        assert not in_band(1, 3, [0.0], 1.0)

    def test_lid_bands_are_wider_than_box_bands(self, divided_params):
        box = GridFeatures.for_box(divided_params)
        lid = GridFeatures.for_lid(divided_params)
        assert box.band_half_width == pytest.approx(1.0)
        assert lid.band_half_width == pytest.approx(1.3)
        assert box.x_band_edges() == [pytest.approx(-1.0), pytest.approx(1.0)]

    def test_chamfer_edges(self):
        features = GridFeatures(chamfer=1.5)
        assert features.chamfer_edges(40) == [-38.5, 38.5]
        assert GridFeatures().chamfer_edges(40) == []

    def test_band_edges_clipped_to_limit(self):
        features = GridFeatures(x_bands=(-30.0, 0.0), y_bands=(29.0,), band_half_width=1.5)
        assert features.x_band_edges() == [-31.5, -28.5, -1.5, 1.5]
        assert features.x_band_edges(30.0) == [-28.5, -1.5, 1.5]
        assert features.y_band_edges(30.0) == [27.5]
