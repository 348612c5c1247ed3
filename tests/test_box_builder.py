"""Tests for the direct box builder."""
import numpy as np
import pytest

from box_builder import build_box
from box_params import BoxParams
from conftest import footprint_area
from mesh_types import is_closed
from render_adapter import to_trimesh

# 80 x 60 x 40 shell minus a 76 x 56 x 38 cavity
PLAIN_VOLUME = 80 * 60 * 40 - 76 * 56 * 38


class TestPlainBox:
    """Open box without dividers or chamfer."""

    def test_face_count(self, default_params):
        # 9 bottom + 12 outer wall + 1 floor + 4 inner wall + 8 rim
        assert len(build_box(default_params)) == 34

    def test_closed(self, default_params):
        assert is_closed(build_box(default_params))

    def test_bounds_in_box_frame(self, default_params):
        bounds = build_box(default_params).bounds()
        assert np.allclose(bounds, [[-40, -30, 0], [40, 30, 40]])

    def test_watertight_volume(self, default_params):
        tm = to_trimesh(build_box(default_params))
        assert tm.is_watertight
        assert tm.is_winding_consistent
        assert tm.volume == pytest.approx(PLAIN_VOLUME)

    def test_idempotent(self, default_params):
        assert build_box(default_params).polygons == build_box(default_params).polygons

    def test_no_boolean_residual_transform(self, default_params):
        assert build_box(default_params).transform is None


class TestDividers:
    """Divider walls fused to the floor and inner walls."""

    def test_centre_divider_spans_minus_one_to_one(self):
        mesh = build_box(BoxParams(divisions_x=[50]))
        xs = set()
        for poly in mesh.polygons:
            px = {round(v[0], 9) for v in poly.vertices}
            zs = {v[2] for v in poly.vertices}
            if len(px) == 1 and zs == {2.0, 40.0}:
                xs |= px
        assert xs == {-38.0, -1.0, 1.0, 38.0}

    def test_single_divider_closed_and_volume(self):
        mesh = build_box(BoxParams(divisions_x=[50]))
        assert is_closed(mesh)
        assert to_trimesh(mesh).volume == pytest.approx(PLAIN_VOLUME + 2 * 56 * 38)

    def test_crossing_dividers(self):
        mesh = build_box(BoxParams(divisions_x=[50], divisions_z=[50]))
        assert is_closed(mesh)
        expected = PLAIN_VOLUME + 2 * 56 * 38 + 2 * 76 * 38 - 2 * 2 * 38
        assert to_trimesh(mesh).volume == pytest.approx(expected)

    def test_many_dividers(self):
        mesh = build_box(BoxParams(divisions_x=[25, 50, 75], divisions_z=[33, 66]))
        assert is_closed(mesh)
        assert to_trimesh(mesh).is_watertight

    def test_overlapping_dividers_dropped(self):
        assert build_box(BoxParams(divisions_x=[50, 51])).polygons == \
            build_box(BoxParams(divisions_x=[50])).polygons


class TestChamfer:
    """45 degree cut on the four vertical outer edges."""

    @pytest.mark.parametrize("size", [0.5, 1.0, 2.0])
    def test_footprint_area(self, size):
        mesh = build_box(BoxParams(chamfer_size=size))
        c = BoxParams(chamfer_size=size).chamfer
        assert footprint_area(mesh, 0.0) == pytest.approx(80 * 60 - 2 * c * c)

    @pytest.mark.parametrize("size", [0.5, 2.0, 10.0])
    def test_closed(self, size):
        mesh = build_box(BoxParams(chamfer_size=size, divisions_x=[50]))
        assert is_closed(mesh)
        assert to_trimesh(mesh).is_watertight

    def test_volume_loses_corner_prisms(self):
        mesh = build_box(BoxParams(chamfer_size=1.0))
        # four triangular prisms of leg 1 mm, full height
        assert to_trimesh(mesh).volume == pytest.approx(PLAIN_VOLUME - 4 * 0.5 * 40)
