"""Tests for sizing module."""
import pytest

from box_params import BoxParams
from sizing import (
    compartment_grid,
    even_positions,
    from_compartments,
    from_division_sizes,
    from_printer_bed,
    from_volume,
    parse_sizes,
)


class TestEvenPositions:
    def test_positions(self):
        assert even_positions(0) == []
        assert even_positions(1) == [50]
        assert even_positions(2) == [33, 67]
        assert even_positions(3) == [25, 50, 75]


class TestCalculators:
    """Each calculator returns a new, valid record."""

    def test_from_volume(self):
        p = from_volume(BoxParams(), 1000)
        assert (p.width, p.depth, p.height) == (120, 100, 80)

    def test_from_volume_keeps_other_fields(self):
        base = BoxParams(include_lid=True, wall_thickness=3)
        p = from_volume(base, 500)
        assert p.include_lid and p.wall_thickness == 3

    def test_from_volume_rejects_zero(self):
        with pytest.raises(ValueError):
            from_volume(BoxParams(), 0)

    def test_compartment_grid(self):
        assert compartment_grid(1) == (1, 1)
        assert compartment_grid(6) == (3, 2)
        assert compartment_grid(9) == (3, 3)

    def test_from_compartments(self):
        p = from_compartments(BoxParams(), 6, 30, 40, 25)
        assert (p.width, p.depth, p.height) == (98, 86, 27)
        assert p.divisions_x == (33.0, 67.0)
        assert p.divisions_z == (50.0,)

    def test_single_compartment_has_no_dividers(self):
        p = from_compartments(BoxParams(divisions_x=[50]), 1, 30, 30, 30)
        assert p.divisions_x == () and p.divisions_z == ()

    def test_from_printer_bed(self):
        p = from_printer_bed(BoxParams(), 256, 256)
        assert (p.width, p.depth, p.height) == (205, 205, 103)
        p = from_printer_bed(BoxParams(), 250, 210)
        assert (p.width, p.depth, p.height) == (200, 168, 84)

    def test_parse_sizes(self):
        assert parse_sizes("51, 45, x, -3, 29") == [51.0, 45.0, 29.0]
        assert parse_sizes("") == []

    def test_from_division_sizes(self):
        p = from_division_sizes(BoxParams(divisions_x=[50]), [51, 45, 29], 2)
        assert p.depth == 133
        assert p.wall_thickness == 2
        assert p.divisions_x == ()
        assert p.divisions_z == (41.0, 77.0)

    def test_from_division_sizes_empty(self):
        with pytest.raises(ValueError):
            from_division_sizes(BoxParams(), [], 2)
