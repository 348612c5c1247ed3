"""Tests for box_params module."""
import pytest

from box_params import BoxParams, ParameterError, divider_positions


class TestDefaults:
    """Defaults match the saved-project defaults."""

    def test_default_dimensions(self):
        p = BoxParams()
        assert (p.width, p.depth, p.height, p.wall_thickness) == (80.0, 60.0, 40.0, 2.0)
        assert p.include_lid is False
        assert p.lid_height == 5.0
        assert p.lid_tolerance == pytest.approx(0.3)
        assert p.lid_text_style == "engraved"
        assert p.hinge_count == 1
        assert p.divisions_x == () and p.divisions_z == ()

    def test_inner_dimensions(self):
        p = BoxParams()
        assert p.inner_width == 76.0
        assert p.inner_depth == 56.0

    def test_record_is_hashable_and_immutable(self):
        p = BoxParams(divisions_x=[25, 75])
        assert p.divisions_x == (25.0, 75.0)
        assert hash(p) == hash(BoxParams(divisions_x=(25, 75)))
        with pytest.raises(Exception):
            p.width = 10


class TestValidation:
    """Malformed records are rejected with ParameterError."""

    @pytest.mark.parametrize("kwargs", [
        {"width": 0},
        {"height": -5},
        {"width": float("nan")},
        {"wall_thickness": 40},
        {"height": 2},
        {"lid_tolerance": -0.1},
        {"lid_text_style": "bold"},
        {"hinge_count": 4},
        {"hinge_pin_diameter": 8.0},
        {"divisions_x": [0]},
        {"divisions_z": [100]},
    ])
    def test_rejects(self, kwargs):
        with pytest.raises(ParameterError):
            BoxParams(**kwargs)

    def test_parameter_error_is_value_error(self):
        with pytest.raises(ValueError):
            BoxParams(width=-1)

    def test_validate_lists_every_issue(self):
        p = BoxParams()
        assert p.validate() == []


class TestDerivedValues:
    """Clamped chamfer, clamped lip, divider coordinates."""

    def test_chamfer_clamped_to_wall(self):
        assert BoxParams(chamfer_size=10).chamfer == 2.0
        assert BoxParams(chamfer_size=0.5).chamfer == 0.5
        assert BoxParams().chamfer == 0.0

    def test_chamfer_clamped_to_quarter_footprint(self):
        p = BoxParams(width=12, depth=30, wall_thickness=4, chamfer_size=4)
        assert p.chamfer == 3.0

    def test_lip_height_clamped_above_floor(self):
        p = BoxParams(height=5, lid_height=10)
        assert p.lip_height == 3.0
        assert BoxParams().lip_height == 5.0

    def test_divider_at_half_width_is_centred(self):
        p = BoxParams(divisions_x=[50])
        assert p.divider_positions_x() == [pytest.approx(0.0)]

    def test_divisions_sorted(self):
        p = BoxParams(divisions_x=[75, 25])
        xs = p.divider_positions_x()
        assert xs == sorted(xs)
        assert xs[0] == pytest.approx(-19.0)
        assert xs[1] == pytest.approx(19.0)

    def test_duplicate_divider_dropped(self):
        assert divider_positions([50, 50], 76, 2) == [pytest.approx(0.0)]

    def test_overlapping_divider_dropped(self):
        # 51 % sits 0.76 mm from the 50 % divider, less than one wall
        assert divider_positions([50, 51], 76, 2) == [pytest.approx(0.0)]

    def test_divider_into_outer_wall_dropped(self):
        # 1 % of 76 mm puts the wall band past the inner edge
        assert divider_positions([1, 50], 76, 2) == [pytest.approx(0.0)]

    def test_has_text(self):
        assert not BoxParams(lid_text="   ").has_text
        assert BoxParams(lid_text="TOOLS").has_text


class TestConversion:
    """from_dict / to_dict and file name tags."""

    def test_from_dict_camel_case(self):
        p = BoxParams.from_dict({
            "wallThickness": 3,
            "divisionsX": [50],
            "includeLid": True,
            "lidTextStyle": "embossed",
            "hingeCount": 2.0,
            "somethingElse": 1,
        })
        assert p.wall_thickness == 3
        assert p.divisions_x == (50.0,)
        assert p.include_lid is True
        assert p.lid_text_style == "embossed"
        assert p.hinge_count == 2

    def test_round_trip(self):
        p = BoxParams(width=100, divisions_z=[30, 60], lid_text="A", include_lid=True)
        assert BoxParams.from_dict(p.to_dict()) == p

    def test_to_dict_uses_lists(self):
        data = BoxParams(divisions_x=[50]).to_dict()
        assert data["divisions_x"] == [50.0]
        assert data["wall_thickness"] == 2.0

    def test_dimension_tag(self):
        assert BoxParams().dimension_tag() == "80x60x40"
        assert BoxParams(width=80.5).dimension_tag() == "80.5x60x40"
