"""Tests for text_raster module."""
import numpy as np
import pytest

from box_params import BoxParams
from csg_engine import Block, count_nodes, tree_depth
from text_raster import (
    TEXT_OVERLAP,
    InkRun,
    RasterConfig,
    find_ink_runs,
    lid_text_solid,
    render_text,
    runs_to_blocks,
    text_to_solid,
)


class TestInkRuns:
    """Run-length encoding of thresholded rows."""

    def test_runs_per_row(self):
        pixels = np.array([
            [255, 0, 0, 255, 0],
            [255, 255, 255, 255, 255],
            [0, 0, 0, 0, 0],
        ], dtype=np.uint8)
        runs = find_ink_runs(pixels)
        assert runs == [
            InkRun(row=0, start=1, length=2),
            InkRun(row=0, start=4, length=1),
            InkRun(row=2, start=0, length=5),
        ]

    def test_threshold(self):
        pixels = np.array([[127, 128, 200]], dtype=np.uint8)
        assert find_ink_runs(pixels) == [InkRun(0, 0, 1)]
        assert find_ink_runs(pixels, threshold=129) == [InkRun(0, 0, 2)]

    def test_blank(self):
        assert find_ink_runs(np.full((4, 4), 255, dtype=np.uint8)) == []


class TestBlocks:
    """Runs become blocks in millimetres, canvas centred, +Y up the image."""

    def test_block_placement(self):
        blocks = runs_to_blocks([InkRun(row=0, start=0, length=2)], (2, 4), 1.0)
        assert blocks == [Block((1.0, 0.5, 1.0), (-0.5, 0.25, 0.5))]

    def test_last_row_is_front(self):
        (block,) = runs_to_blocks([InkRun(row=1, start=3, length=1)], (2, 4), 0.5)
        assert block.center == pytest.approx((0.75, -0.25, 0.25))


class TestRender:
    """Pillow rendering onto the lid-sized canvas."""

    def test_canvas_size(self):
        pixels = render_text("AB", 80, 60, 16)
        assert pixels.shape == (120, 160)
        assert pixels.dtype == np.uint8

    def test_text_is_centred(self):
        pixels = render_text("HH", 80, 60, 16)
        rows, cols = np.nonzero(pixels < 128)
        assert len(cols) > 0
        assert (cols.min() + cols.max()) / 2 == pytest.approx(80, abs=3)
        assert (rows.min() + rows.max()) / 2 == pytest.approx(60, abs=5)

    def test_pixel_density(self):
        pixels = render_text("A", 40, 30, 10, RasterConfig(pixels_per_mm=4))
        assert pixels.shape == (120, 160)


class TestTextToSolid:
    """Blank text gives None; ink gives a balanced union of blocks."""

    def test_blank_text(self):
        assert text_to_solid("", 80, 60, 16, 1.0) is None
        assert text_to_solid("   ", 80, 60, 16, 1.0) is None

    def test_zero_extrusion(self):
        assert text_to_solid("A", 80, 60, 16, 0.0) is None

    def test_balanced_union(self):
        pixels = render_text("Hi", 80, 60, 16)
        n_runs = len(find_ink_runs(pixels))
        solid = text_to_solid("Hi", 80, 60, 16, 1.0)
        assert solid is not None
        assert count_nodes(solid) == 2 * n_runs - 1
        assert tree_depth(solid) == 1 + int(np.ceil(np.log2(n_runs)))

    def test_lid_text_solid_depth(self):
        solid = lid_text_solid(BoxParams(include_lid=True, lid_text="X"))
        leaf = solid
        while not isinstance(leaf, Block):
            leaf = leaf.operands[0]
        assert leaf.size[2] == pytest.approx(0.8 + TEXT_OVERLAP)

    def test_lid_text_solid_none(self):
        assert lid_text_solid(BoxParams(include_lid=True)) is None
        assert lid_text_solid(BoxParams(include_lid=True, lid_text="X", lid_text_depth=0)) is None
