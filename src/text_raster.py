"""
Raster text to solid.

The lid text is drawn with Pillow onto a white canvas the size of the lid
footprint (PIXELS_PER_MM pixels per millimetre), thresholded, and turned into
one thin block per horizontal run of ink pixels. The blocks are merged by a
balanced union so the boolean backend never sees a long chain.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from box_params import BoxParams
from csg_engine import Block, CsgNode, Union, tree_reduce

logger = logging.getLogger(__name__)

PIXELS_PER_MM = 2.0
INK_THRESHOLD = 128

# Extra extrusion so engraved text breaks cleanly through the cap surface
# and embossed text fuses into it instead of touching along one plane.
TEXT_OVERLAP = 0.05

# Bold sans-serif faces tried in order; names resolve through Pillow's font
# search path, so bare file names work on most desktops.
BOLD_SANS_FONTS = (
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "arialbd.ttf",
    "Arial Bold.ttf",
    "Helvetica-Bold.ttf",
)


@dataclass
class RasterConfig:
    """How lid text is rasterized."""
    pixels_per_mm: float = PIXELS_PER_MM
    ink_threshold: int = INK_THRESHOLD
    font_path: Optional[str] = None   # tried before the built-in list


@dataclass(frozen=True)
class InkRun:
    """Horizontal run of ink pixels: *length* pixels from column *start*."""
    row: int
    start: int
    length: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def load_bold_font(size_px: int, font_path: Optional[str] = None):
    candidates = ([font_path] if font_path else []) + list(BOLD_SANS_FONTS)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size_px)
        except OSError:
            continue
    logger.warning("No bold sans-serif font found, using Pillow's default font")
    return ImageFont.load_default(size=size_px)


def render_text(
    text: str,
    width_mm: float,
    depth_mm: float,
    font_size_mm: float,
    config: Optional[RasterConfig] = None,
) -> np.ndarray:
    """Draw *text* centred on a white canvas covering the lid footprint.

    Returns:
        (rows, cols) uint8 luminance array, ink dark on white.
    """
    config = config or RasterConfig()
    ppm = config.pixels_per_mm
    cols = max(1, _round_half_up(width_mm * ppm))
    rows = max(1, _round_half_up(depth_mm * ppm))
    font = load_bold_font(max(1, _round_half_up(font_size_mm * ppm)), config.font_path)

    image = Image.new("L", (cols, rows), 255)
    draw = ImageDraw.Draw(image)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    origin = ((cols - (right - left)) / 2 - left, (rows - (bottom - top)) / 2 - top)
    draw.text(origin, text, fill=0, font=font)
    return np.asarray(image, dtype=np.uint8)


def find_ink_runs(pixels: np.ndarray, threshold: int = INK_THRESHOLD) -> List[InkRun]:
    """Row-major list of maximal ink runs (luminance below *threshold*)."""
    runs: List[InkRun] = []
    ink = pixels < threshold
    for row_idx, row in enumerate(ink):
        padded = np.concatenate(([0], row.astype(np.int8), [0]))
        edges = np.diff(padded)
        starts = np.flatnonzero(edges == 1)
        ends = np.flatnonzero(edges == -1)
        for start, end in zip(starts, ends):
            runs.append(InkRun(row=row_idx, start=int(start), length=int(end - start)))
    return runs


def runs_to_blocks(
    runs: Sequence[InkRun],
    canvas_shape,
    extrusion: float,
    pixels_per_mm: float = PIXELS_PER_MM,
) -> List[Block]:
    """One block per run, centred on the canvas, Z from 0 to *extrusion*.

    Canvas row 0 is the back edge of the lid (+Y).
    """
    rows, cols = canvas_shape
    mm = 1.0 / pixels_per_mm
    half_w, half_d = cols * mm / 2, rows * mm / 2
    blocks = []
    for run in runs:
        x = (run.start + run.length / 2) * mm - half_w
        y = half_d - (run.row + 0.5) * mm
        blocks.append(Block((run.length * mm, mm, extrusion), (x, y, extrusion / 2)))
    return blocks


def text_to_solid(
    text: str,
    width_mm: float,
    depth_mm: float,
    font_size_mm: float,
    extrusion: float,
    config: Optional[RasterConfig] = None,
) -> Optional[CsgNode]:
    """Rasterize *text* into a solid centred on X/Y with Z in [0, extrusion].

    Returns None for blank text or text that leaves no ink on the canvas.
    """
    if not text.strip() or extrusion <= 0:
        return None
    config = config or RasterConfig()
    pixels = render_text(text, width_mm, depth_mm, font_size_mm, config)
    runs = find_ink_runs(pixels, config.ink_threshold)
    if not runs:
        logger.warning("Text %r produced no ink on a %dx%d canvas", text, pixels.shape[1], pixels.shape[0])
        return None
    blocks = runs_to_blocks(runs, pixels.shape, extrusion, config.pixels_per_mm)
    solid, rounds = tree_reduce(blocks, lambda a, b: Union((a, b)))
    logger.debug("Text %r: %d ink runs merged in %d rounds", text, len(runs), rounds)
    return solid


def lid_text_solid(params: BoxParams, config: Optional[RasterConfig] = None) -> Optional[CsgNode]:
    """Text solid for the lid, extruded by the text depth plus TEXT_OVERLAP."""
    if not params.has_text or params.lid_text_depth <= 0:
        return None
    return text_to_solid(
        params.lid_text,
        params.width,
        params.depth,
        params.lid_text_size,
        params.lid_text_depth + TEXT_OVERLAP,
        config,
    )
