"""
Dimension calculators.

Quick ways to arrive at a parameter record: from a target volume, from a
grid of equal compartments, from a printer bed, or from a list of
compartment sizes along the depth. Each returns a new BoxParams based on the
one passed in.
"""
import logging
import math
from dataclasses import replace
from typing import List, Sequence

from box_params import BoxParams

logger = logging.getLogger(__name__)

# Fraction of the printer bed used, leaving room for brim and skirt
BED_MARGIN = 0.8


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def even_positions(count: int) -> List[int]:
    """*count* divider percentages splitting an axis into equal parts."""
    return [_round_half_up((i + 1) * 100 / (count + 1)) for i in range(count)]


def from_volume(params: BoxParams, volume_cm3: float) -> BoxParams:
    """Outer dimensions 1.2 : 1 : 0.8 around the cube root of the volume."""
    if volume_cm3 <= 0:
        raise ValueError(f"volume must be positive, got {volume_cm3}")
    side = (volume_cm3 * 1000.0) ** (1.0 / 3.0)
    return replace(
        params,
        width=_round_half_up(side * 1.2),
        depth=_round_half_up(side),
        height=_round_half_up(side * 0.8),
    )


def compartment_grid(count: int):
    """(columns, rows) of the near-square grid holding *count* compartments."""
    cols = math.ceil(math.sqrt(count))
    rows = math.ceil(count / cols)
    return cols, rows


def from_compartments(
    params: BoxParams,
    count: int,
    item_width: float,
    item_depth: float,
    item_height: float,
) -> BoxParams:
    """Size the box around a grid of *count* item-sized compartments."""
    if count < 1:
        raise ValueError(f"compartment count must be >= 1, got {count}")
    wt = params.wall_thickness
    cols, rows = compartment_grid(count)
    width = item_width * cols + wt * (cols + 1)
    depth = item_depth * rows + wt * (rows + 1)
    return replace(
        params,
        width=_round_half_up(width),
        depth=_round_half_up(depth),
        height=_round_half_up(item_height + wt),
        divisions_x=even_positions(cols - 1) if count > 1 else (),
        divisions_z=even_positions(rows - 1) if count > cols else (),
    )


def from_printer_bed(params: BoxParams, bed_x: float, bed_y: float) -> BoxParams:
    """Largest comfortable box for a bed, half as tall as its short side."""
    width = _round_half_up(bed_x * BED_MARGIN)
    depth = _round_half_up(bed_y * BED_MARGIN)
    return replace(
        params,
        width=width,
        depth=depth,
        height=_round_half_up(min(width, depth) * 0.5),
    )


def parse_sizes(text: str) -> List[float]:
    """Comma separated sizes; blanks, junk and non-positive values are skipped."""
    sizes = []
    for item in text.split(","):
        try:
            value = float(item.strip())
        except ValueError:
            continue
        if value > 0 and math.isfinite(value):
            sizes.append(value)
    return sizes


def from_division_sizes(
    params: BoxParams,
    sizes: Sequence[float],
    wall_thickness: float,
) -> BoxParams:
    """Lay compartments of the given sizes along the depth.

    Depth becomes the sizes plus one wall between and around them; X dividers
    are cleared.
    """
    if not sizes:
        raise ValueError("Please enter valid division sizes")
    total = sum(sizes) + (len(sizes) + 1) * wall_thickness
    positions = []
    pos = wall_thickness
    for size in sizes[:-1]:
        pos += size + wall_thickness
        positions.append(_round_half_up(pos / total * 100))
    logger.debug("Division sizes %s -> depth %.1f, positions %s", list(sizes), total, positions)
    return replace(
        params,
        depth=_round_half_up(total),
        wall_thickness=wall_thickness,
        divisions_x=(),
        divisions_z=positions,
    )
