"""
Lid construction through CSG, used when the lid carries text.

The tree is assembled directly in the lid frame (cap top at Z = 0, cap
bottom at Z = -wall_thickness, lip up to +lip_height), so the evaluated mesh
lines up with the flat-lid builder without any final shift. Every cut into
the lip band starts exactly at the cap top and never touches the cap.
"""
import logging
from typing import List, Optional

from box_params import BoxParams
from csg_engine import Block, CsgNode, ExtrudedPolygon, Subtract, Union, evaluate, translate
from lid_builder import LipGeometry
from mesh_types import PolygonMesh
from text_raster import TEXT_OVERLAP

logger = logging.getLogger(__name__)

# Cutters run past the faces they open so no coplanar sliver survives
CUT_MARGIN = 0.1


def build_lid_tree(params: BoxParams, text_solid: Optional[CsgNode] = None) -> CsgNode:
    """CSG tree of the lid, with the text mirrored so it reads from above."""
    lip = LipGeometry.from_params(params)
    wt, lh = params.wall_thickness, lip.height
    w, d = params.width, params.depth

    band_h = lh + 2 * CUT_MARGIN
    band_z = lh / 2 + CUT_MARGIN      # band cutters span Z in [0, lh + 2 margin]

    lid: CsgNode = Block((w, d, wt + lh), (0.0, 0.0, (lh - wt) / 2))
    cuts: List[CsgNode] = []

    # Everything above the cap outside the lip footprint
    step = Block((w + 1.0, d + 1.0, band_h), (0.0, 0.0, band_z))
    if lip.has_lip:
        lip_w, lip_d = 2 * lip.outer_half_width, 2 * lip.outer_half_depth
        keep = Block((lip_w, lip_d, band_h + 2 * CUT_MARGIN), (0.0, 0.0, band_z))
        cuts.append(Subtract(step, (keep,)))
        if lip.has_hollow:
            cuts.append(Block(
                (2 * lip.inner_half_width, 2 * lip.inner_half_depth, band_h),
                (0.0, 0.0, band_z),
            ))
        if params.include_hinge:
            half_d = lip.outer_half_depth + CUT_MARGIN
            cuts.append(Block((lip_w + 2 * CUT_MARGIN, half_d, band_h), (0.0, half_d / 2, band_z)))
        sw = lip.slot_width
        for x in params.divider_positions_x():
            cuts.append(Block((sw, lip_d + 2 * CUT_MARGIN, band_h), (x, 0.0, band_z)))
        for y in params.divider_positions_y():
            cuts.append(Block((lip_w + 2 * CUT_MARGIN, sw, band_h), (0.0, y, band_z)))
    else:
        cuts.append(step)

    c = params.chamfer
    if c > 0:
        for sx in (-1, 1):
            for sy in (-1, 1):
                cuts.append(ExtrudedPolygon(
                    _corner_triangle(sx * w / 2, sy * d / 2, sx, sy, c),
                    wt + lh + 2.0,
                    -wt - 1.0,
                ))

    lid = Subtract(lid, tuple(cuts))

    if text_solid is not None:
        mirrored = text_solid.mirror_x()
        if params.lid_text_style == "engraved":
            lid = Subtract(lid, (translate(mirrored, (0.0, 0.0, -wt - TEXT_OVERLAP)),))
        else:
            lid = Union((lid, translate(mirrored, (0.0, 0.0, -wt - params.lid_text_depth))))
    return lid


def build_lid_csg(params: BoxParams, text_solid: Optional[CsgNode] = None) -> PolygonMesh:
    mesh = evaluate(build_lid_tree(params, text_solid))
    logger.debug("CSG lid %s (%s text): %d triangles",
                 params.dimension_tag(), params.lid_text_style, len(mesh))
    return mesh


def _corner_triangle(px: float, py: float, sx: int, sy: int, c: float):
    """Triangle cutting the 45 degree chamfer off corner (px, py).

    The cut edge runs along the chamfer diagonal but is extended past both
    outer faces, and the opposite tip sits outside the corner.
    """
    m = CUT_MARGIN
    a = (px - sx * (c + m), py + sy * m)    # on the diagonal, beyond the X face
    b = (px + sx * m, py - sy * (c + m))    # on the diagonal, beyond the Y face
    tip = (px + sx * m, py + sy * m)
    return _ccw((tip, a, b))


def _ccw(points):
    (x0, y0), (x1, y1), (x2, y2) = points
    cross = (x1 - x0) * (y2 - y0) - (y1 - y0) * (x2 - x0)
    return tuple(points) if cross > 0 else tuple(reversed(points))
