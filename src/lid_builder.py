"""
Lid construction.

Without text the lid is built directly as a heightmap on a breakpoint grid:
every cell gets a constant top height (0 for the cap, the lip height for lip
wall), and vertical step faces are emitted wherever neighbouring cells
differ. The step faces form the lip walls, the hollow and the divider
notches with no boolean subtraction.

With text the carved / raised glyphs are not a per-cell constant height, so
``build_lid`` hands over to the CSG path in ``lid_csg``.

Lid frame (print orientation): X/Y centred, cap top at Z = 0, cap bottom at
Z = -wall_thickness, lip rising to Z = +lip_height.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from box_params import EPS, BoxParams
from csg_engine import CsgNode
from grid_builder import GridFeatures, GridMeshBuilder, breakpoints
from mesh_types import PolygonMesh

logger = logging.getLogger(__name__)

# Below this a lip or its hollow is treated as absent
MIN_LIP_EXTENT = 0.01


@dataclass(frozen=True)
class LipGeometry:
    """Half extents of the lip that seats inside the box opening."""
    outer_half_width: float
    outer_half_depth: float
    inner_half_width: float
    inner_half_depth: float
    height: float
    slot_width: float

    @classmethod
    def from_params(cls, params: BoxParams) -> "LipGeometry":
        wt, tol = params.wall_thickness, params.lid_tolerance
        outer_w2 = max(0.0, params.width / 2 - wt - tol)
        outer_d2 = max(0.0, params.depth / 2 - wt - tol)
        return cls(
            outer_half_width=outer_w2,
            outer_half_depth=outer_d2,
            inner_half_width=max(0.0, outer_w2 - wt),
            inner_half_depth=max(0.0, outer_d2 - wt),
            height=params.lip_height,
            slot_width=wt + 2 * tol,
        )

    @property
    def has_lip(self) -> bool:
        return self.outer_half_width > MIN_LIP_EXTENT and self.outer_half_depth > MIN_LIP_EXTENT

    @property
    def has_hollow(self) -> bool:
        return self.inner_half_width > MIN_LIP_EXTENT and self.inner_half_depth > MIN_LIP_EXTENT


def build_lid(params: BoxParams, text_solid: Optional[CsgNode] = None) -> PolygonMesh:
    """Build the lid; text geometry forces the CSG path.

    Args:
        params: design parameters.
        text_solid: rasterized text (see ``text_raster.text_to_solid``), or
            None for a plain lid.
    """
    if text_solid is None:
        return build_flat_lid(params)
    from lid_csg import build_lid_csg
    return build_lid_csg(params, text_solid)


def build_flat_lid(params: BoxParams) -> PolygonMesh:
    """Heightmap lid: cap, lip, hollow, notches, hinge clearance, chamfer."""
    features = GridFeatures.for_lid(params)
    lip = LipGeometry.from_params(params)
    w2, d2 = params.width / 2, params.depth / 2
    wt = params.wall_thickness
    lh = lip.height

    x_set: List[float] = [-w2, w2, *features.chamfer_edges(w2)]
    y_set: List[float] = [-d2, d2, *features.chamfer_edges(d2)]
    if lip.has_lip:
        # Notches only cut the lip; band edges past it stay off the grid
        x_set += [-lip.outer_half_width, lip.outer_half_width,
                  *features.x_band_edges(lip.outer_half_width)]
        y_set += [-lip.outer_half_depth, lip.outer_half_depth,
                  *features.y_band_edges(lip.outer_half_depth)]
        if lip.has_hollow:
            x_set += [-lip.inner_half_width, lip.inner_half_width]
            y_set += [-lip.inner_half_depth, lip.inner_half_depth]
        if features.hinge_clearance:
            y_set.append(0.0)
    xs = breakpoints(x_set)
    ys = breakpoints(y_set)
    nx, ny = len(xs) - 1, len(ys) - 1

    def cell_top(i: int, j: int) -> float:
        if not lip.has_lip:
            return 0.0
        mx = (xs[i] + xs[i + 1]) / 2
        my = (ys[j] + ys[j + 1]) / 2
        # Wing outside the lip
        if abs(mx) > lip.outer_half_width + EPS or abs(my) > lip.outer_half_depth + EPS:
            return 0.0
        # Hollow inside the lip
        if lip.has_hollow and (abs(mx) < lip.inner_half_width - EPS
                               and abs(my) < lip.inner_half_depth - EPS):
            return 0.0
        # Back half cleared so the lid can swing open on its hinge
        if features.hinge_clearance and my > 0:
            return 0.0
        if features.in_x_band(xs[i], xs[i + 1]) or features.in_y_band(ys[j], ys[j + 1]):
            return 0.0
        return lh

    tops = [[cell_top(i, j) for j in range(ny)] for i in range(nx)]

    b = GridMeshBuilder(w2, d2, features)

    # Bottom (Z = -wt, N = -Z) and per-cell tops (N = +Z)
    for i in range(nx):
        for j in range(ny):
            corner = b.corner_of(i, j, nx, ny)
            outline = b.cell_outline(xs[i], xs[i + 1], ys[j], ys[j + 1], cut=corner)
            b.face_down(outline, -wt)
            b.face_up(outline, tops[i][j])

    # Outer boundary walls rise to each boundary cell's height
    def boundary_top(side: str, k: int) -> float:
        if side == "front":
            return tops[k][0]
        if side == "back":
            return tops[k][ny - 1]
        if side == "left":
            return tops[0][k]
        return tops[nx - 1][k]

    b.outer_walls(xs, ys, -wt, boundary_top)
    # Chamfered corners are always wing, so the strips stop at the cap top
    b.chamfer_strips(-wt, 0.0)

    # Step faces between columns i and i + 1
    for i in range(nx - 1):
        x = xs[i + 1]
        for j in range(ny):
            if b.corner_of(i, j, nx, ny) or b.corner_of(i + 1, j, nx, ny):
                continue
            t_left, t_right = tops[i][j], tops[i + 1][j]
            if abs(t_left - t_right) < EPS:
                continue
            lo, hi = min(t_left, t_right), max(t_left, t_right)
            y0, y1 = ys[j], ys[j + 1]
            if t_left > t_right:
                b.wall((x, y0), (x, y1), lo, hi)    # N = +X
            else:
                b.wall((x, y1), (x, y0), lo, hi)    # N = -X

    # Step faces between rows j and j + 1
    for j in range(ny - 1):
        y = ys[j + 1]
        for i in range(nx):
            if b.corner_of(i, j, nx, ny) or b.corner_of(i, j + 1, nx, ny):
                continue
            t_front, t_back = tops[i][j], tops[i][j + 1]
            if abs(t_front - t_back) < EPS:
                continue
            lo, hi = min(t_front, t_back), max(t_front, t_back)
            x0, x1 = xs[i], xs[i + 1]
            if t_front > t_back:
                b.wall((x1, y), (x0, y), lo, hi)    # N = +Y
            else:
                b.wall((x0, y), (x1, y), lo, hi)    # N = -Y

    logger.debug(
        "Flat lid %s: %d x %d grid, lip %.2f mm, %d faces",
        params.dimension_tag(), nx, ny, lh, len(b.mesh),
    )
    return b.mesh
