"""
Direct construction of the box solid.

The box is emitted face by face on a breakpoint grid (see ``grid_builder``):
no boolean operations, closed by construction. Box frame: X/Y centred,
outer bottom at Z = 0, rim at Z = height, back wall at +Y.
"""
import logging

from box_params import EPS, BoxParams
from grid_builder import GridFeatures, GridMeshBuilder, breakpoints
from mesh_types import PolygonMesh

logger = logging.getLogger(__name__)


def build_box(params: BoxParams) -> PolygonMesh:
    """Build the hollow box with optional dividers and corner chamfer."""
    features = GridFeatures.for_box(params)
    w2, d2 = params.width / 2, params.depth / 2
    iw2, id2 = params.inner_width / 2, params.inner_depth / 2
    h = params.height
    floor_z = params.wall_thickness

    # Inner breakpoints: cavity edges split at divider faces
    x_in = breakpoints([-iw2, *features.x_band_edges(), iw2])
    y_in = breakpoints([-id2, *features.y_band_edges(), id2])
    # Full breakpoints add the outer edges and chamfer insets
    x_all = breakpoints([-w2, *features.chamfer_edges(w2), *x_in, w2])
    y_all = breakpoints([-d2, *features.chamfer_edges(d2), *y_in, d2])

    b = GridMeshBuilder(w2, d2, features)
    nx, ny = len(x_all) - 1, len(y_all) - 1

    def is_cavity(x0, x1, y0, y1):
        inside = (x0 >= -iw2 - EPS and x1 <= iw2 + EPS
                  and y0 >= -id2 - EPS and y1 <= id2 + EPS)
        return inside and not features.in_x_band(x0, x1) and not features.in_y_band(y0, y1)

    # Outer bottom (N = -Z) and top surface (N = +Z, rim + divider tops)
    for i in range(nx):
        for j in range(ny):
            x0, x1, y0, y1 = x_all[i], x_all[i + 1], y_all[j], y_all[j + 1]
            outline = b.cell_outline(x0, x1, y0, y1, cut=b.corner_of(i, j, nx, ny))
            b.face_down(outline, 0.0)
            if not is_cavity(x0, x1, y0, y1):
                b.face_up(outline, h)

    # Outer side walls, trimmed and closed by diagonal strips when chamfered
    b.outer_walls(x_all, y_all, 0.0, lambda side, k: h)
    b.chamfer_strips(0.0, h)

    # Inner floor (N = +Z), cavity cells only
    b.grid(x_in, y_in,
           lambda x0, x1, y0, y1: b.face_up(b.cell_outline(x0, x1, y0, y1), floor_z),
           lambda x0, x1, y0, y1: features.in_x_band(x0, x1) or features.in_y_band(y0, y1))

    # Inner walls, skipping where a divider fuses into them
    for k in range(len(x_in) - 1):
        x0, x1 = x_in[k], x_in[k + 1]
        if features.in_x_band(x0, x1):
            continue
        b.wall((x1, -id2), (x0, -id2), floor_z, h)   # front inner, N = +Y
        b.wall((x0, id2), (x1, id2), floor_z, h)     # back inner, N = -Y
    for k in range(len(y_in) - 1):
        y0, y1 = y_in[k], y_in[k + 1]
        if features.in_y_band(y0, y1):
            continue
        b.wall((-iw2, y0), (-iw2, y1), floor_z, h)   # left inner, N = +X
        b.wall((iw2, y1), (iw2, y0), floor_z, h)     # right inner, N = -X

    # Divider faces, skipping bands where a crossing divider runs through
    half = features.band_half_width
    for xd in features.x_bands:
        xl, xr = xd - half, xd + half
        for k in range(len(y_in) - 1):
            y0, y1 = y_in[k], y_in[k + 1]
            if features.in_y_band(y0, y1):
                continue
            b.wall((xl, y1), (xl, y0), floor_z, h)
            b.wall((xr, y0), (xr, y1), floor_z, h)
    for yd in features.y_bands:
        yf, yb = yd - half, yd + half
        for k in range(len(x_in) - 1):
            x0, x1 = x_in[k], x_in[k + 1]
            if features.in_x_band(x0, x1):
                continue
            b.wall((x0, yf), (x1, yf), floor_z, h)
            b.wall((x1, yb), (x0, yb), floor_z, h)

    logger.debug(
        "Box %s: %d x %d grid, %d dividers, %d faces",
        params.dimension_tag(), nx, ny,
        len(features.x_bands) + len(features.y_bands), len(b.mesh),
    )
    return b.mesh
