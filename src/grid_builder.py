"""
Breakpoint-grid mesh construction shared by the box and lid builders.

Both direct builders lay a rectangular grid over the part footprint whose
lines fall on every feature edge (outer wall, inner wall, divider or notch
band, chamfer inset), then emit faces cell by cell. Because neighbouring faces
are cut at the same breakpoints, edges match exactly and the result is closed
without any boolean operation.

Winding rules used throughout:
  - horizontal faces list their outline counter-clockwise seen from the side
    the normal points to (``face_up`` / ``face_down``);
  - vertical faces are emitted with ``wall(p0, p1, z0, z1)``, whose outward
    normal points to the right of the 2D direction p0 -> p1.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from box_params import EPS, BoxParams
from mesh_types import PolygonMesh

Point2 = Tuple[float, float]

# Corner of the footprint a chamfer cuts: (-1 | 1, -1 | 1) for (x side, y side)
Corner = Tuple[int, int]


def breakpoints(values: Iterable[float], eps: float = EPS) -> List[float]:
    """Sort coordinates and merge any closer together than *eps*."""
    merged: List[float] = []
    for v in sorted(values):
        if merged and v - merged[-1] < eps:
            continue
        merged.append(float(v))
    return merged


def in_band(lo: float, hi: float, centres: Sequence[float], half_width: float) -> bool:
    """True if the midpoint of [lo, hi] lies strictly inside any band."""
    mid = (lo + hi) / 2
    return any(abs(mid - c) < half_width - EPS for c in centres)


def _edges_within(centres: Sequence[float], half_width: float,
                  limit: Optional[float]) -> List[float]:
    edges = [e for c in centres for e in (c - half_width, c + half_width)]
    if limit is None:
        return edges
    # Edges at or beyond the limit would push grid lines off the footprint
    return [e for e in edges if abs(e) < limit - EPS]


@dataclass(frozen=True)
class GridFeatures:
    """Optional features a grid-built part carries.

    Attributes:
        chamfer: clamped size of the 45 degree cut on the vertical corners.
        x_bands / y_bands: centre coordinates of divider (box) or notch (lid)
            bands, running across X and Y respectively.
        band_half_width: half thickness of every band.
        hinge_clearance: lid only; clear the back half (+Y) of the lip.
    """
    chamfer: float = 0.0
    x_bands: Tuple[float, ...] = ()
    y_bands: Tuple[float, ...] = ()
    band_half_width: float = 0.0
    hinge_clearance: bool = False

    @classmethod
    def for_box(cls, params: BoxParams) -> "GridFeatures":
        return cls(
            chamfer=params.chamfer,
            x_bands=tuple(params.divider_positions_x()),
            y_bands=tuple(params.divider_positions_y()),
            band_half_width=params.wall_thickness / 2,
        )

    @classmethod
    def for_lid(cls, params: BoxParams) -> "GridFeatures":
        slot_width = params.wall_thickness + 2 * params.lid_tolerance
        return cls(
            chamfer=params.chamfer,
            x_bands=tuple(params.divider_positions_x()),
            y_bands=tuple(params.divider_positions_y()),
            band_half_width=slot_width / 2,
            hinge_clearance=params.include_hinge,
        )

    def in_x_band(self, x0: float, x1: float) -> bool:
        return in_band(x0, x1, self.x_bands, self.band_half_width)

    def in_y_band(self, y0: float, y1: float) -> bool:
        return in_band(y0, y1, self.y_bands, self.band_half_width)

    def x_band_edges(self, limit: Optional[float] = None) -> List[float]:
        """Band edges across X; with *limit*, only those strictly inside ±limit."""
        return _edges_within(self.x_bands, self.band_half_width, limit)

    def y_band_edges(self, limit: Optional[float] = None) -> List[float]:
        return _edges_within(self.y_bands, self.band_half_width, limit)

    def chamfer_edges(self, half_extent: float) -> List[float]:
        if self.chamfer <= 0:
            return []
        return [-half_extent + self.chamfer, half_extent - self.chamfer]


class GridMeshBuilder:
    """Accumulates faces for one grid-built solid."""

    def __init__(self, half_width: float, half_depth: float, features: GridFeatures):
        self.w2 = half_width
        self.d2 = half_depth
        self.features = features
        self.mesh = PolygonMesh()

    # ─── Primitive faces ────────────────────────────────────────────────

    def face_up(self, outline: Sequence[Point2], z: float) -> None:
        self.mesh.add([(x, y, z) for x, y in outline])

    def face_down(self, outline: Sequence[Point2], z: float) -> None:
        self.mesh.add([(x, y, z) for x, y in reversed(outline)])

    def wall(self, p0: Point2, p1: Point2, z0: float, z1: float) -> None:
        """Vertical quad over segment p0 -> p1, outward to its right."""
        (x0, y0), (x1, y1) = p0, p1
        self.mesh.add([(x0, y0, z0), (x1, y1, z0), (x1, y1, z1), (x0, y0, z1)])

    # ─── Grid helpers ───────────────────────────────────────────────────

    def grid(
        self,
        u_breaks: Sequence[float],
        v_breaks: Sequence[float],
        emit: Callable[[float, float, float, float], None],
        skip: Optional[Callable[[float, float, float, float], bool]] = None,
    ) -> None:
        """Call *emit* for every (u, v) cell not rejected by *skip*."""
        for i in range(len(u_breaks) - 1):
            for j in range(len(v_breaks) - 1):
                u0, u1 = u_breaks[i], u_breaks[i + 1]
                v0, v1 = v_breaks[j], v_breaks[j + 1]
                if skip is not None and skip(u0, u1, v0, v1):
                    continue
                emit(u0, u1, v0, v1)

    def cell_outline(
        self,
        x0: float, x1: float, y0: float, y1: float,
        cut: Optional[Corner] = None,
    ) -> List[Point2]:
        """Counter-clockwise cell outline, minus the chamfered corner if any."""
        corners = [((-1, -1), (x0, y0)), ((1, -1), (x1, y0)),
                   ((1, 1), (x1, y1)), ((-1, 1), (x0, y1))]
        return [pt for tag, pt in corners if tag != cut]

    def corner_of(self, i: int, j: int, nx: int, ny: int) -> Optional[Corner]:
        """Which footprint corner cell (i, j) of an nx * ny grid sits in."""
        if self.features.chamfer <= 0:
            return None
        sx = -1 if i == 0 else (1 if i == nx - 1 else 0)
        sy = -1 if j == 0 else (1 if j == ny - 1 else 0)
        if sx and sy:
            return (sx, sy)
        return None

    def at_outer_x(self, x0: float, x1: float) -> bool:
        return abs(x0 + self.w2) < EPS or abs(x1 - self.w2) < EPS

    def at_outer_y(self, y0: float, y1: float) -> bool:
        return abs(y0 + self.d2) < EPS or abs(y1 - self.d2) < EPS

    # ─── Outer shell pieces ─────────────────────────────────────────────

    def outer_walls(
        self,
        xs: Sequence[float],
        ys: Sequence[float],
        z0: float,
        top: Callable[[str, int], float],
    ) -> None:
        """Four outer side walls from *z0* up to ``top(side, cell_index)``.

        With a chamfer the first and last segment of each side are left out;
        ``chamfer_strips`` closes those corners.
        """
        w2, d2 = self.w2, self.d2
        trim = self.features.chamfer > 0
        for i in range(len(xs) - 1):
            if trim and i in (0, len(xs) - 2):
                continue
            x0, x1 = xs[i], xs[i + 1]
            self.wall((x0, -d2), (x1, -d2), z0, top("front", i))
            self.wall((x1, d2), (x0, d2), z0, top("back", i))
        for j in range(len(ys) - 1):
            if trim and j in (0, len(ys) - 2):
                continue
            y0, y1 = ys[j], ys[j + 1]
            self.wall((w2, y0), (w2, y1), z0, top("right", j))
            self.wall((-w2, y1), (-w2, y0), z0, top("left", j))

    def chamfer_strips(self, z0: float, z1: float) -> None:
        """Diagonal faces replacing the four vertical outer corners."""
        c = self.features.chamfer
        if c <= 0:
            return
        w2, d2 = self.w2, self.d2
        self.wall((-w2, -d2 + c), (-w2 + c, -d2), z0, z1)   # front-left
        self.wall((w2 - c, -d2), (w2, -d2 + c), z0, z1)     # front-right
        self.wall((w2, d2 - c), (w2 - c, d2), z0, z1)       # back-right
        self.wall((-w2 + c, d2), (-w2, d2 - c), z0, z1)     # back-left
