"""
Core mesh types shared by the direct builders, the CSG evaluator, the render
adapter and the STL serializer.

A PolygonMesh is a polygon soup: convex planar polygons with outward winding
(right-hand rule) and no shared-vertex topology. It may carry a residual 4x4
affine transform that consumers apply before using the vertices.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]

# Vertex keys are rounded before edge matching so that coordinates computed
# along different paths (a + b vs b + a) still compare equal.
_KEY_DIGITS = 6


@dataclass(frozen=True)
class Polygon3D:
    """One convex planar face, vertices in outward (CCW) order."""
    vertices: Tuple[Vec3, ...]

    def __post_init__(self):
        if len(self.vertices) < 3:
            raise ValueError(f"Polygon needs at least 3 vertices, got {len(self.vertices)}")

    def normal(self) -> np.ndarray:
        """Unit normal by Newell's method (zero vector if degenerate)."""
        pts = np.asarray(self.vertices, dtype=float)
        nxt = np.roll(pts, -1, axis=0)
        n = np.array([
            np.sum((pts[:, 1] - nxt[:, 1]) * (pts[:, 2] + nxt[:, 2])),
            np.sum((pts[:, 2] - nxt[:, 2]) * (pts[:, 0] + nxt[:, 0])),
            np.sum((pts[:, 0] - nxt[:, 0]) * (pts[:, 1] + nxt[:, 1])),
        ])
        length = np.linalg.norm(n)
        if length == 0:
            return np.zeros(3)
        return n / length

    def area(self) -> float:
        pts = np.asarray(self.vertices, dtype=float)
        total = np.zeros(3)
        for i in range(1, len(pts) - 1):
            total += np.cross(pts[i] - pts[0], pts[i + 1] - pts[0])
        return float(np.linalg.norm(total) / 2.0)


@dataclass
class PolygonMesh:
    """Boundary of one solid as a polygon soup."""
    polygons: List[Polygon3D] = field(default_factory=list)
    # Residual affine transform (4x4) still to be applied to the vertices.
    transform: Optional[np.ndarray] = None

    def add(self, vertices: Sequence[Vec3]) -> None:
        self.polygons.append(Polygon3D(tuple(
            (float(x), float(y), float(z)) for x, y, z in vertices
        )))

    def __len__(self) -> int:
        return len(self.polygons)

    def resolved_polygons(self) -> List[Polygon3D]:
        """Polygons with the residual transform baked into the vertices."""
        if self.transform is None or _is_identity(self.transform):
            return list(self.polygons)
        return [
            Polygon3D(tuple(_apply(self.transform, v) for v in poly.vertices))
            for poly in self.polygons
        ]

    def vertex_array(self) -> np.ndarray:
        """All polygon vertices, transform applied, as an (N, 3) array."""
        pts = [v for poly in self.resolved_polygons() for v in poly.vertices]
        if not pts:
            return np.zeros((0, 3))
        return np.asarray(pts, dtype=float)

    def bounds(self) -> np.ndarray:
        """[[min_x, min_y, min_z], [max_x, max_y, max_z]] after the transform."""
        pts = self.vertex_array()
        if len(pts) == 0:
            return np.zeros((2, 3))
        return np.array([pts.min(axis=0), pts.max(axis=0)])


@dataclass(frozen=True)
class Triangle:
    """One output facet with its derived outward unit normal."""
    v1: Vec3
    v2: Vec3
    v3: Vec3
    normal: Vec3


def facet_normal(v1: Vec3, v2: Vec3, v3: Vec3) -> Vec3:
    """Normalized cross product of two edge vectors; zero if degenerate."""
    e1x, e1y, e1z = v2[0] - v1[0], v2[1] - v1[1], v2[2] - v1[2]
    e2x, e2y, e2z = v3[0] - v1[0], v3[1] - v1[1], v3[2] - v1[2]
    nx = e1y * e2z - e1z * e2y
    ny = e1z * e2x - e1x * e2z
    nz = e1x * e2y - e1y * e2x
    length = (nx * nx + ny * ny + nz * nz) ** 0.5
    if length > 0:
        return (nx / length, ny / length, nz / length)
    return (0.0, 0.0, 0.0)


def triangulate(mesh: PolygonMesh) -> List[Triangle]:
    """Fan-triangulate every polygon (n - 2 triangles per n-gon)."""
    triangles = []
    for poly in mesh.resolved_polygons():
        verts = poly.vertices
        for i in range(1, len(verts) - 1):
            a, b, c = verts[0], verts[i], verts[i + 1]
            triangles.append(Triangle(a, b, c, facet_normal(a, b, c)))
    return triangles


def triangulate_many(meshes: Iterable[PolygonMesh]) -> List[Triangle]:
    triangles: List[Triangle] = []
    for mesh in meshes:
        triangles.extend(triangulate(mesh))
    return triangles


def translation_matrix(offset: Sequence[float]) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = offset
    return m


def with_transform(mesh: PolygonMesh, matrix: np.ndarray) -> PolygonMesh:
    """Return a mesh sharing *mesh*'s polygons with *matrix* composed on top."""
    current = mesh.transform if mesh.transform is not None else np.eye(4)
    return PolygonMesh(polygons=list(mesh.polygons), transform=matrix @ current)


def open_edges(mesh: PolygonMesh) -> Dict[Tuple[tuple, tuple], int]:
    """Audit closedness of a polygon soup.

    Every directed edge a->b must be matched by exactly one b->a and appear
    only once itself. Returns the offending directed edges mapped to their
    imbalance (empty dict = closed, consistently wound).
    """
    directed: Counter = Counter()
    for poly in mesh.resolved_polygons():
        keys = [_key(v) for v in poly.vertices]
        for i, a in enumerate(keys):
            b = keys[(i + 1) % len(keys)]
            if a != b:
                directed[(a, b)] += 1

    issues = {}
    for (a, b), count in directed.items():
        reverse = directed.get((b, a), 0)
        if count != 1 or reverse != 1:
            issues[(a, b)] = count - reverse
    return issues


def is_closed(mesh: PolygonMesh) -> bool:
    return not open_edges(mesh)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _key(v: Vec3) -> tuple:
    return tuple(round(c, _KEY_DIGITS) + 0.0 for c in v)


def _apply(m: np.ndarray, v: Vec3) -> Vec3:
    x, y, z = v
    return (
        float(m[0, 0] * x + m[0, 1] * y + m[0, 2] * z + m[0, 3]),
        float(m[1, 0] * x + m[1, 1] * y + m[1, 2] * z + m[1, 3]),
        float(m[2, 0] * x + m[2, 1] * y + m[2, 2] * z + m[2, 3]),
    )


def _is_identity(m: np.ndarray) -> bool:
    return bool(np.array_equal(m, np.eye(4)))
