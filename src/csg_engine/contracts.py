"""Contracts for the CSG expression tree.

A tree is built from immutable tagged nodes and handed to
``csg_engine.evaluator.evaluate`` in one go. Transforms are rigid (rotation
plus translation); mirroring is a tree rewrite (``mirror_x``) rather than a
reflective matrix, so an evaluated solid never comes out inside-out.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]
Matrix4 = Tuple[Tuple[float, float, float, float], ...]

DEFAULT_SEGMENTS = 32


class CsgNode:
    """Base of every node in the tree."""

    kind = "node"

    def mirror_x(self) -> "CsgNode":
        """The same solid reflected through the plane X = 0."""
        raise NotImplementedError

    def children(self) -> Tuple["CsgNode", ...]:
        return ()


# ─── Primitives ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Block(CsgNode):
    """Axis-aligned cuboid of full extents *size* centred on *center*."""

    size: Vec3
    center: Vec3 = (0.0, 0.0, 0.0)

    kind = "block"

    def mirror_x(self) -> "Block":
        cx, cy, cz = self.center
        return Block(self.size, (-cx, cy, cz))


@dataclass(frozen=True)
class Cylinder(CsgNode):
    """Faceted cylinder along the Z axis (or X axis with ``axis="x"``)."""

    radius: float
    height: float
    center: Vec3 = (0.0, 0.0, 0.0)
    axis: str = "z"
    segments: int = DEFAULT_SEGMENTS

    kind = "cylinder"

    def __post_init__(self):
        if self.axis not in ("x", "z"):
            raise ValueError(f"Cylinder axis must be 'x' or 'z', got {self.axis!r}")

    def mirror_x(self) -> "Cylinder":
        cx, cy, cz = self.center
        return Cylinder(self.radius, self.height, (-cx, cy, cz), self.axis, self.segments)


@dataclass(frozen=True)
class ExtrudedPolygon(CsgNode):
    """Prism: a counter-clockwise XY outline extruded from *z0* by *height*."""

    points: Tuple[Vec2, ...]
    height: float
    z0: float = 0.0

    kind = "extrusion"

    def mirror_x(self) -> "ExtrudedPolygon":
        # Reflection flips orientation; reversing keeps the outline CCW.
        flipped = tuple((-x, y) for x, y in reversed(self.points))
        return ExtrudedPolygon(flipped, self.height, self.z0)


# ─── Operations ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Union(CsgNode):
    operands: Tuple[CsgNode, ...]

    kind = "union"

    def mirror_x(self) -> "Union":
        return Union(tuple(op.mirror_x() for op in self.operands))

    def children(self) -> Tuple[CsgNode, ...]:
        return self.operands


@dataclass(frozen=True)
class Subtract(CsgNode):
    """*base* minus every cutter."""

    base: CsgNode
    cutters: Tuple[CsgNode, ...]

    kind = "subtract"

    def mirror_x(self) -> "Subtract":
        return Subtract(self.base.mirror_x(), tuple(c.mirror_x() for c in self.cutters))

    def children(self) -> Tuple[CsgNode, ...]:
        return (self.base, *self.cutters)


@dataclass(frozen=True)
class Transform(CsgNode):
    """Rigid 4x4 transform applied to *child*."""

    child: CsgNode
    matrix: Matrix4

    kind = "transform"

    def mirror_x(self) -> "Transform":
        # mirror(M * child) == (S M S) * mirror(child), S = diag(-1, 1, 1, 1)
        m = [list(row) for row in self.matrix]
        for i in range(4):
            for j in range(4):
                if (i == 0) != (j == 0):
                    m[i][j] = -m[i][j]
        return Transform(self.child.mirror_x(), _freeze(m))

    def children(self) -> Tuple[CsgNode, ...]:
        return (self.child,)


# ─── Builders ────────────────────────────────────────────────────────────────

def translate(node: CsgNode, offset: Sequence[float]) -> Transform:
    dx, dy, dz = offset
    return Transform(node, _freeze([
        [1.0, 0.0, 0.0, dx],
        [0.0, 1.0, 0.0, dy],
        [0.0, 0.0, 1.0, dz],
        [0.0, 0.0, 0.0, 1.0],
    ]))


def rotate_z(node: CsgNode, degrees: float) -> Transform:
    a = math.radians(degrees)
    c, s = math.cos(a), math.sin(a)
    return Transform(node, _freeze([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ]))


def count_nodes(node: CsgNode) -> int:
    return 1 + sum(count_nodes(child) for child in node.children())


def tree_depth(node: CsgNode) -> int:
    kids = node.children()
    if not kids:
        return 1
    return 1 + max(tree_depth(child) for child in kids)


def _freeze(rows) -> Matrix4:
    return tuple(tuple(float(v) for v in row) for row in rows)
