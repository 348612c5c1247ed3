"""Evaluate a CSG tree into a PolygonMesh.

Primitives are realized with ``trimesh.creation`` and the boolean operations
run on the manifold3d backend through ``trimesh.boolean``. A Transform at the
root is not baked in: it comes back as the mesh's residual transform.
"""

from __future__ import annotations

import logging

import numpy as np
import trimesh
from shapely.geometry import Polygon as ShapelyPolygon

from csg_engine.contracts import (
    Block,
    CsgNode,
    Cylinder,
    ExtrudedPolygon,
    Subtract,
    Transform,
    Union,
    count_nodes,
)
from mesh_types import PolygonMesh, translation_matrix

logger = logging.getLogger(__name__)

BOOLEAN_ENGINE = "manifold"


class CsgEvaluationError(RuntimeError):
    """A primitive or boolean operation could not be evaluated."""


def evaluate(node: CsgNode) -> PolygonMesh:
    """Evaluate *node*; a root Transform is kept as the residual transform."""
    if isinstance(node, Transform):
        mesh = evaluate(node.child)
        matrix = np.asarray(node.matrix, dtype=float)
        if mesh.transform is not None:
            matrix = matrix @ mesh.transform
        return PolygonMesh(polygons=mesh.polygons, transform=matrix)

    solid = realize(node)
    mesh = trimesh_to_polygon_mesh(solid)
    logger.debug("Evaluated CSG tree of %d nodes into %d triangles", count_nodes(node), len(mesh))
    return mesh


def realize(node: CsgNode) -> trimesh.Trimesh:
    """Realize any node as a trimesh solid with all transforms baked."""
    if isinstance(node, Block):
        return trimesh.creation.box(extents=node.size, transform=translation_matrix(node.center))

    if isinstance(node, Cylinder):
        placement = translation_matrix(node.center)
        if node.axis == "x":
            placement = placement @ trimesh.transformations.rotation_matrix(np.pi / 2, [0, 1, 0])
        return trimesh.creation.cylinder(
            radius=node.radius,
            height=node.height,
            sections=node.segments,
            transform=placement,
        )

    if isinstance(node, ExtrudedPolygon):
        try:
            solid = trimesh.creation.extrude_polygon(ShapelyPolygon(node.points), height=node.height)
        except Exception as exc:
            raise CsgEvaluationError(f"extrusion failed: {exc}") from exc
        solid.apply_translation([0.0, 0.0, node.z0])
        return solid

    if isinstance(node, Transform):
        solid = realize(node.child).copy()
        solid.apply_transform(np.asarray(node.matrix, dtype=float))
        return solid

    if isinstance(node, Union):
        operands = [realize(op) for op in node.operands]
        if len(operands) == 1:
            return operands[0]
        return _boolean("union", operands)

    if isinstance(node, Subtract):
        base = realize(node.base)
        if not node.cutters:
            return base
        return _boolean("difference", [base, *(realize(c) for c in node.cutters)])

    raise CsgEvaluationError(f"Unknown CSG node type: {type(node).__name__}")


def trimesh_to_polygon_mesh(solid: trimesh.Trimesh) -> PolygonMesh:
    mesh = PolygonMesh()
    for tri in solid.vertices[solid.faces]:
        mesh.add(tri.tolist())
    return mesh


def _boolean(operation: str, solids) -> trimesh.Trimesh:
    func = trimesh.boolean.union if operation == "union" else trimesh.boolean.difference
    try:
        result = func(solids, engine=BOOLEAN_ENGINE)
    except Exception as exc:
        raise CsgEvaluationError(f"{operation} of {len(solids)} solids failed: {exc}") from exc
    if result is None:
        raise CsgEvaluationError(f"{operation} of {len(solids)} solids returned no mesh")
    return result
