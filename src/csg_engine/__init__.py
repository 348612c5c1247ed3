"""Public API for the CSG expression tree and its evaluator."""

from csg_engine.contracts import (
    Block,
    CsgNode,
    Cylinder,
    ExtrudedPolygon,
    Subtract,
    Transform,
    Union,
    count_nodes,
    rotate_z,
    translate,
    tree_depth,
)
from csg_engine.evaluator import CsgEvaluationError, evaluate
from csg_engine.reduction import balanced_union, tree_reduce

__all__ = [
    "Block",
    "CsgEvaluationError",
    "CsgNode",
    "Cylinder",
    "ExtrudedPolygon",
    "Subtract",
    "Transform",
    "Union",
    "balanced_union",
    "count_nodes",
    "evaluate",
    "rotate_z",
    "translate",
    "tree_depth",
    "tree_reduce",
]
