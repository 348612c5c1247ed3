"""Balanced pairwise reduction.

Folding n operands left to right builds a chain n deep, and a boolean
backend then re-processes the growing accumulator at every step. Pairing
neighbours round by round keeps the depth at ceil(log2 n).
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple, TypeVar

from csg_engine.contracts import CsgNode, Union

T = TypeVar("T")


def tree_reduce(items: Sequence[T], combine: Callable[[T, T], T]) -> Tuple[T, int]:
    """Combine *items* pairwise until one remains.

    Returns:
        (result, rounds) where rounds == ceil(log2(len(items))).
    """
    if not items:
        raise ValueError("tree_reduce needs at least one item")
    level: List[T] = list(items)
    rounds = 0
    while len(level) > 1:
        paired = [combine(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
        if len(level) % 2:
            paired.append(level[-1])
        level = paired
        rounds += 1
    return level[0], rounds


def balanced_union(nodes: Sequence[CsgNode]) -> CsgNode:
    """Union of *nodes* as a balanced binary tree (a single node is returned as is)."""
    node, _ = tree_reduce(nodes, lambda a, b: Union((a, b)))
    return node
