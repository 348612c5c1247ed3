"""
ASCII STL export.

Generates the printable files for the box, the lid and the hinge pins from
PolygonMesh solids. Several solids may share one file (the box with its
knuckles, the lid with its knuckle); they are written under a single solid
name.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from box_params import BoxParams
from mesh_types import PolygonMesh, Triangle, Vec3, facet_normal, triangulate_many

logger = logging.getLogger(__name__)

PART_KINDS = ("box", "lid", "hinge_pin")


@dataclass(frozen=True)
class StlFormat:
    """Numeric format of the written file."""
    decimals: int = 6   # fixed point, so output is stable across runs


def format_number(value: float, decimals: int = 6) -> str:
    # Adding 0.0 turns a rounded -0.0 into 0.0
    return f"{round(value, decimals) + 0.0:.{decimals}f}"


def _vec(v: Vec3, decimals: int) -> str:
    return " ".join(format_number(c, decimals) for c in v)


def triangles_to_stl(
    triangles: Iterable[Triangle],
    name: str = "box",
    fmt: Optional[StlFormat] = None,
) -> str:
    """Serialize triangles as one ASCII STL solid."""
    fmt = fmt or StlFormat()
    d = fmt.decimals
    lines = [f"solid {name}"]
    for tri in triangles:
        lines.append(f"  facet normal {_vec(tri.normal, d)}")
        lines.append("    outer loop")
        for v in (tri.v1, tri.v2, tri.v3):
            lines.append(f"      vertex {_vec(v, d)}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return "\n".join(lines) + "\n"


def meshes_to_stl(
    meshes: Iterable[PolygonMesh],
    name: str = "box",
    fmt: Optional[StlFormat] = None,
) -> str:
    """Triangulate (residual transforms applied) and serialize as one solid."""
    return triangles_to_stl(triangulate_many(meshes), name, fmt)


def write_stl(
    meshes: List[PolygonMesh],
    filepath: str,
    name: str = "box",
    fmt: Optional[StlFormat] = None,
) -> str:
    """
    Write meshes to an ASCII STL file.

    The text goes to a temporary sibling first and is renamed over the
    target, so an existing file is never left half written.

    Args:
        meshes: Solids to write under one solid name
        filepath: Output STL path
        name: Solid name in the header
        fmt: Numeric format

    Returns:
        Path to created STL file
    """
    text = meshes_to_stl(meshes, name, fmt)
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
    logger.info("Wrote %s (%d facets)", path, text.count("endfacet"))
    return str(path)


def part_filename(kind: str, params: BoxParams) -> str:
    """``box_80x60x40.stl`` style name for one exported part."""
    if kind not in PART_KINDS:
        raise ValueError(f"Unknown part kind {kind!r}, expected one of {PART_KINDS}")
    return f"{kind}_{params.dimension_tag()}.stl"


def parse_ascii_stl(text: str) -> Tuple[str, List[Triangle]]:
    """Read back an ASCII STL written by ``triangles_to_stl``.

    Returns:
        (solid name, triangles). Normals are taken from the file when
        present and recomputed when all zero.
    """
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines or not lines[0].startswith("solid"):
        raise ValueError("Not an ASCII STL: missing 'solid' header")
    name = lines[0][len("solid"):].strip()
    triangles: List[Triangle] = []
    normal: Vec3 = (0.0, 0.0, 0.0)
    verts: List[Vec3] = []
    for ln in lines[1:]:
        parts = ln.split()
        if parts[0] == "facet":
            normal = tuple(float(v) for v in parts[2:5])
            verts = []
        elif parts[0] == "vertex":
            verts.append(tuple(float(v) for v in parts[1:4]))
        elif parts[0] == "endfacet":
            if len(verts) != 3:
                raise ValueError(f"Facet {len(triangles)} has {len(verts)} vertices")
            if normal == (0.0, 0.0, 0.0):
                normal = facet_normal(*verts)
            triangles.append(Triangle(verts[0], verts[1], verts[2], normal))
    return name, triangles
