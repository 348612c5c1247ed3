"""
PolygonMesh to render buffers and trimesh.

Viewers want flat indexed arrays; mesh checks (watertightness, volume) are
easiest through trimesh. Both conversions fan-triangulate after applying the
mesh's residual transform.
"""
import logging
from dataclasses import dataclass

import numpy as np
import trimesh

from box_params import BoxParams
from mesh_types import PolygonMesh, translation_matrix, with_transform

logger = logging.getLogger(__name__)


@dataclass
class RenderBuffers:
    """Indexed triangle buffers ready for a GPU upload."""
    positions: np.ndarray   # (N, 3) float32
    indices: np.ndarray     # (M, 3) uint32
    normals: np.ndarray     # (N, 3) float32, unit length

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)


def to_render_buffers(mesh: PolygonMesh, weld: bool = False) -> RenderBuffers:
    """Build indexed buffers with area-weighted vertex normals.

    Each polygon owns its own vertices, so by default every vertex normal is
    its polygon's normal. With *weld* coincident positions are merged first
    and normals are averaged across the faces that meet there.
    """
    positions = []
    indices = []
    for poly in mesh.resolved_polygons():
        base = len(positions)
        positions.extend(poly.vertices)
        for i in range(1, len(poly.vertices) - 1):
            indices.append((base, base + i, base + i + 1))

    pos = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    idx = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    if weld and len(pos):
        pos, inverse = np.unique(np.round(pos, 6), axis=0, return_inverse=True)
        idx = inverse.reshape(-1)[idx]

    normals = vertex_normals(pos, idx)
    return RenderBuffers(
        positions=pos.astype(np.float32),
        indices=idx.astype(np.uint32),
        normals=normals.astype(np.float32),
    )


def vertex_normals(positions: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Sum of unnormalized face normals (so larger faces weigh more), normalized."""
    normals = np.zeros_like(positions, dtype=np.float64)
    if len(indices) == 0:
        return normals
    tri = positions[indices]
    face = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    for corner in range(3):
        np.add.at(normals, indices[:, corner], face)
    length = np.linalg.norm(normals, axis=1, keepdims=True)
    return np.divide(normals, length, out=np.zeros_like(normals), where=length > 0)


def to_trimesh(mesh: PolygonMesh, process: bool = True) -> trimesh.Trimesh:
    """Triangulated trimesh; *process* merges duplicate vertices."""
    buffers = to_render_buffers(mesh)
    return trimesh.Trimesh(
        vertices=buffers.positions.astype(np.float64),
        faces=buffers.indices.astype(np.int64),
        process=process,
    )


def lid_assembly_transform(params: BoxParams) -> np.ndarray:
    """Lid frame to box frame: the cap sits on the rim, hinge axes coincide."""
    return translation_matrix((0.0, 0.0, params.height + params.wall_thickness))


def place_lid(lid: PolygonMesh, params: BoxParams) -> PolygonMesh:
    return with_transform(lid, lid_assembly_transform(params))


def assembly_scene(box_parts, lid_parts, params: BoxParams) -> trimesh.Scene:
    """Scene with the box parts and the lid parts lifted into place."""
    scene = trimesh.Scene()
    for i, part in enumerate(box_parts):
        scene.add_geometry(to_trimesh(part), node_name=f"box_{i}")
    for i, part in enumerate(lid_parts):
        scene.add_geometry(to_trimesh(place_lid(part, params)), node_name=f"lid_{i}")
    logger.debug("Assembly scene: %d box parts, %d lid parts", len(box_parts), len(lid_parts))
    return scene
