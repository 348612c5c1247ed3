"""
Barrel hinge parts.

Each hinge position gets three interleaved knuckles on one pin: two flanking
knuckles glued to the box's back wall, one middle knuckle on the lid, and a
separately printed pin. A knuckle is a hollow barrel along X with a flat
mounting arm below it; its local origin is the pin axis before the barrel
is dropped by R/2 to fuse with the arm.

Box knuckles are placed in the box frame and the lid knuckle in the lid frame
so that, with the lid frame lifted by ``height + wall_thickness``, the barrel
axes coincide at Y = depth/2 + R, Z = height + wall_thickness + R/2.
"""
import logging
from typing import List

from box_params import BoxParams
from csg_engine import Block, CsgNode, Cylinder, Subtract, Union, balanced_union, evaluate, translate
from mesh_types import PolygonMesh

logger = logging.getLogger(__name__)

HINGE_GAP = 0.2           # clearance between neighbouring knuckles
HINGE_SEGMENTS = 32
PIN_CLEARANCE = 0.15      # pin radius undersize for a free fit
PIN_OVERHANG = 2.0        # pin length past the outer knuckles, each end
GLUE_DROP = 10.0          # box knuckle arm reach down the outer back wall
PIN_SPACING = 2.0         # gap between pins laid side by side


def hinge_x_positions(count: int, width: float) -> List[float]:
    """Knuckle-group centres along X: centre, +-30 % of width, or quarters."""
    if count == 1:
        return [0.0]
    if count == 2:
        return [-width * 0.3, width * 0.3]
    return [-width / 4, 0.0, width / 4]


def knuckle(width: float, radius: float, bore_radius: float, arm_height: float) -> CsgNode:
    """One knuckle with its pin axis (before the R/2 drop) at the origin.

    Args:
        width: knuckle length K along X.
        radius: barrel outer radius R.
        bore_radius: pin hole radius.
        arm_height: arm extent below the barrel, Z in [-(R + arm_height), -R].
    """
    dz = -radius / 2
    barrel = Subtract(
        Cylinder(radius, width, (0.0, 0.0, dz), axis="x", segments=HINGE_SEGMENTS),
        (Cylinder(bore_radius, width + 2, (0.0, 0.0, dz), axis="x", segments=HINGE_SEGMENTS),),
    )
    arm = Block((width, radius, arm_height), (0.0, -radius / 2, -(radius + arm_height / 2)))
    return Union((barrel, arm))


def pin_radius(params: BoxParams) -> float:
    r = params.hinge_pin_diameter / 2
    # Thin pins keep at least half their nominal radius
    return max(r - PIN_CLEARANCE, r / 2)


def pin_length(params: BoxParams) -> float:
    k = params.hinge_diameter
    return 3 * k + 2 * HINGE_GAP + 2 * PIN_OVERHANG


# ─── Trees ───────────────────────────────────────────────────────────────────

def box_knuckles_tree(params: BoxParams) -> CsgNode:
    """Two flanking knuckles per hinge position, box frame."""
    k = params.hinge_diameter
    r_outer = k / 2
    wt = params.wall_thickness
    # The arm may not reach below the box bottom
    arm_h = wt + min(GLUE_DROP, params.height)
    part = knuckle(k, r_outer, params.hinge_pin_diameter / 2, arm_h)
    y = params.depth / 2 + r_outer
    z = params.height + wt + r_outer
    placed = []
    for xc in hinge_x_positions(params.hinge_count, params.width):
        placed.append(translate(part, (xc - k - HINGE_GAP, y, z)))
        placed.append(translate(part, (xc + k + HINGE_GAP, y, z)))
    return balanced_union(placed)


def lid_knuckles_tree(params: BoxParams) -> CsgNode:
    """One middle knuckle per hinge position, lid frame."""
    k = params.hinge_diameter
    r_outer = k / 2
    part = knuckle(k, r_outer, params.hinge_pin_diameter / 2, params.wall_thickness)
    y = params.depth / 2 + r_outer
    placed = [translate(part, (xc, y, r_outer))
              for xc in hinge_x_positions(params.hinge_count, params.width)]
    return balanced_union(placed)


def pins_tree(params: BoxParams) -> CsgNode:
    """One pin per hinge position along X at its hinge centre, Z = 0.

    A single pin lies on Y = 0. With more, neighbouring pins would overlap
    along X, so they are spread along Y around 0.
    """
    radius = pin_radius(params)
    length = pin_length(params)
    positions = hinge_x_positions(params.hinge_count, params.width)
    pitch = 2 * radius + PIN_SPACING
    offset = (len(positions) - 1) / 2
    placed = []
    for i, xc in enumerate(positions):
        pin = Cylinder(radius, length, axis="x", segments=HINGE_SEGMENTS)
        placed.append(translate(pin, (xc, (i - offset) * pitch, 0.0)))
    return balanced_union(placed)


# ─── Meshes ──────────────────────────────────────────────────────────────────

def generate_box_knuckles(params: BoxParams) -> PolygonMesh:
    mesh = evaluate(box_knuckles_tree(params))
    logger.debug("Box knuckles x%d: %d triangles", 2 * params.hinge_count, len(mesh))
    return mesh


def generate_lid_knuckles(params: BoxParams) -> PolygonMesh:
    mesh = evaluate(lid_knuckles_tree(params))
    logger.debug("Lid knuckles x%d: %d triangles", params.hinge_count, len(mesh))
    return mesh


def generate_pins(params: BoxParams) -> PolygonMesh:
    mesh = evaluate(pins_tree(params))
    logger.debug("Hinge pins x%d: r=%.2f, length %.1f mm",
                 params.hinge_count, pin_radius(params), pin_length(params))
    return mesh
