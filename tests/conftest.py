"""
Shared test fixtures for box, lid and hinge generation tests.
"""
import sys
import warnings
from pathlib import Path

# trimesh warns about degenerate triangles when computing normals of
# zero-area slivers; the closed-mesh checks below do not depend on them.
warnings.filterwarnings(
    "ignore",
    message="invalid value encountered in divide",
    category=RuntimeWarning,
    module=r"trimesh\..*",
)

import pytest
from shapely.geometry import Polygon
from shapely.ops import unary_union

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from box_params import BoxParams


@pytest.fixture
def default_params():
    """The 80 x 60 x 40 mm, 2 mm wall open box."""
    return BoxParams()


@pytest.fixture
def lid_params():
    return BoxParams(include_lid=True)


@pytest.fixture
def divided_params():
    """Lidded box with one divider across each axis."""
    return BoxParams(include_lid=True, divisions_x=[50], divisions_z=[50])


@pytest.fixture
def chamfered_params():
    return BoxParams(include_lid=True, chamfer_size=1.0)


@pytest.fixture
def hinged_params():
    return BoxParams(include_lid=True, include_hinge=True)


@pytest.fixture
def needs_manifold():
    """Skip when the boolean backend is not installed."""
    pytest.importorskip("manifold3d")


def footprint_area(mesh, z: float, tol: float = 1e-9) -> float:
    """Area of the union of all horizontal polygons lying at height *z*."""
    shapes = []
    for poly in mesh.resolved_polygons():
        if all(abs(v[2] - z) < tol for v in poly.vertices):
            shapes.append(Polygon([(v[0], v[1]) for v in poly.vertices]))
    if not shapes:
        return 0.0
    return unary_union(shapes).area
