"""
Parameter record for one box + lid + hinge design.

All lengths are millimetres. The record is immutable; derived values that the
geometry builders need (clamped chamfer, clamped lip height, divider
coordinates) are computed here so every builder sees the same numbers.
"""
import logging
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

EPS = 0.001

TEXT_STYLES = ("engraved", "embossed")

# camelCase keys written by the browser UI project files
_CAMEL_KEYS = {
    "wallThickness": "wall_thickness",
    "includeLid": "include_lid",
    "lidHeight": "lid_height",
    "lidTolerance": "lid_tolerance",
    "divisionsX": "divisions_x",
    "divisionsZ": "divisions_z",
    "lidText": "lid_text",
    "lidTextSize": "lid_text_size",
    "lidTextDepth": "lid_text_depth",
    "lidTextStyle": "lid_text_style",
    "chamferSize": "chamfer_size",
    "includeHinge": "include_hinge",
    "hingeCount": "hinge_count",
    "hingeDiameter": "hinge_diameter",
    "hingePinDiameter": "hinge_pin_diameter",
}


class ParameterError(ValueError):
    """Raised when a parameter record cannot describe a printable box."""


@dataclass(frozen=True)
class BoxParams:
    """Configuration for one generated design.

    ``divisions_x`` / ``divisions_z`` are divider positions in percent
    (1-99) along the inner width / inner depth. Depth runs along the mesh
    Y axis; the ``_z`` name is kept from the saved-project format.
    """

    width: float = 80.0
    depth: float = 60.0
    height: float = 40.0
    wall_thickness: float = 2.0
    include_lid: bool = False
    lid_height: float = 5.0        # lip that hangs into the box
    lid_tolerance: float = 0.3     # gap between lip and box inner wall
    divisions_x: Tuple[float, ...] = ()
    divisions_z: Tuple[float, ...] = ()
    lid_text: str = ""
    lid_text_size: float = 16.0
    lid_text_depth: float = 0.8
    lid_text_style: str = "engraved"
    chamfer_size: float = 0.0      # 45 deg cut on the outer vertical edges
    include_hinge: bool = False
    hinge_count: int = 1
    hinge_diameter: float = 8.0    # outer barrel diameter
    hinge_pin_diameter: float = 2.5

    def __post_init__(self):
        # Accept any sequence for divisions but store tuples so the record
        # stays hashable and immutable.
        object.__setattr__(self, "divisions_x", tuple(float(p) for p in self.divisions_x))
        object.__setattr__(self, "divisions_z", tuple(float(p) for p in self.divisions_z))
        issues = self.validate()
        if issues:
            raise ParameterError("; ".join(issues))

    def validate(self) -> List[str]:
        """Check for values no geometry can be built from.

        Returns list of error strings (empty = ok).
        """
        issues = []
        for name in ("width", "depth", "height", "wall_thickness",
                     "lid_height", "lid_text_size", "hinge_diameter",
                     "hinge_pin_diameter"):
            value = getattr(self, name)
            if not _is_finite(value) or value <= 0:
                issues.append(f"{name} must be a positive number, got {value!r}")
        for name in ("lid_tolerance", "lid_text_depth", "chamfer_size"):
            value = getattr(self, name)
            if not _is_finite(value) or value < 0:
                issues.append(f"{name} must be >= 0, got {value!r}")
        if issues:
            return issues

        wt = self.wall_thickness
        if self.width - 2 * wt <= EPS or self.depth - 2 * wt <= EPS:
            issues.append(
                f"wall_thickness {wt} leaves no cavity in a "
                f"{self.width} x {self.depth} box"
            )
        if self.height - wt <= EPS:
            issues.append(f"height {self.height} must exceed wall_thickness {wt}")
        if self.lid_text_style not in TEXT_STYLES:
            issues.append(
                f"lid_text_style must be one of {TEXT_STYLES}, got {self.lid_text_style!r}"
            )
        if self.hinge_count not in (1, 2, 3):
            issues.append(f"hinge_count must be 1, 2 or 3, got {self.hinge_count!r}")
        if self.hinge_pin_diameter >= self.hinge_diameter:
            issues.append("hinge_pin_diameter must be smaller than hinge_diameter")
        for axis in ("divisions_x", "divisions_z"):
            for pct in getattr(self, axis):
                if not _is_finite(pct) or pct < 1 or pct > 99:
                    issues.append(f"{axis} entries must lie in [1, 99], got {pct!r}")
        return issues

    # ─── Derived values ──────────────────────────────────────────────────

    @property
    def inner_width(self) -> float:
        return self.width - 2 * self.wall_thickness

    @property
    def inner_depth(self) -> float:
        return self.depth - 2 * self.wall_thickness

    @property
    def chamfer(self) -> float:
        """Chamfer actually cut, clamped so it never eats through a wall."""
        c = min(self.chamfer_size, self.wall_thickness, self.width / 4, self.depth / 4)
        # Below the grid epsilon a chamfer would merge into the outer edge.
        return c if c > 2 * EPS else 0.0

    @property
    def lip_height(self) -> float:
        """Lip height, clamped so the lip never reaches the box floor."""
        return min(self.lid_height, self.height - self.wall_thickness)

    @property
    def has_text(self) -> bool:
        return bool(self.lid_text.strip())

    def divider_positions_x(self) -> List[float]:
        """Divider centre X coordinates along the inner width, ascending."""
        return divider_positions(self.divisions_x, self.inner_width, self.wall_thickness)

    def divider_positions_y(self) -> List[float]:
        """Divider centre Y coordinates along the inner depth, ascending."""
        return divider_positions(self.divisions_z, self.inner_depth, self.wall_thickness)

    # ─── Conversion ──────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoxParams":
        """Build a record from snake_case or saved-project camelCase keys.

        Unknown keys are ignored; missing keys take the defaults.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                logger.debug("Ignoring unknown parameter %r", key)
                continue
            kwargs[name] = value
        if "hinge_count" in kwargs:
            kwargs["hinge_count"] = int(kwargs["hinge_count"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["divisions_x"] = list(self.divisions_x)
        data["divisions_z"] = list(self.divisions_z)
        return data

    def dimension_tag(self) -> str:
        """``{width}x{depth}x{height}`` as used in exported file names."""
        return f"{_short(self.width)}x{_short(self.depth)}x{_short(self.height)}"


def divider_positions(
    percentages,
    inner_length: float,
    wall_thickness: float,
) -> List[float]:
    """Map divider percentages to absolute centre coordinates.

    The axis is centred on zero and spans ``inner_length``. Each divider is a
    wall ``wall_thickness`` thick. Duplicates are dropped, and so is any
    divider whose wall would overlap the previous one or cut into the outer
    wall, so every grid cell downstream has positive width.
    """
    half = inner_length / 2
    band = wall_thickness / 2
    kept: List[float] = []
    for pct in sorted(percentages):
        pos = -half + (pct / 100.0) * inner_length
        if pos - band < -half + EPS or pos + band > half - EPS:
            logger.warning(
                "Dropping divider at %.1f%%: wall would cut into the outer wall", pct
            )
            continue
        if kept and pos - band < kept[-1] + band + EPS:
            if abs(pos - kept[-1]) > EPS:
                logger.warning(
                    "Dropping divider at %.1f%%: wall overlaps the previous divider", pct
                )
            continue
        kept.append(pos)
    return kept


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _short(value: float) -> str:
    return f"{value:g}"
