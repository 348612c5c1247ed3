"""Single-path pipeline: parameters -> part meshes -> STL artifacts."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from box_builder import build_box
from box_params import BoxParams
from hinges import generate_box_knuckles, generate_lid_knuckles, generate_pins
from lid_builder import build_lid
from mesh_types import PolygonMesh
from run_protocol import prepare_run_dir, update_latest_pointer, write_json, write_text
from stl_exporter import StlFormat, part_filename, write_stl
from text_raster import RasterConfig, lid_text_solid

logger = logging.getLogger(__name__)


class BoxGenerationError(RuntimeError):
    """A generation or export step failed; the message names the step."""


@dataclass
class PipelineConfig:
    output_dir: str = "output"
    use_run_folder: bool = False      # write into a timestamped folder under runs_dir
    runs_dir: str = "runs"
    design_name: str = "box"
    export_box: bool = True
    export_lid: bool = True
    export_pins: bool = True
    raster: RasterConfig = field(default_factory=RasterConfig)
    stl_format: StlFormat = field(default_factory=StlFormat)


@dataclass
class BoxParts:
    """All solids of one design, each in its own frame (box or lid)."""
    box: PolygonMesh
    lid: Optional[PolygonMesh] = None
    box_knuckles: Optional[PolygonMesh] = None
    lid_knuckles: Optional[PolygonMesh] = None
    pins: Optional[PolygonMesh] = None
    lid_strategy: str = "none"        # "direct", "csg" or "none"

    def box_solids(self) -> List[PolygonMesh]:
        return [m for m in (self.box, self.box_knuckles) if m is not None]

    def lid_solids(self) -> List[PolygonMesh]:
        return [m for m in (self.lid, self.lid_knuckles) if m is not None]

    def face_counts(self) -> Dict[str, int]:
        counts = {}
        for name in ("box", "lid", "box_knuckles", "lid_knuckles", "pins"):
            mesh = getattr(self, name)
            if mesh is not None:
                counts[name] = len(mesh)
        return counts


@dataclass
class PipelineResult:
    output_dir: str
    artifact_paths: Dict[str, str]
    parts: BoxParts
    elapsed_s: float
    run_id: Optional[str] = None
    manifest_path: Optional[str] = None
    summary_path: Optional[str] = None


def _step(label: str, func: Callable, *args):
    try:
        return func(*args)
    except Exception as exc:
        raise BoxGenerationError(f"{label} failed: {exc}") from exc


def generate_parts(params: BoxParams, raster: Optional[RasterConfig] = None) -> BoxParts:
    """Generate every solid the parameters ask for.

    The lid is built directly unless its text rasterizes to ink, in which
    case it goes through CSG. Hinge parts need a lid.
    """
    box = _step("box generation", build_box, params)
    parts = BoxParts(box=box)
    if not params.include_lid:
        return parts

    text = _step("text rasterization", lid_text_solid, params, raster)
    parts.lid = _step("lid generation", build_lid, params, text)
    parts.lid_strategy = "direct" if text is None else "csg"

    if params.include_hinge:
        parts.box_knuckles = _step("box knuckle generation", generate_box_knuckles, params)
        parts.lid_knuckles = _step("lid knuckle generation", generate_lid_knuckles, params)
        parts.pins = _step("hinge pin generation", generate_pins, params)

    logger.info("Generated %s: %s (lid: %s)",
                params.dimension_tag(), parts.face_counts(), parts.lid_strategy)
    return parts


def export_parts(
    parts: BoxParts,
    params: BoxParams,
    output_dir: str,
    config: Optional[PipelineConfig] = None,
) -> Dict[str, str]:
    """Write box / lid / hinge pin STLs; returns part kind -> file path."""
    if config is None:
        config = PipelineConfig()
    out = Path(output_dir)
    jobs = []
    if config.export_box:
        jobs.append(("box", parts.box_solids()))
    if config.export_lid and parts.lid is not None:
        jobs.append(("lid", parts.lid_solids()))
    if config.export_pins and parts.pins is not None:
        jobs.append(("hinge_pin", [parts.pins]))

    paths: Dict[str, str] = {}
    for kind, solids in jobs:
        target = out / part_filename(kind, params)
        paths[kind] = _step(f"{kind} export", write_stl, solids, str(target), kind, config.stl_format)
    return paths


def run_pipeline(params: BoxParams, config: Optional[PipelineConfig] = None) -> PipelineResult:
    if config is None:
        config = PipelineConfig()

    started = time.perf_counter()
    parts = generate_parts(params, config.raster)

    if not config.use_run_folder:
        paths = export_parts(parts, params, config.output_dir, config)
        return PipelineResult(
            output_dir=config.output_dir,
            artifact_paths=paths,
            parts=parts,
            elapsed_s=time.perf_counter() - started,
        )

    run = prepare_run_dir(config.runs_dir, config.design_name)
    write_json(run.params_path, params.to_dict())
    paths = export_parts(parts, params, str(run.artifacts_dir), config)
    elapsed = time.perf_counter() - started

    write_text(run.summary_path, _build_summary(run.run_id, params, parts, paths, elapsed))
    manifest = {
        "run_id": run.run_id,
        "design_name": config.design_name,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "elapsed_s": round(elapsed, 3),
        "lid_strategy": parts.lid_strategy,
        "config": asdict(config),
        "params": str(run.params_path),
        "counts": parts.face_counts(),
        "artifacts": paths,
    }
    write_json(run.manifest_path, manifest)
    update_latest_pointer(config.runs_dir, run.run_dir)
    logger.info("Run %s written to %s", run.run_id, run.run_dir)

    return PipelineResult(
        output_dir=str(run.artifacts_dir),
        artifact_paths=paths,
        parts=parts,
        elapsed_s=elapsed,
        run_id=run.run_id,
        manifest_path=str(run.manifest_path),
        summary_path=str(run.summary_path),
    )


def _build_summary(
    run_id: str,
    params: BoxParams,
    parts: BoxParts,
    paths: Dict[str, str],
    elapsed_s: float,
) -> str:
    lines = [
        f"# Run {run_id}",
        "",
        f"- Box: {params.dimension_tag()} mm, wall {params.wall_thickness:g} mm",
        f"- Dividers: {len(params.divider_positions_x())} across X, "
        f"{len(params.divider_positions_y())} across Y",
        f"- Lid: {parts.lid_strategy}",
        f"- Hinges: {params.hinge_count if parts.pins is not None else 0}",
        f"- Duration: {elapsed_s:.2f}s",
        "",
        "## Faces",
    ]
    for name, count in parts.face_counts().items():
        lines.append(f"- {name}: {count}")
    lines += ["", "## Files"]
    for kind, path in paths.items():
        lines.append(f"- {kind}: `{Path(path).name}`")
    return "\n".join(lines) + "\n"
