#!/usr/bin/env python3
"""
Generate printable box, lid and hinge pin STL files.

Usage:
    # Defaults: 80 x 60 x 40 mm open box
    python scripts/generate_box.py

    # Lid with engraved text, two dividers, two hinges
    python scripts/generate_box.py --lid --text "SCREWS" --divisions-x 33,66 \\
        --hinge --hinge-count 2

    # From a saved project file, overriding the wall
    python scripts/generate_box.py --params project.json --wall-thickness 2.4

    # Sizing helpers
    python scripts/generate_box.py --from-volume 500
    python scripts/generate_box.py --compartments 6 30 40 25
    python scripts/generate_box.py --division-sizes "51, 45, 29"
"""
import sys
import argparse
import json
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from box_params import BoxParams, ParameterError
from pipeline import BoxGenerationError, PipelineConfig, run_pipeline
from sizing import (
    from_compartments,
    from_division_sizes,
    from_printer_bed,
    from_volume,
    parse_sizes,
)
from text_raster import RasterConfig

logger = logging.getLogger("generate_box")

# CLI flag -> BoxParams field, for the plain value overrides
_VALUE_FLAGS = {
    "width": "width",
    "depth": "depth",
    "height": "height",
    "wall_thickness": "wall_thickness",
    "lid_height": "lid_height",
    "lid_tolerance": "lid_tolerance",
    "text": "lid_text",
    "text_size": "lid_text_size",
    "text_depth": "lid_text_depth",
    "text_style": "lid_text_style",
    "chamfer": "chamfer_size",
    "hinge_count": "hinge_count",
    "hinge_diameter": "hinge_diameter",
    "pin_diameter": "hinge_pin_diameter",
}


def percent_list(value: str):
    """Parse ``33,66`` into [33.0, 66.0] (empty string -> no dividers)."""
    if not value.strip():
        return []
    try:
        return [float(v) for v in value.split(",") if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma separated percentages, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a printable box with optional lid, dividers, text and hinges"
    )
    parser.add_argument("--params", type=str, default=None,
                        help="JSON parameter file (snake_case or saved-project camelCase keys)")

    dims = parser.add_argument_group("dimensions (mm)")
    dims.add_argument("--width", type=float)
    dims.add_argument("--depth", type=float)
    dims.add_argument("--height", type=float)
    dims.add_argument("--wall-thickness", type=float)
    dims.add_argument("--chamfer", type=float, help="Outer vertical edge chamfer")
    dims.add_argument("--divisions-x", type=percent_list,
                      help="Divider positions along the width, percent (e.g. 33,66)")
    dims.add_argument("--divisions-z", type=percent_list,
                      help="Divider positions along the depth, percent")

    lid = parser.add_argument_group("lid")
    lid.add_argument("--lid", dest="include_lid", action="store_true", default=None,
                     help="Generate a lid")
    lid.add_argument("--lid-height", type=float, help="Lip height (default: 5)")
    lid.add_argument("--lid-tolerance", type=float, help="Lip clearance (default: 0.3)")
    lid.add_argument("--text", type=str, help="Text on the lid")
    lid.add_argument("--text-size", type=float, help="Text height in mm (default: 16)")
    lid.add_argument("--text-depth", type=float, help="Engrave / emboss depth (default: 0.8)")
    lid.add_argument("--text-style", choices=["engraved", "embossed"])
    lid.add_argument("--font", type=str, default=None, help="TrueType font file for the text")

    hinge = parser.add_argument_group("hinge")
    hinge.add_argument("--hinge", dest="include_hinge", action="store_true", default=None,
                       help="Add barrel hinges (implies --lid)")
    hinge.add_argument("--hinge-count", type=int, choices=[1, 2, 3])
    hinge.add_argument("--hinge-diameter", type=float)
    hinge.add_argument("--pin-diameter", type=float)

    sizing = parser.add_argument_group("sizing helpers (applied after the values above)")
    sizing.add_argument("--from-volume", type=float, metavar="CM3",
                        help="Derive width/depth/height from a volume in cm^3")
    sizing.add_argument("--compartments", type=float, nargs=4,
                        metavar=("COUNT", "ITEM_W", "ITEM_D", "ITEM_H"),
                        help="Size the box around a grid of equal compartments")
    sizing.add_argument("--printer-bed", type=float, nargs=2, metavar=("BED_X", "BED_Y"),
                        help="Use 80%% of a printer bed")
    sizing.add_argument("--division-sizes", type=str,
                        help="Comma separated compartment depths along Y")

    out = parser.add_argument_group("output")
    out.add_argument("--output", type=str, default="output", help="Output directory")
    out.add_argument("--run-folder", action="store_true",
                     help="Write into a timestamped run folder with a manifest")
    out.add_argument("--runs-dir", type=str, default="runs")
    out.add_argument("--name", type=str, default="box", help="Design name for run folders")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def params_from_args(args) -> BoxParams:
    data = {}
    if args.params:
        with open(args.params, "r", encoding="utf-8") as f:
            data = json.load(f)
    params = BoxParams.from_dict(data).to_dict()

    for flag, name in _VALUE_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            params[name] = value
    if args.divisions_x is not None:
        params["divisions_x"] = args.divisions_x
    if args.divisions_z is not None:
        params["divisions_z"] = args.divisions_z
    if args.include_lid:
        params["include_lid"] = True
    if args.include_hinge:
        params["include_hinge"] = True
        params["include_lid"] = True
    result = BoxParams.from_dict(params)

    if args.from_volume is not None:
        result = from_volume(result, args.from_volume)
    if args.compartments is not None:
        count, item_w, item_d, item_h = args.compartments
        result = from_compartments(result, int(count), item_w, item_d, item_h)
    if args.printer_bed is not None:
        result = from_printer_bed(result, *args.printer_bed)
    if args.division_sizes is not None:
        result = from_division_sizes(result, parse_sizes(args.division_sizes),
                                     result.wall_thickness)
    return result


def main():
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        params = params_from_args(args)
    except (ParameterError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1

    config = PipelineConfig(
        output_dir=args.output,
        use_run_folder=args.run_folder,
        runs_dir=args.runs_dir,
        design_name=args.name,
        raster=RasterConfig(font_path=args.font),
    )

    try:
        result = run_pipeline(params, config)
    except BoxGenerationError as e:
        logger.error("Generation failed: %s", e)
        print(f"Error: {e}")
        return 1

    print(f"\nBox: {params.dimension_tag()} mm, wall {params.wall_thickness:g} mm")
    for name, count in result.parts.face_counts().items():
        print(f"  {name}: {count} faces")
    if result.parts.lid is not None:
        print(f"Lid: {result.parts.lid_strategy}")
    print(f"\nFiles ({result.elapsed_s:.2f}s):")
    for kind, path in result.artifact_paths.items():
        print(f"  {kind}: {path}")
    if result.run_id:
        print(f"Run ID: {result.run_id}")
        print(f"Manifest: {result.manifest_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
