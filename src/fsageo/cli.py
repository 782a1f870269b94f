import argparse
from pathlib import Path

from fsageo.settings import load_settings


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default="config/default.yaml", help="Path to config YAML")
    common.add_argument("--scenario", default="default", help="Scenario name (config/scenarios/<name>.yaml)")

    parser = argparse.ArgumentParser(prog="fsageo", description="FSA boundary geometry tools", parents=[common])

    sub = parser.add_subparsers(dest="command", required=True)
    pre = sub.add_parser(
        "preprocess",
        parents=[common],
        help="Simplify + reproject raw EPSG:3347 *.geojson files to WGS84 *.json",
    )
    pre.add_argument("--input-dir", default=None, help="Raw GeoJSON directory (default: project.raw_dir)")
    pre.add_argument("--output-dir", default=None, help="Output directory (default: project.processed_dir)")
    pre.add_argument("--tolerance-m", type=float, default=None, help="Douglas-Peucker tolerance in meters")
    meta = sub.add_parser("metadata", parents=[common], help="Regenerate metadata.json for preprocessed files")
    meta.add_argument("--output-dir", default=None, help="Preprocessed directory (default: project.processed_dir)")
    ldu = sub.add_parser(
        "extract-ldu",
        parents=[common],
        help="Write <stem>-ldu.geojson point files from the postal-code list, one per boundary file",
    )
    ldu.add_argument("--boundary-dir", default=None, help="Boundary GeoJSON directory (default: project.raw_dir)")
    ldu.add_argument("--postal-codes", default=None, help="Postal-code JSON list (default: project.postal_codes_path)")
    ldu.add_argument("--output-dir", default=None, help="LDU output directory (default: project.ldu_dir)")
    proj = sub.add_parser("project", parents=[common], help="Convert one EPSG:3347 point to WGS84 (prints lng lat)")
    proj.add_argument("x", type=float, help="Easting in meters")
    proj.add_argument("y", type=float, help="Northing in meters")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(Path(args.config), scenario=args.scenario)

    if args.command == "project":
        from fsageo.spatial.crs import project

        lng, lat = project(args.x, args.y)
        print(f"{lng:.9f} {lat:.9f}")
        return

    if args.command == "preprocess":
        from fsageo.pipeline import run_preprocess, stats_frame

        if getattr(args, "input_dir", None):
            settings["paths"]["raw_dir"] = str(Path(args.input_dir).resolve())
        if getattr(args, "output_dir", None):
            settings["paths"]["processed_dir"] = str(Path(args.output_dir).resolve())
        stats = run_preprocess(settings, tolerance_m=getattr(args, "tolerance_m", None))
        print(stats_frame(stats).to_string(index=False))
        return

    if args.command == "metadata":
        from fsageo.pipeline import run_metadata

        output_dir = getattr(args, "output_dir", None)
        path = run_metadata(settings, output_dir=Path(output_dir).resolve() if output_dir else None)
        print(f"Metadata written to: {path}")
        return

    if args.command == "extract-ldu":
        from fsageo.ldu import ldu_frame, run_extract_ldu

        if getattr(args, "boundary_dir", None):
            settings["paths"]["raw_dir"] = str(Path(args.boundary_dir).resolve())
        if getattr(args, "output_dir", None):
            settings["paths"]["ldu_dir"] = str(Path(args.output_dir).resolve())
        postal_codes = Path(args.postal_codes).resolve() if getattr(args, "postal_codes", None) else None
        stats = run_extract_ldu(settings, postal_codes_path=postal_codes)
        print(ldu_frame(stats).to_string(index=False))
        return

    raise SystemExit(f"Unknown command: {args.command}")
