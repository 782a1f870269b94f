"""
Offline preprocessing of FSA boundary files.

Raw province files come in EPSG:3347 with full-resolution rings. Converting them in the
browser on every load is slow, so this step runs once:

1) read every `*.geojson` FeatureCollection in the raw directory,
2) simplify each ring in meters and reproject to WGS84 (`project_and_simplify`),
3) write `<stem>.json` next to a `metadata.json` summary per province (FSA and LDU counts,
   raw and preprocessed sizes),
4) record a `run_meta.json` with the tolerance used and input/output file stats.

The map then loads the preprocessed files through the `reorder_only` fast path.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from fsageo.geojson import dump_feature_collection, feature_collection, load_feature_collection
from fsageo.ldu import ldu_path
from fsageo.provinces import province_for_stem
from fsageo.run_meta import build_run_meta, file_meta, new_run_id, utc_now_iso, write_json
from fsageo.spatial.convert import count_coordinates, process_feature

DEFAULT_TOLERANCE_M = 50.0
METADATA_FILENAME = "metadata.json"
RUN_META_FILENAME = "run_meta.json"
_NON_PROVINCE_FILES = {METADATA_FILENAME, RUN_META_FILENAME}


def _log() -> logging.Logger:
    return logging.getLogger("fsageo")


@dataclass(frozen=True)
class PreprocessStats:
    source: str
    output: str
    features: int
    input_coordinates: int
    output_coordinates: int
    input_bytes: int
    output_bytes: int
    seconds: float

    @property
    def coordinate_reduction_pct(self) -> float:
        if self.input_coordinates == 0:
            return 0.0
        return 100.0 * (self.input_coordinates - self.output_coordinates) / self.input_coordinates

    @property
    def size_reduction_pct(self) -> float:
        if self.input_bytes == 0:
            return 0.0
        return 100.0 * (self.input_bytes - self.output_bytes) / self.input_bytes


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes}B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f}K"
    return f"{size_bytes / (1024 * 1024):.1f}M"


def preprocess_collection(collection: dict[str, Any], *, tolerance_m: float) -> dict[str, Any]:
    features = collection.get("features", []) or []
    return feature_collection(process_feature(f, tolerance_m) for f in features)


def preprocess_file(input_path: Path, output_path: Path, *, tolerance_m: float) -> PreprocessStats:
    logger = _log()
    started = time.perf_counter()
    logger.info("Processing %s (tolerance=%sm)", input_path.name, tolerance_m)

    collection = load_feature_collection(input_path)
    features = collection.get("features", []) or []
    input_coords = sum(count_coordinates(f.get("geometry")) for f in features)

    processed = preprocess_collection(collection, tolerance_m=tolerance_m)
    output_coords = sum(count_coordinates(f.get("geometry")) for f in processed["features"])
    dump_feature_collection(output_path, processed)

    stats = PreprocessStats(
        source=str(input_path),
        output=str(output_path),
        features=len(processed["features"]),
        input_coordinates=input_coords,
        output_coordinates=output_coords,
        input_bytes=int(input_path.stat().st_size),
        output_bytes=int(output_path.stat().st_size),
        seconds=time.perf_counter() - started,
    )
    logger.info(
        "Wrote %s: coordinates %d -> %d (%.1f%% fewer), size %s -> %s, %.2fs",
        output_path.name,
        stats.input_coordinates,
        stats.output_coordinates,
        stats.coordinate_reduction_pct,
        format_file_size(stats.input_bytes),
        format_file_size(stats.output_bytes),
        stats.seconds,
    )
    return stats


def preprocess_directory(input_dir: Path, output_dir: Path, *, tolerance_m: float) -> list[PreprocessStats]:
    if not input_dir.is_dir():
        raise FileNotFoundError(input_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    files = sorted(input_dir.glob("*.geojson"))
    _log().info("Found %d GeoJSON files in %s", len(files), input_dir)
    return [
        preprocess_file(path, output_dir / f"{path.stem}.json", tolerance_m=tolerance_m)
        for path in files
    ]


def stats_frame(stats: list[PreprocessStats]) -> pd.DataFrame:
    columns = [
        "source",
        "features",
        "input_coordinates",
        "output_coordinates",
        "coordinate_reduction_pct",
        "input_bytes",
        "output_bytes",
        "size_reduction_pct",
        "seconds",
    ]
    rows = [
        {
            **asdict(s),
            "source": Path(s.source).name,
            "coordinate_reduction_pct": round(s.coordinate_reduction_pct, 1),
            "size_reduction_pct": round(s.size_reduction_pct, 1),
        }
        for s in stats
    ]
    return pd.DataFrame(rows, columns=columns)


def _raw_file_size(raw_dir: Path | None, stem: str) -> tuple[str, int]:
    raw_path = raw_dir / f"{stem}.geojson" if raw_dir is not None else None
    if raw_path is None or not raw_path.exists():
        return "N/A", 0
    size = int(raw_path.stat().st_size)
    return format_file_size(size), size


def _ldu_count(ldu_dir: Path | None, stem: str) -> int:
    path = ldu_path(ldu_dir, stem) if ldu_dir is not None else None
    if path is None or not path.exists():
        return 0
    return len(load_feature_collection(path).get("features", []) or [])


METADATA_COLUMNS = [
    "province",
    "provinceCode",
    "provinceName",
    "fsaCount",
    "lduCount",
    "rawFileSize",
    "rawFileSizeBytes",
    "fileSize",
    "fileSizeBytes",
]


def build_metadata(output_dir: Path, *, raw_dir: Path | None = None, ldu_dir: Path | None = None) -> pd.DataFrame:
    """
    One row per preprocessed province file.

    Raw sizes come from `<raw_dir>/<stem>.geojson` ("N/A"/0 when absent) and LDU counts from
    `<ldu_dir>/<stem>-ldu.geojson` (0 when absent).
    """
    rows: list[dict[str, Any]] = []
    for path in sorted(output_dir.glob("*.json")):
        if path.name in _NON_PROVINCE_FILES:
            continue
        collection = load_feature_collection(path)
        size = int(path.stat().st_size)
        raw_size, raw_bytes = _raw_file_size(raw_dir, path.stem)
        province = province_for_stem(path.stem)
        rows.append(
            {
                "province": path.stem,
                "provinceCode": province.code if province else "",
                "provinceName": province.name if province else "",
                "fsaCount": len(collection.get("features", []) or []),
                "lduCount": _ldu_count(ldu_dir, path.stem),
                "rawFileSize": raw_size,
                "rawFileSizeBytes": raw_bytes,
                "fileSize": format_file_size(size),
                "fileSizeBytes": size,
            }
        )
    return pd.DataFrame(rows, columns=METADATA_COLUMNS)


def write_metadata(output_dir: Path, *, raw_dir: Path | None = None, ldu_dir: Path | None = None) -> Path:
    df = build_metadata(output_dir, raw_dir=raw_dir, ldu_dir=ldu_dir)
    metadata = {
        str(row.province): {
            "provinceCode": str(row.provinceCode),
            "provinceName": str(row.provinceName),
            "fsaCount": int(row.fsaCount),
            "lduCount": int(row.lduCount),
            "rawFileSize": str(row.rawFileSize),
            "rawFileSizeBytes": int(row.rawFileSizeBytes),
            "fileSize": str(row.fileSize),
            "fileSizeBytes": int(row.fileSizeBytes),
        }
        for row in df.itertuples(index=False)
    }
    path = output_dir / METADATA_FILENAME
    write_json(path, metadata)
    for province, entry in metadata.items():
        _log().info(
            "Metadata %s: %d FSAs, %d LDUs, raw %s, preprocessed %s",
            province,
            entry["fsaCount"],
            entry["lduCount"],
            entry["rawFileSize"],
            entry["fileSize"],
        )
    return path


def _optional_dir(settings: dict[str, Any], key: str) -> Path | None:
    value = settings.get("paths", {}).get(key)
    return Path(value) if value else None


def _tolerance_from_settings(settings: dict[str, Any]) -> float:
    return float(settings.get("geometry", {}).get("tolerance_m", DEFAULT_TOLERANCE_M))


def run_preprocess(settings: dict[str, Any], *, tolerance_m: float | None = None) -> list[PreprocessStats]:
    input_dir = Path(settings["paths"]["raw_dir"])
    output_dir = Path(settings["paths"]["processed_dir"])
    tolerance = _tolerance_from_settings(settings) if tolerance_m is None else float(tolerance_m)

    stats = preprocess_directory(input_dir, output_dir, tolerance_m=tolerance)
    write_metadata(output_dir, raw_dir=input_dir, ldu_dir=_optional_dir(settings, "ldu_dir"))

    run_meta = build_run_meta(
        run_id=new_run_id(),
        generated_at=utc_now_iso(),
        settings=settings,
        input_sources=[file_meta(Path(s.source)) for s in stats],
        outputs=[file_meta(Path(s.output)) for s in stats],
        stats=[{**asdict(s), "tolerance_m": tolerance} for s in stats],
    )
    write_json(output_dir / RUN_META_FILENAME, run_meta)
    return stats


def run_metadata(settings: dict[str, Any], *, output_dir: Path | None = None) -> Path:
    out = Path(output_dir) if output_dir else Path(settings["paths"]["processed_dir"])
    return write_metadata(out, raw_dir=_optional_dir(settings, "raw_dir"), ldu_dir=_optional_dir(settings, "ldu_dir"))
