"""
LDU point extraction.

A Canadian postal code is FSA + LDU: "M5V1K2" is FSA "M5V" and LDU "1K2". Every entry of the
postal-code list becomes one Point feature, and each province boundary file gets the points
whose FSA appears among its own `CFSAUID`s, written as `<stem>-ldu.geojson`.

These points are what the map offers as selectable markers; a segment drawn from several of
them is the convex hull of their positions (`fsageo.spatial.hull.segment_region`).
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from fsageo.geojson import dump_feature_collection, feature_collection, load_feature_collection

LDU_SUFFIX = "-ldu.geojson"
POSTAL_CODE_LENGTH = 6
FSA_LENGTH = 3


def _log() -> logging.Logger:
    return logging.getLogger("fsageo")


class PostalCodeEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Left untyped: entries with a missing or non-string code are skipped, not rejected.
    postal_code: Any = Field(default=None, alias="postal-code")
    city: str | None = None
    province_code: str | None = Field(default=None, alias="province-code")
    country_code: str | None = Field(default=None, alias="country-code")
    latitude: float
    longitude: float


_POSTAL_CODES = TypeAdapter(list[PostalCodeEntry])


@dataclass(frozen=True)
class LduStats:
    source: str
    output: str
    fsa_codes: int
    features: int
    seconds: float


def ldu_path(ldu_dir: Path, stem: str) -> Path:
    return ldu_dir / f"{stem}{LDU_SUFFIX}"


def load_postal_codes(path: Path) -> list[PostalCodeEntry]:
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    return _POSTAL_CODES.validate_python(data)


def fsa_codes_of(collection: dict[str, Any]) -> set[str]:
    codes: set[str] = set()
    for feature in collection.get("features", []) or []:
        code = (feature.get("properties") or {}).get("CFSAUID")
        if code:
            codes.add(str(code))
    return codes


def ldu_feature(entry: PostalCodeEntry) -> dict[str, Any] | None:
    postal_code = entry.postal_code
    if not isinstance(postal_code, str) or len(postal_code) < POSTAL_CODE_LENGTH:
        return None
    return {
        "type": "Feature",
        "properties": {
            "postalCode": postal_code,
            "fsa": postal_code[:FSA_LENGTH].upper(),
            "ldu": postal_code[FSA_LENGTH:POSTAL_CODE_LENGTH],
            "city": entry.city,
            "provinceCode": entry.province_code,
            "countryCode": entry.country_code,
        },
        "geometry": {"type": "Point", "coordinates": [entry.longitude, entry.latitude]},
    }


def extract_ldu_features(
    postal_codes: Iterable[PostalCodeEntry | dict[str, Any]],
    fsa_codes: Iterable[str],
) -> list[dict[str, Any]]:
    """
    Point features for every postal code whose FSA is in `fsa_codes`, in input order.
    """
    wanted = set(fsa_codes)
    features: list[dict[str, Any]] = []
    for raw in postal_codes:
        entry = raw if isinstance(raw, PostalCodeEntry) else PostalCodeEntry.model_validate(raw)
        feature = ldu_feature(entry)
        if feature is not None and feature["properties"]["fsa"] in wanted:
            features.append(feature)
    return features


def extract_ldu_file(
    boundary_path: Path,
    postal_codes: list[PostalCodeEntry],
    output_dir: Path,
) -> LduStats:
    logger = _log()
    started = time.perf_counter()
    logger.info("Reading FSA codes from %s", boundary_path.name)

    fsa_codes = fsa_codes_of(load_feature_collection(boundary_path))
    features = extract_ldu_features(postal_codes, fsa_codes)
    output_path = ldu_path(output_dir, boundary_path.stem)
    dump_feature_collection(output_path, feature_collection(features))

    stats = LduStats(
        source=str(boundary_path),
        output=str(output_path),
        fsa_codes=len(fsa_codes),
        features=len(features),
        seconds=time.perf_counter() - started,
    )
    logger.info("Wrote %s: %d FSAs, %d LDU points", output_path.name, stats.fsa_codes, stats.features)
    return stats


def extract_ldu_directory(boundary_dir: Path, postal_codes_path: Path, output_dir: Path) -> list[LduStats]:
    if not boundary_dir.is_dir():
        raise FileNotFoundError(boundary_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    postal_codes = load_postal_codes(postal_codes_path)
    _log().info("Loaded %d postal code entries from %s", len(postal_codes), postal_codes_path)

    files = [p for p in sorted(boundary_dir.glob("*.geojson")) if not p.name.endswith(LDU_SUFFIX)]
    _log().info("Found %d boundary files in %s", len(files), boundary_dir)
    return [extract_ldu_file(path, postal_codes, output_dir) for path in files]


def ldu_frame(stats: list[LduStats]) -> pd.DataFrame:
    rows = [{**asdict(s), "source": Path(s.source).name, "output": Path(s.output).name} for s in stats]
    return pd.DataFrame(rows, columns=["source", "output", "fsa_codes", "features", "seconds"])


def run_extract_ldu(settings: dict[str, Any], *, postal_codes_path: Path | None = None) -> list[LduStats]:
    paths = settings["paths"]
    return extract_ldu_directory(
        Path(paths["raw_dir"]),
        Path(postal_codes_path or paths["postal_codes"]),
        Path(paths["ldu_dir"]),
    )
