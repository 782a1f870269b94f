"""
GeoJSON file I/O for FSA boundary collections.

Only the FeatureCollection envelope is validated (types, feature list, geometry tag).
Coordinates are left as parsed JSON so large provinces do not pay for per-vertex models;
the spatial code raises on malformed points itself.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict


class GeometryModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    coordinates: Any = None


class FeatureModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["Feature"]
    properties: dict[str, Any] | None = None
    geometry: GeometryModel | None = None


class FeatureCollectionModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["FeatureCollection"]
    features: list[FeatureModel]


def validate_feature_collection(data: Any) -> dict[str, Any]:
    # Raises pydantic.ValidationError with the offending path on a malformed envelope.
    FeatureCollectionModel.model_validate(data)
    return data


def load_feature_collection(path: Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    return validate_feature_collection(data)


def feature_collection(features: Iterable[dict[str, Any]]) -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": list(features)}


def dump_feature_collection(path: Path, collection: dict[str, Any]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    # Compact separators: these files are served to browsers, not read by humans.
    p.write_text(json.dumps(collection, ensure_ascii=False, separators=(",", ":")), encoding="utf-8")
    return p
