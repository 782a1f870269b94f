"""
Ring / polygon / multipolygon conversion for FSA boundary features.

Two entry points cover the two ways boundary data reaches the map:

- `project_and_simplify`: raw EPSG:3347 geometry (offline/bulk path). Each ring is simplified
  in meters, then every surviving vertex is reprojected to (lng, lat). The result is still a
  GeoJSON geometry, so it can be written back out and served as preprocessed data.
- `reorder_only`: geometry that was already preprocessed to WGS84. No projection math; raw
  [lng, lat] pairs are only reshaped into `LatLng` records.

Only Polygon and MultiPolygon are understood. Anything else passes through untouched so a
mixed collection degrades gracefully instead of aborting a batch.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from fsageo.spatial.centroid import polygon_center
from fsageo.spatial.crs import EPSG_3347, LccParams, project_points
from fsageo.spatial.model import ConvertedPolygon, LatLng, LatLngMultiPolygon, LatLngPolygon, LatLngRing
from fsageo.spatial.simplify import simplify

POLYGON = "Polygon"
MULTI_POLYGON = "MultiPolygon"
SUPPORTED_GEOMETRIES = frozenset({POLYGON, MULTI_POLYGON})


def process_ring(
    ring: Sequence[Sequence[float]],
    tolerance: float,
    *,
    params: LccParams = EPSG_3347,
) -> list[list[float]]:
    # Simplify first, in meters; a non-positive tolerance skips the simplifier entirely.
    points = simplify(ring, tolerance) if tolerance > 0 else ring
    return [[lng, lat] for lng, lat in project_points(points, params=params)]


def process_polygon(
    coordinates: Sequence[Sequence[Sequence[float]]],
    tolerance: float,
    *,
    params: LccParams = EPSG_3347,
) -> list[list[list[float]]]:
    return [process_ring(ring, tolerance, params=params) for ring in coordinates]


def process_multipolygon(
    coordinates: Sequence[Sequence[Sequence[Sequence[float]]]],
    tolerance: float,
    *,
    params: LccParams = EPSG_3347,
) -> list[list[list[list[float]]]]:
    return [process_polygon(polygon, tolerance, params=params) for polygon in coordinates]


def project_and_simplify(
    geometry: dict[str, Any],
    tolerance: float,
    *,
    params: LccParams = EPSG_3347,
) -> dict[str, Any]:
    """
    Simplify (tolerance in meters) and reproject a GeoJSON Polygon/MultiPolygon geometry.
    Other geometry types are returned as the same object.
    """
    geometry_type = geometry.get("type")
    if geometry_type == POLYGON:
        coordinates: Any = process_polygon(geometry["coordinates"], tolerance, params=params)
    elif geometry_type == MULTI_POLYGON:
        coordinates = process_multipolygon(geometry["coordinates"], tolerance, params=params)
    else:
        return geometry
    return {"type": geometry_type, "coordinates": coordinates}


def process_feature(
    feature: dict[str, Any],
    tolerance: float,
    *,
    params: LccParams = EPSG_3347,
) -> dict[str, Any]:
    geometry = feature.get("geometry")
    if not geometry or geometry.get("type") not in SUPPORTED_GEOMETRIES:
        return feature
    out = dict(feature)
    out["type"] = "Feature"
    out["properties"] = feature.get("properties")
    out["geometry"] = project_and_simplify(geometry, tolerance, params=params)
    return out


def _reorder_ring(ring: Sequence[Sequence[float]]) -> LatLngRing:
    return tuple(LatLng(lat=float(p[1]), lng=float(p[0])) for p in ring)


def _reorder_polygon(coordinates: Sequence[Sequence[Sequence[float]]]) -> LatLngPolygon:
    return tuple(_reorder_ring(ring) for ring in coordinates)


def reorder_only(geometry: dict[str, Any]) -> LatLngPolygon | LatLngMultiPolygon | dict[str, Any]:
    """
    Map already-projected [lng, lat] pairs to `LatLng` records, keeping the nesting.
    Unsupported geometry types are returned as the same object.
    """
    geometry_type = geometry.get("type")
    if geometry_type == POLYGON:
        return _reorder_polygon(geometry["coordinates"])
    if geometry_type == MULTI_POLYGON:
        return tuple(_reorder_polygon(polygon) for polygon in geometry["coordinates"])
    return geometry


def _project_polygon(
    coordinates: Sequence[Sequence[Sequence[float]]],
    params: LccParams,
) -> LatLngPolygon:
    return tuple(
        tuple(LatLng.from_lnglat(p) for p in project_points(ring, params=params)) for ring in coordinates
    )


def count_coordinates(geometry: dict[str, Any] | None) -> int:
    if not geometry:
        return 0
    geometry_type = geometry.get("type")
    if geometry_type == POLYGON:
        return sum(len(ring) for ring in geometry["coordinates"])
    if geometry_type == MULTI_POLYGON:
        return sum(len(ring) for polygon in geometry["coordinates"] for ring in polygon)
    return 0


def _prop(properties: dict[str, Any], key: str) -> str:
    value = properties.get(key)
    return "" if value is None else str(value)


def convert_feature(
    feature: dict[str, Any],
    *,
    preprocessed: bool,
    params: LccParams = EPSG_3347,
) -> ConvertedPolygon:
    """
    Build the map-side record for one FSA feature.

    Preprocessed features are already WGS84 and only get reordered; raw features are
    reprojected vertex by vertex (no simplification). Multipolygons stay whole; their center
    comes from the first polygon part.
    """
    geometry = feature.get("geometry") or {}
    geometry_type = geometry.get("type")
    if geometry_type not in SUPPORTED_GEOMETRIES:
        raise ValueError(f"Unsupported geometry type for FSA feature: {geometry_type!r}")

    is_multi = geometry_type == MULTI_POLYGON
    if preprocessed:
        coordinates: Any = reorder_only(geometry)
    elif is_multi:
        coordinates = tuple(_project_polygon(polygon, params) for polygon in geometry["coordinates"])
    else:
        coordinates = _project_polygon(geometry["coordinates"], params)

    center_rings = (coordinates[0] if coordinates else ()) if is_multi else coordinates
    center = polygon_center(center_rings)
    if not isinstance(center, LatLng):
        # Empty geometry: polygon_center answers with a plain origin pair.
        center = LatLng.from_lnglat(center)

    properties = feature.get("properties") or {}
    return ConvertedPolygon(
        id=_prop(properties, "gml_id"),
        fsa_id=_prop(properties, "CFSAUID"),
        province_id=_prop(properties, "PRUID"),
        province_name=_prop(properties, "PRNAME"),
        coordinates=coordinates,
        center=center,
        is_multi_polygon=is_multi,
    )


def convert_features(
    features: Iterable[dict[str, Any]],
    *,
    preprocessed: bool,
    params: LccParams = EPSG_3347,
) -> list[ConvertedPolygon]:
    """
    Convert a batch. Raw input must be all Polygon/MultiPolygon (anything else raises);
    preprocessed input silently skips other geometry types.
    """
    out: list[ConvertedPolygon] = []
    for feature in features:
        geometry_type = (feature.get("geometry") or {}).get("type")
        if preprocessed and geometry_type not in SUPPORTED_GEOMETRIES:
            continue
        out.append(convert_feature(feature, preprocessed=preprocessed, params=params))
    return out
