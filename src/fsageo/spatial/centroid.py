"""
Centroids and bounding boxes over ring / polygon / multipolygon structures.

Points are read as (x, y) = (lng, lat). Rings may hold plain pairs in GeoJSON order or
`LatLng` records; `LatLng` is read by attribute so the axis order is never guessed.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

import numpy as np

from fsageo.spatial.model import BoundingBox, ConvertedPolygon, LatLng

# Below this absolute signed area a ring is treated as degenerate.
MIN_RING_AREA = 1e-10

# Fold seed for bounds: inverted world box, so any real point replaces it.
_SEED = BoundingBox(north=-90.0, south=90.0, east=-180.0, west=180.0)


def _xy(point: Any) -> tuple[float, float]:
    if isinstance(point, LatLng):
        return point.lng, point.lat
    return float(point[0]), float(point[1])


def _like(template: Any, x: float, y: float) -> Any:
    # Answer in the caller's point representation.
    if isinstance(template, LatLng):
        return LatLng(lat=y, lng=x)
    return (x, y)


def _ring_arrays(ring: Sequence[Any]) -> tuple[np.ndarray, np.ndarray]:
    xy = np.asarray([_xy(p) for p in ring], dtype=float).reshape(-1, 2)
    return xy[:, 0], xy[:, 1]


def ring_centroid(ring: Sequence[Any]) -> tuple[Any, float]:
    """
    Area-weighted centroid of a closed ring and its unsigned area.

    Closure is implicit: the last vertex connects back to the first, so a repeated closing
    vertex contributes a zero-length edge and changes nothing. Rings with fewer than three
    points or near-zero area fall back to the vertex mean with area 0.
    """
    n = len(ring)
    if n == 0:
        return (0.0, 0.0), 0.0

    xs, ys = _ring_arrays(ring)
    mean = _like(ring[0], float(xs.mean()), float(ys.mean()))
    if n < 3:
        return mean, 0.0

    xn = np.roll(xs, -1)
    yn = np.roll(ys, -1)
    cross = xs * yn - xn * ys
    signed_area = 0.5 * float(cross.sum())
    area = abs(signed_area)
    if area < MIN_RING_AREA:
        return mean, 0.0

    factor = 1.0 / (6.0 * signed_area)
    cx = float(((xs + xn) * cross).sum()) * factor
    cy = float(((ys + yn) * cross).sum()) * factor
    return _like(ring[0], cx, cy), area


def polygon_center(rings: Sequence[Sequence[Any]]) -> Any:
    """
    Center of a polygon: the centroid of its largest ring.

    Holes are expected to be smaller than the boundary they are cut from, so this lands on
    the outer ring without trusting ring order.
    """
    if len(rings) == 0:
        return (0.0, 0.0)

    best: Any = None
    max_area = -1.0
    for ring in rings:
        centroid, area = ring_centroid(ring)
        if area > max_area:
            max_area = area
            best = centroid
    return best


def _rings_of(polygon: Any) -> Iterator[Sequence[Any]]:
    if isinstance(polygon, ConvertedPolygon):
        for part in polygon.polygon_parts():
            yield from part
        return
    yield from polygon


def _fold_bounds(points: Iterable[Any]) -> BoundingBox | None:
    xy = np.asarray([_xy(p) for p in points], dtype=float).reshape(-1, 2)
    if xy.shape[0] == 0:
        return None
    return BoundingBox(
        north=max(_SEED.north, float(xy[:, 1].max())),
        south=min(_SEED.south, float(xy[:, 1].min())),
        east=max(_SEED.east, float(xy[:, 0].max())),
        west=min(_SEED.west, float(xy[:, 0].min())),
    )


def bounds(polygons: Iterable[Any]) -> BoundingBox | None:
    """
    Bounding box over every point of every ring of every polygon.

    Items may be `ConvertedPolygon` records (multipolygon parts included) or plain polygon
    coordinates (a sequence of rings). Returns None when there are no points at all; callers
    must treat that as "leave the viewport alone", not as an empty world.
    """
    return _fold_bounds(p for polygon in polygons for ring in _rings_of(polygon) for p in ring)


def polygon_bounds(polygon: Any) -> BoundingBox:
    """
    Bounding box of a single polygon. An empty polygon yields the inverted seed box,
    which misses any viewport inside the world extent.
    """
    box = _fold_bounds(p for ring in _rings_of(polygon) for p in ring)
    return _SEED if box is None else box
