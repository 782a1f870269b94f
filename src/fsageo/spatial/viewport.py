"""
Viewport culling for large FSA polygon sets.

A province can carry several hundred FSAs (Ontario has 520, some with thousands of parts), so
the map only draws polygons whose bounding box touches the visible rectangle. Boxes are
computed once per polygon set; a new set means a new index.

When the viewport is unknown (first paint, province switch) every polygon counts as visible.
An empty result would look like "no data here" and flicker, so this fails open.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from fsageo.spatial.centroid import polygon_bounds
from fsageo.spatial.model import BoundingBox, ConvertedPolygon, LatLng

# Padding (degrees) added on every side of the viewport so panning reveals polygons early.
DEFAULT_VIEWPORT_PADDING_DEG = 0.1


def intersects(a: BoundingBox, b: BoundingBox) -> bool:
    # Disjoint only when one box lies entirely north, south, east or west of the other.
    if a.south > b.north or a.north < b.south:
        return False
    if a.west > b.east or a.east < b.west:
        return False
    return True


def pad_viewport(viewport: BoundingBox | None, padding: float = DEFAULT_VIEWPORT_PADDING_DEG) -> BoundingBox | None:
    if viewport is None:
        return None
    return viewport.padded(padding)


def viewport_from_corners(
    north_east: LatLng,
    south_west: LatLng,
    *,
    padding: float = DEFAULT_VIEWPORT_PADDING_DEG,
) -> BoundingBox:
    return BoundingBox(
        north=north_east.lat + padding,
        south=south_west.lat - padding,
        east=north_east.lng + padding,
        west=south_west.lng - padding,
    )


@dataclass(frozen=True)
class ViewportIndex:
    polygons: tuple[ConvertedPolygon, ...]
    boxes: tuple[BoundingBox, ...]
    # Columns: north, south, east, west.
    _box_array: np.ndarray = field(repr=False, compare=False)

    @classmethod
    def build(cls, polygons: Iterable[ConvertedPolygon]) -> "ViewportIndex":
        polys = tuple(polygons)
        boxes = tuple(polygon_bounds(p) for p in polys)
        arr = np.asarray([(b.north, b.south, b.east, b.west) for b in boxes], dtype=float).reshape(-1, 4)
        return cls(polygons=polys, boxes=boxes, _box_array=arr)

    def __len__(self) -> int:
        return len(self.polygons)

    def visible_mask(
        self,
        viewport: BoundingBox | None,
        *,
        padding: float = DEFAULT_VIEWPORT_PADDING_DEG,
    ) -> np.ndarray:
        if viewport is None:
            return np.ones(len(self.polygons), dtype=bool)
        q = viewport.padded(padding)
        arr = self._box_array
        outside = (arr[:, 1] > q.north) | (arr[:, 0] < q.south) | (arr[:, 3] > q.east) | (arr[:, 2] < q.west)
        return ~outside

    def visible_indices(
        self,
        viewport: BoundingBox | None,
        *,
        padding: float = DEFAULT_VIEWPORT_PADDING_DEG,
    ) -> list[int]:
        return [int(i) for i in np.flatnonzero(self.visible_mask(viewport, padding=padding))]

    def visible(
        self,
        viewport: BoundingBox | None,
        *,
        padding: float = DEFAULT_VIEWPORT_PADDING_DEG,
    ) -> list[ConvertedPolygon]:
        """
        Polygons whose box intersects the padded viewport, in input order.
        `viewport=None` returns every polygon.
        """
        if viewport is None:
            return list(self.polygons)
        return [self.polygons[i] for i in self.visible_indices(viewport, padding=padding)]
