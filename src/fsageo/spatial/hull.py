"""
Convex hull of scattered points (Andrew's monotone chain).

Used to turn a handful of selected postal-code positions into a region polygon. Points are
compared by index, so `LatLng` records sort by latitude first and plain pairs by x first.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from fsageo.spatial.model import LatLng, SegmentRegion

P = TypeVar("P", bound=Sequence[float])

DEFAULT_CIRCLE_RADIUS_M = 500.0


def _cross(o: Sequence[float], a: Sequence[float], b: Sequence[float]) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _chain(points: Sequence[P]) -> list[P]:
    chain: list[P] = []
    for p in points:
        # Non-left turns (including collinear) are popped, so boundary points between two
        # hull vertices are dropped.
        while len(chain) >= 2 and _cross(chain[-2], chain[-1], p) <= 0:
            chain.pop()
        chain.append(p)
    return chain


def convex_hull(points: Sequence[P]) -> list[P]:
    """
    Strict convex hull as a closed counter-clockwise ring (last point repeats the first).

    Fewer than three points come back unchanged. Returned points are the caller's own
    objects, so the hull is always a subset of the input.
    """
    if len(points) < 3:
        return list(points)

    ordered = sorted(points, key=lambda p: (p[0], p[1]))
    lower = _chain(ordered)
    upper = _chain(ordered[::-1])
    # The last lower point is the first upper point.
    return lower[:-1] + upper


def segment_region(
    points: Sequence[LatLng],
    *,
    radius_m: float = DEFAULT_CIRCLE_RADIUS_M,
) -> SegmentRegion | None:
    """
    Region for a set of selected positions: a circle around a single point, otherwise the
    convex hull polygon. No points, no region.
    """
    if not points:
        return None
    if len(points) == 1:
        return SegmentRegion(kind="Circle", center=points[0], radius_m=float(radius_m))
    return SegmentRegion(kind="Polygon", coordinates=tuple(convex_hull(points)))
