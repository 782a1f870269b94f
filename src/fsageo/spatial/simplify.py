"""
Douglas-Peucker polyline simplification.

Boundary rings from Statistics Canada are far denser than a web map can show, so we drop
vertices whose perpendicular deviation from the simplified chord stays within a tolerance.

Tolerance is in the same linear unit as the input. For FSA data that means meters in
EPSG:3347: simplification must run before reprojection, since a tolerance in degrees is
not uniform across latitudes.

The output is always a subsequence of the input (the same point objects, same order) and
always keeps the first and last point.
"""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

import numpy as np

P = TypeVar("P", bound=Sequence[float])


def perpendicular_distance(
    point: Sequence[float],
    line_start: Sequence[float],
    line_end: Sequence[float],
) -> float:
    x, y = float(point[0]), float(point[1])
    x1, y1 = float(line_start[0]), float(line_start[1])
    x2, y2 = float(line_end[0]), float(line_end[1])

    dx = x2 - x1
    dy = y2 - y1
    if dx == 0 and dy == 0:
        # Degenerate chord (closed ring with first == last): fall back to point distance.
        return math.hypot(x - x1, y - y1)
    return abs(dy * x - dx * y + x2 * y1 - y2 * x1) / math.hypot(dx, dy)


def _chord_distances(xy: np.ndarray, first: int, last: int) -> np.ndarray:
    # Distances of the interior points first+1 .. last-1 from the chord first -> last.
    x1, y1 = xy[first]
    x2, y2 = xy[last]
    inner = xy[first + 1 : last]
    dx = x2 - x1
    dy = y2 - y1
    if dx == 0 and dy == 0:
        return np.hypot(inner[:, 0] - x1, inner[:, 1] - y1)
    numerator = np.abs(dy * inner[:, 0] - dx * inner[:, 1] + x2 * y1 - y2 * x1)
    return numerator / math.hypot(dx, dy)


def simplify_indices(xy: np.ndarray, tolerance: float) -> np.ndarray:
    """
    Return the sorted indices of the vertices kept by Douglas-Peucker.

    `xy` is an (N, 2) float array. An explicit stack replaces recursion so very dense rings
    cannot hit the interpreter's recursion limit; the kept set is identical.
    """
    n = int(xy.shape[0])
    if n <= 2:
        return np.arange(n)

    keep = np.zeros(n, dtype=bool)
    keep[0] = True
    keep[n - 1] = True

    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        distances = _chord_distances(xy, first, last)
        # argmax returns the first maximum, so ties split at the earliest vertex.
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance:
            split = first + 1 + offset
            keep[split] = True
            stack.append((split, last))
            stack.append((first, split))

    return np.flatnonzero(keep)


def simplify(points: Sequence[P], tolerance: float) -> list[P]:
    """
    Simplify a polyline (or ring treated as an open chain) under `tolerance`.

    Chains of two points or fewer come back unchanged, as does any chain when
    `tolerance <= 0`.
    """
    if len(points) <= 2 or tolerance <= 0:
        return list(points)
    xy = np.asarray([(p[0], p[1]) for p in points], dtype=float)
    return [points[i] for i in simplify_indices(xy, float(tolerance))]
