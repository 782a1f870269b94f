import numpy as np
import pytest
from scipy.spatial import ConvexHull

from fsageo.spatial.hull import convex_hull, segment_region
from fsageo.spatial.model import LatLng


def _cross(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _random_points(seed: int, n: int) -> list[tuple[float, float]]:
    rng = np.random.default_rng(seed)
    return [tuple(map(float, p)) for p in rng.uniform(-10, 10, size=(n, 2))]


def test_square_with_interior_and_edge_points() -> None:
    points = [(0, 0), (2, 0), (4, 0), (4, 4), (0, 4), (1, 1), (2, 3), (0, 2)]
    hull = convex_hull(points)
    # Closed counter-clockwise ring starting at the lowest sorted point; collinear edge points dropped.
    assert hull == [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]


def test_fewer_than_three_points_unchanged() -> None:
    assert convex_hull([]) == []
    assert convex_hull([(1.0, 1.0)]) == [(1.0, 1.0)]
    assert convex_hull([(1.0, 1.0), (0.0, 0.0)]) == [(1.0, 1.0), (0.0, 0.0)]


def test_hull_is_subset_and_contains_every_point() -> None:
    for seed in range(5):
        points = _random_points(seed, 150)
        hull = convex_hull(points)
        assert hull[0] == hull[-1]
        ids = {id(p) for p in points}
        assert all(id(p) in ids for p in hull)
        for p in points:
            for a, b in zip(hull[:-1], hull[1:]):
                assert _cross(a, b, p) >= -1e-12


def test_hull_is_idempotent() -> None:
    for seed in range(5):
        hull = convex_hull(_random_points(seed, 80))
        assert convex_hull(hull) == hull

    collinear = [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)]
    once = convex_hull(collinear)
    assert convex_hull(once) == once


def test_matches_qhull_vertices() -> None:
    points = _random_points(42, 300)
    hull = convex_hull(points)
    reference = ConvexHull(np.asarray(points))
    assert set(hull[:-1]) == {points[i] for i in reference.vertices}
    assert len(hull) - 1 == len(reference.vertices)


def test_latlng_points_sort_by_latitude_first() -> None:
    points = [LatLng(45.0, -75.0), LatLng(45.0, -74.0), LatLng(46.0, -74.5), LatLng(45.3, -74.5)]
    hull = convex_hull(points)
    assert hull[0] == LatLng(45.0, -75.0)
    assert hull[-1] == hull[0]
    assert LatLng(45.3, -74.5) not in hull
    assert all(isinstance(p, LatLng) for p in hull)


def test_segment_region() -> None:
    assert segment_region([]) is None

    single = segment_region([LatLng(45.0, -75.0)])
    assert single.kind == "Circle"
    assert single.center == LatLng(45.0, -75.0)
    assert single.radius_m == 500.0

    points = [LatLng(45.0, -75.0), LatLng(45.0, -74.0), LatLng(46.0, -74.5)]
    region = segment_region(points, radius_m=250)
    assert region.kind == "Polygon"
    assert set(region.coordinates) == set(points)
    assert region.radius_m is None
