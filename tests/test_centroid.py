import math

import pytest

from fsageo.spatial.centroid import bounds, polygon_bounds, polygon_center, ring_centroid
from fsageo.spatial.convert import convert_feature
from fsageo.spatial.model import BoundingBox, LatLng


def _polygon_feature(geometry: dict) -> dict:
    return {"type": "Feature", "properties": {"CFSAUID": "A1A"}, "geometry": geometry}


def test_square_centroid_and_area() -> None:
    centroid, area = ring_centroid([(0, 0), (0, 10), (10, 10), (10, 0)])
    assert centroid == pytest.approx((5.0, 5.0))
    assert area == pytest.approx(100.0)


def test_winding_does_not_change_result() -> None:
    ring = [(0.0, 0.0), (4.0, 0.0), (4.0, 3.0)]
    c1, a1 = ring_centroid(ring)
    c2, a2 = ring_centroid(ring[::-1])
    assert a1 == pytest.approx(6.0)
    assert a2 == pytest.approx(6.0)
    assert c1 == pytest.approx((8.0 / 3.0, 1.0))
    assert c2 == pytest.approx(c1)


def test_explicit_closing_vertex_changes_nothing() -> None:
    open_ring = [(0.0, 0.0), (6.0, 0.0), (6.0, 2.0), (0.0, 2.0)]
    closed_ring = open_ring + [open_ring[0]]
    assert ring_centroid(closed_ring)[0] == pytest.approx(ring_centroid(open_ring)[0])
    assert ring_centroid(closed_ring)[1] == pytest.approx(12.0)


def test_regular_polygon_area_and_inside() -> None:
    n = 12
    r = 3.0
    ring = [(10 + r * math.cos(2 * math.pi * k / n), -4 + r * math.sin(2 * math.pi * k / n)) for k in range(n)]
    (cx, cy), area = ring_centroid(ring)
    assert area == pytest.approx(0.5 * n * r * r * math.sin(2 * math.pi / n))
    assert (cx, cy) == pytest.approx((10.0, -4.0))


def test_degenerate_rings_fall_back_to_mean() -> None:
    assert ring_centroid([(0.0, 0.0), (4.0, 2.0)]) == ((2.0, 1.0), 0.0)
    # Collinear: zero area.
    centroid, area = ring_centroid([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)])
    assert area == 0.0
    assert centroid == pytest.approx((1.0, 1.0))
    assert ring_centroid([]) == ((0.0, 0.0), 0.0)


def test_latlng_ring_reads_lng_as_x() -> None:
    ring = [LatLng(45.0, -76.0), LatLng(45.0, -74.0), LatLng(46.0, -74.0), LatLng(46.0, -76.0)]
    centroid, area = ring_centroid(ring)
    assert isinstance(centroid, LatLng)
    assert centroid.lat == pytest.approx(45.5)
    assert centroid.lng == pytest.approx(-75.0)
    assert area == pytest.approx(2.0)


def test_polygon_center_picks_largest_ring() -> None:
    hole = [(1.0, 1.0), (2.0, 1.0), (2.0, 2.0), (1.0, 2.0)]
    outer = [(0.0, 0.0), (10.0, 0.0), (10.0, 4.0), (0.0, 4.0)]
    # Ring order does not matter.
    assert polygon_center([hole, outer]) == pytest.approx((5.0, 2.0))
    assert polygon_center([outer, hole]) == pytest.approx((5.0, 2.0))


def test_polygon_center_edge_cases() -> None:
    assert polygon_center([]) == (0.0, 0.0)
    # All rings degenerate: the first ring's mean wins.
    assert polygon_center([[(0.0, 0.0), (2.0, 0.0)], [(5.0, 5.0)]]) == pytest.approx((1.0, 0.0))


def test_bounds_over_polygons_and_multipolygons() -> None:
    a = convert_feature(
        _polygon_feature({"type": "Polygon", "coordinates": [[[-80.0, 43.0], [-79.0, 43.0], [-79.0, 44.0]]]}),
        preprocessed=True,
    )
    b = convert_feature(
        _polygon_feature(
            {
                "type": "MultiPolygon",
                "coordinates": [
                    [[[-75.0, 45.0], [-74.0, 45.0], [-74.0, 46.5]]],
                    [[[-90.0, 48.0], [-89.0, 48.0], [-89.0, 49.0]]],
                ],
            }
        ),
        preprocessed=True,
    )
    box = bounds([a, b])
    assert box == BoundingBox(north=49.0, south=43.0, east=-74.0, west=-90.0)
    assert box.north >= box.south and box.east >= box.west


def test_bounds_accepts_plain_ring_lists() -> None:
    box = bounds([[[(-100.0, 50.0), (-99.0, 51.5)]]])
    assert box == BoundingBox(north=51.5, south=50.0, east=-99.0, west=-100.0)


def test_bounds_empty_is_none() -> None:
    assert bounds([]) is None
    assert bounds([[[]]]) is None


def test_polygon_bounds_of_empty_polygon_is_inverted_seed() -> None:
    box = polygon_bounds([])
    assert box == BoundingBox(north=-90.0, south=90.0, east=-180.0, west=180.0)
