import pytest

from fsageo.spatial.convert import (
    convert_feature,
    convert_features,
    count_coordinates,
    process_feature,
    process_ring,
    project_and_simplify,
    reorder_only,
)
from fsageo.spatial.crs import project
from fsageo.spatial.model import ConvertedPolygon, LatLng

X0, Y0 = 6_200_000.0, 3_000_000.0

# 10 km square at the false origin with a redundant midpoint on the bottom edge.
RAW_RING = [
    [X0, Y0],
    [X0 + 5_000, Y0],
    [X0 + 10_000, Y0],
    [X0 + 10_000, Y0 + 10_000],
    [X0, Y0 + 10_000],
    [X0, Y0],
]
RAW_HOLE = [
    [X0 + 4_000, Y0 + 4_000],
    [X0 + 6_000, Y0 + 4_000],
    [X0 + 6_000, Y0 + 6_000],
    [X0 + 4_000, Y0 + 6_000],
]


def _feature(geometry: dict, **props: str) -> dict:
    properties = {"gml_id": "fsa.1", "CFSAUID": "K1A", "PRUID": "35", "PRNAME": "Ontario", **props}
    return {"type": "Feature", "properties": properties, "geometry": geometry}


def test_process_ring_simplifies_in_meters_then_projects() -> None:
    out = process_ring(RAW_RING, 50.0)
    # The collinear midpoint is gone, everything else survives.
    assert len(out) == 5
    assert out[0] == pytest.approx(list(project(X0, Y0)))
    assert out[1] == pytest.approx(list(project(X0 + 10_000, Y0)))
    assert all(isinstance(p, list) and len(p) == 2 for p in out)


def test_zero_tolerance_keeps_every_vertex() -> None:
    out = process_ring(RAW_RING, 0)
    assert len(out) == len(RAW_RING)
    assert out[1] == pytest.approx(list(project(X0 + 5_000, Y0)))


def test_project_and_simplify_keeps_structure() -> None:
    polygon = project_and_simplify({"type": "Polygon", "coordinates": [RAW_RING, RAW_HOLE]}, 50.0)
    assert polygon["type"] == "Polygon"
    assert [len(r) for r in polygon["coordinates"]] == [5, 4]

    multi = project_and_simplify(
        {"type": "MultiPolygon", "coordinates": [[RAW_RING], [RAW_RING, RAW_HOLE]]},
        0,
    )
    assert multi["type"] == "MultiPolygon"
    assert [[len(r) for r in poly] for poly in multi["coordinates"]] == [[6], [6, 4]]
    lng, lat = multi["coordinates"][1][1][0]
    assert (lng, lat) == pytest.approx(project(X0 + 4_000, Y0 + 4_000))


def test_unsupported_geometry_passes_through() -> None:
    point = {"type": "Point", "coordinates": [X0, Y0]}
    assert project_and_simplify(point, 50.0) is point
    feature = _feature(point)
    assert process_feature(feature, 50.0) is feature
    assert reorder_only(point) is point


def test_process_feature_keeps_properties() -> None:
    feature = _feature({"type": "Polygon", "coordinates": [RAW_RING]})
    out = process_feature(feature, 50.0)
    assert out is not feature
    assert out["properties"] == feature["properties"]
    assert out["geometry"]["type"] == "Polygon"
    # Input is left untouched.
    assert feature["geometry"]["coordinates"][0] is RAW_RING


def test_reorder_only_builds_latlng_records() -> None:
    rings = reorder_only({"type": "Polygon", "coordinates": [[[-75.7, 45.4], [-75.6, 45.4], [-75.6, 45.5]]]})
    assert rings == ((LatLng(45.4, -75.7), LatLng(45.4, -75.6), LatLng(45.5, -75.6)),)

    parts = reorder_only({"type": "MultiPolygon", "coordinates": [[[[1.0, 2.0]]], [[[3.0, 4.0]]]]})
    assert parts == (((LatLng(2.0, 1.0),),), ((LatLng(4.0, 3.0),),))


def test_count_coordinates() -> None:
    assert count_coordinates({"type": "Polygon", "coordinates": [RAW_RING, RAW_HOLE]}) == 10
    assert count_coordinates({"type": "MultiPolygon", "coordinates": [[RAW_RING], [RAW_HOLE]]}) == 10
    assert count_coordinates({"type": "Point", "coordinates": [0, 0]}) == 0
    assert count_coordinates(None) == 0


def test_convert_preprocessed_polygon() -> None:
    square = [[-76.0, 45.0], [-75.0, 45.0], [-75.0, 46.0], [-76.0, 46.0]]
    polygon = convert_feature(_feature({"type": "Polygon", "coordinates": [square]}), preprocessed=True)
    assert isinstance(polygon, ConvertedPolygon)
    assert polygon.id == "fsa.1"
    assert polygon.fsa_id == "K1A"
    assert polygon.province_id == "35"
    assert polygon.province_name == "Ontario"
    assert not polygon.is_multi_polygon
    assert polygon.center.lat == pytest.approx(45.5)
    assert polygon.center.lng == pytest.approx(-75.5)


def test_convert_multipolygon_center_comes_from_first_part() -> None:
    small = [[-76.0, 45.0], [-75.0, 45.0], [-75.0, 46.0], [-76.0, 46.0]]
    large = [[-70.0, 50.0], [-60.0, 50.0], [-60.0, 60.0], [-70.0, 60.0]]
    polygon = convert_feature(
        _feature({"type": "MultiPolygon", "coordinates": [[small], [large]]}),
        preprocessed=True,
    )
    assert polygon.is_multi_polygon
    assert len(polygon.polygon_parts()) == 2
    assert polygon.center == pytest.approx(LatLng(45.5, -75.5))


def test_convert_raw_feature_projects_without_simplifying() -> None:
    polygon = convert_feature(_feature({"type": "Polygon", "coordinates": [RAW_RING]}), preprocessed=False)
    ring = polygon.coordinates[0]
    assert len(ring) == len(RAW_RING)
    lng, lat = project(X0 + 5_000, Y0)
    assert ring[1] == pytest.approx(LatLng(lat, lng))


def test_convert_missing_properties_become_empty_strings() -> None:
    feature = {"type": "Feature", "properties": None, "geometry": {"type": "Polygon", "coordinates": []}}
    polygon = convert_feature(feature, preprocessed=True)
    assert polygon.id == "" and polygon.fsa_id == ""
    assert polygon.center == LatLng(0.0, 0.0)


def test_convert_features_raw_rejects_unsupported_geometry() -> None:
    features = [_feature({"type": "Point", "coordinates": [X0, Y0]})]
    with pytest.raises(ValueError, match="Unsupported geometry"):
        convert_features(features, preprocessed=False)


def test_convert_features_preprocessed_skips_unsupported_geometry() -> None:
    square = [[-76.0, 45.0], [-75.0, 45.0], [-75.0, 46.0], [-76.0, 46.0]]
    features = [
        _feature({"type": "Point", "coordinates": [-75.0, 45.0]}),
        _feature({"type": "Polygon", "coordinates": [square]}, CFSAUID="K2B"),
    ]
    polygons = convert_features(features, preprocessed=True)
    assert [p.fsa_id for p in polygons] == ["K2B"]
