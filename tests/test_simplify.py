import math

import numpy as np
import pytest

from fsageo.spatial.simplify import perpendicular_distance, simplify, simplify_indices


def test_small_wiggle_collapses_but_outlier_survives() -> None:
    chain = [(0.0, 0.0), (5.0, 0.1), (10.0, 0.0), (15.0, 5.0)]
    assert simplify(chain, 1.0) == [(0.0, 0.0), (10.0, 0.0), (15.0, 5.0)]


def test_two_points_or_fewer_unchanged() -> None:
    assert simplify([], 10.0) == []
    assert simplify([(1.0, 2.0)], 10.0) == [(1.0, 2.0)]
    assert simplify([(1.0, 2.0), (3.0, 4.0)], 10.0) == [(1.0, 2.0), (3.0, 4.0)]


def test_non_positive_tolerance_is_identity() -> None:
    chain = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 1.0)]
    assert simplify(chain, 0) == chain
    assert simplify(chain, -5) == chain


def test_collinear_chain_collapses_to_endpoints() -> None:
    chain = [(float(i), 2.0 * i) for i in range(20)]
    assert simplify(chain, 0.01) == [chain[0], chain[-1]]


def test_output_is_subsequence_with_endpoints() -> None:
    rng = np.random.default_rng(7)
    for _ in range(20):
        n = int(rng.integers(3, 200))
        chain = [tuple(map(float, p)) for p in rng.normal(size=(n, 2)).cumsum(axis=0)]
        tolerance = float(rng.uniform(0.05, 3.0))
        out = simplify(chain, tolerance)
        assert out[0] is chain[0]
        assert out[-1] is chain[-1]
        assert len(out) <= len(chain)
        # Same objects, same relative order.
        positions = [chain.index(p) for p in out]
        assert positions == sorted(positions)


def test_dropped_points_stay_within_tolerance_of_kept_segment() -> None:
    rng = np.random.default_rng(11)
    chain = [tuple(map(float, p)) for p in rng.normal(size=(300, 2)).cumsum(axis=0)]
    tolerance = 1.5
    xy = np.asarray(chain)
    kept = simplify_indices(xy, tolerance)
    for a, b in zip(kept[:-1], kept[1:]):
        for i in range(a + 1, b):
            assert perpendicular_distance(chain[i], chain[a], chain[b]) <= tolerance


def test_closed_ring_uses_point_distance_for_degenerate_chord() -> None:
    ring = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]
    out = simplify(ring, 1.0)
    assert out[0] == out[-1] == (0.0, 0.0)
    assert (10.0, 10.0) in out
    assert len(out) == 5


def test_dense_ring_does_not_recurse() -> None:
    n = 50_000
    angles = np.linspace(0.0, 2.0 * math.pi, n)
    ring = [(1000.0 * math.cos(a), 1000.0 * math.sin(a)) for a in angles]
    out = simplify(ring, 0.5)
    assert 3 < len(out) < n
    assert out[0] is ring[0]
    assert out[-1] is ring[-1]


def test_perpendicular_distance() -> None:
    assert perpendicular_distance((0.0, 5.0), (-1.0, 0.0), (1.0, 0.0)) == pytest.approx(5.0)
    assert perpendicular_distance((3.0, 4.0), (0.0, 0.0), (0.0, 0.0)) == pytest.approx(5.0)
    # Distance to the infinite line, not the segment.
    assert perpendicular_distance((10.0, 1.0), (0.0, 0.0), (1.0, 0.0)) == pytest.approx(1.0)
