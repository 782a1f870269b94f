"""
Lambert Conformal Conic -> WGS84 conversion for FSA boundary data.

Statistics Canada publishes FSA boundaries in EPSG:3347 ("Statistics Canada Lambert"):
- Lambert Conformal Conic, secant cone with standard parallels 49N and 77N,
- latitude of origin 63.390675N, central meridian -91.8666666666667,
- false easting 6,200,000 m and false northing 3,000,000 m,
- NAD83 datum (GRS80 ellipsoid), units in meters.

Web maps want geographic longitude/latitude, so every ring vertex goes through the
inverse cone equations below (Snyder, "Map Projections: A Working Manual", ch. 15).
NAD83 is treated as coincident with WGS84 (no datum shift), which is what proj4 does
for `+datum=NAD83`.

Results come back as (lng, lat), matching GeoJSON order.
"""

from __future__ import annotations

# `math` provides scalar trig for the one-off cone constants.
import math
# `dataclass` gives us an immutable, hashable parameter record.
from dataclasses import dataclass
# `lru_cache` memoizes derived cone constants per parameter set.
from functools import lru_cache
# `Sequence` describes the point inputs (lists of [x, y] pairs, tuples, ...).
from typing import Sequence

# NumPy arrays keep per-ring projection vectorized.
import numpy as np

# Projected and geographic points share the plain (x, y) pair type.
from fsageo.spatial.model import Point2D

# Fixed-point iteration on the conformal latitude: same tolerance/cap as proj4's phi2.
PHI_TOLERANCE_RAD = 1e-12
PHI_MAX_ITER = 15


@dataclass(frozen=True)
class LccParams:
    # Angles in degrees, offsets in meters.
    lat_0: float
    lon_0: float
    lat_1: float
    lat_2: float
    x_0: float
    y_0: float
    # Ellipsoid semi-major axis (m) and inverse flattening.
    a: float = 6_378_137.0
    inv_f: float = 298.257222101


# +proj=lcc +lat_0=63.390675 +lon_0=-91.8666666666667 +lat_1=49 +lat_2=77
# +x_0=6200000 +y_0=3000000 +datum=NAD83 +units=m +no_defs
EPSG_3347 = LccParams(
    lat_0=63.390675,
    lon_0=-91.8666666666667,
    lat_1=49.0,
    lat_2=77.0,
    x_0=6_200_000.0,
    y_0=3_000_000.0,
)


@dataclass(frozen=True)
class _Cone:
    e: float
    n: float
    a_f: float
    rho0: float
    lon0_rad: float


def _msfn(phi: float, e: float) -> float:
    # m = cos(phi) / sqrt(1 - e^2 sin^2(phi)): parallel radius scaled by a.
    s = math.sin(phi)
    return math.cos(phi) / math.sqrt(1.0 - (e * s) ** 2)


def _tsfn(phi: float, e: float) -> float:
    # t = tan(pi/4 - phi/2) / ((1 - e sin phi) / (1 + e sin phi))^(e/2)
    s = math.sin(phi)
    return math.tan(math.pi / 4.0 - phi / 2.0) / ((1.0 - e * s) / (1.0 + e * s)) ** (e / 2.0)


@lru_cache(maxsize=None)
def _cone(params: LccParams) -> _Cone:
    f = 1.0 / params.inv_f
    e = math.sqrt(f * (2.0 - f))

    phi0 = math.radians(params.lat_0)
    phi1 = math.radians(params.lat_1)
    phi2 = math.radians(params.lat_2)

    m1 = _msfn(phi1, e)
    m2 = _msfn(phi2, e)
    t0 = _tsfn(phi0, e)
    t1 = _tsfn(phi1, e)
    t2 = _tsfn(phi2, e)

    # Secant cone: n from both standard parallels. A tangent cone (lat_1 == lat_2)
    # degenerates to n = sin(lat_1).
    if abs(phi1 - phi2) < 1e-10:
        n = math.sin(phi1)
    else:
        n = (math.log(m1) - math.log(m2)) / (math.log(t1) - math.log(t2))
    big_f = m1 / (n * t1**n)
    a_f = params.a * big_f
    rho0 = a_f * t0**n
    return _Cone(e=e, n=n, a_f=a_f, rho0=rho0, lon0_rad=math.radians(params.lon_0))


def _phi_from_t(t: np.ndarray, e: float) -> np.ndarray:
    # Start from the spherical solution and refine until the update is below tolerance.
    half_e = e / 2.0
    phi = np.pi / 2.0 - 2.0 * np.arctan(t)
    for _ in range(PHI_MAX_ITER):
        con = e * np.sin(phi)
        nxt = np.pi / 2.0 - 2.0 * np.arctan(t * ((1.0 - con) / (1.0 + con)) ** half_e)
        delta = np.abs(nxt - phi)
        phi = nxt
        if np.all(delta <= PHI_TOLERANCE_RAD):
            break
    return phi


def lcc_to_lonlat(
    x_m: np.ndarray,
    y_m: np.ndarray,
    *,
    params: LccParams = EPSG_3347,
) -> tuple[np.ndarray, np.ndarray]:
    # Work in float so integer coordinate arrays do not truncate intermediate math.
    x = np.asarray(x_m, dtype=float)
    y = np.asarray(y_m, dtype=float)
    cone = _cone(params)

    # Offsets from the cone apex: x measured from false easting, y from rho0 downward.
    dx = x - params.x_0
    dy = cone.rho0 - (y - params.y_0)
    rho = np.hypot(dx, dy)
    # A cone opening toward the south pole flips every sign.
    if cone.n < 0:
        rho, dx, dy = -rho, -dx, -dy

    # Polar angle around the apex gives longitude; rho == 0 is the pole on the central meridian.
    theta = np.arctan2(dx, dy)
    lon_rad = theta / cone.n + cone.lon0_rad
    # Keep longitudes in [-180, 180) even if a point sits across the antimeridian.
    lon_rad = (lon_rad + np.pi) % (2.0 * np.pi) - np.pi

    # Distance from the apex gives the isometric t, then latitude by iteration.
    t = (rho / cone.a_f) ** (1.0 / cone.n)
    lat_rad = _phi_from_t(t, cone.e)
    if cone.n < 0:
        lat_rad = -lat_rad

    # Return degrees in (lon, lat) order to match GeoJSON.
    return np.rad2deg(lon_rad), np.rad2deg(lat_rad)


def project(x: float, y: float, *, params: LccParams = EPSG_3347) -> Point2D:
    """
    Convert one projected point (meters) to geographic (lng, lat) degrees.
    """
    lon, lat = lcc_to_lonlat(np.array([x], dtype=float), np.array([y], dtype=float), params=params)
    return float(lon[0]), float(lat[0])


def project_points(
    points: Sequence[Sequence[float]],
    *,
    params: LccParams = EPSG_3347,
) -> list[Point2D]:
    """
    Convert a sequence of [x, y] pairs (e.g. one ring) to (lng, lat) tuples in one vectorized pass.
    Extra ordinates such as z are ignored.
    """
    # An empty ring has nothing to project; np.asarray([]) would also have the wrong shape.
    if len(points) == 0:
        return []
    # Ragged input (mixed point arity) fails here with a ValueError, which is a caller data error.
    arr = np.asarray([(p[0], p[1]) for p in points], dtype=float)
    lon, lat = lcc_to_lonlat(arr[:, 0], arr[:, 1], params=params)
    return [(float(lo), float(la)) for lo, la in zip(lon, lat)]
