from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Union


# (x, y) pair; meters before projection, (lng, lat) degrees after.
Point2D = tuple[float, float]


class LatLng(NamedTuple):
    lat: float
    lng: float

    @classmethod
    def from_lnglat(cls, point: Sequence[float]) -> "LatLng":
        return cls(lat=float(point[1]), lng=float(point[0]))


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def padded(self, padding: float) -> "BoundingBox":
        return BoundingBox(
            north=self.north + padding,
            south=self.south - padding,
            east=self.east + padding,
            west=self.west - padding,
        )

    def as_dict(self) -> dict[str, float]:
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


LatLngRing = tuple[LatLng, ...]
LatLngPolygon = tuple[LatLngRing, ...]
LatLngMultiPolygon = tuple[LatLngPolygon, ...]


@dataclass(frozen=True)
class ConvertedPolygon:
    id: str
    fsa_id: str
    province_id: str
    province_name: str
    # Polygon: rings; MultiPolygon: polygons of rings.
    coordinates: Union[LatLngPolygon, LatLngMultiPolygon]
    center: LatLng
    is_multi_polygon: bool = False

    def polygon_parts(self) -> tuple[LatLngPolygon, ...]:
        if self.is_multi_polygon:
            return self.coordinates  # type: ignore[return-value]
        return (self.coordinates,)  # type: ignore[return-value]


@dataclass(frozen=True)
class SegmentRegion:
    kind: str
    center: LatLng | None = None
    radius_m: float | None = None
    coordinates: tuple[LatLng, ...] = ()
