from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from fsageo.provinces import find_province
from fsageo.spatial.convert import convert_features
from fsageo.spatial.model import ConvertedPolygon
from fsageo.spatial.viewport import ViewportIndex


@dataclass(frozen=True)
class CacheEntry:
    features: tuple[dict[str, Any], ...]
    polygons: tuple[ConvertedPolygon, ...]
    index: ViewportIndex


def _check_key(key: str) -> None:
    if find_province(key) is None:
        raise KeyError(f"Unknown province code: {key}")


@dataclass
class PolygonCache:
    """
    Converted polygons per province, owned by whoever loads boundary data.

    Keys are province codes (PRUID, see `fsageo.provinces`); unknown codes are rejected.
    Nothing expires on its own: callers drop entries with `invalidate` or `clear` when the
    underlying data changes.
    """

    _entries: dict[str, CacheEntry] = field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return str(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(str(key))

    def put(
        self,
        key: str,
        features: Iterable[dict[str, Any]],
        *,
        preprocessed: bool = True,
    ) -> CacheEntry:
        _check_key(key)
        feats = tuple(features)
        polygons = tuple(convert_features(feats, preprocessed=preprocessed))
        entry = CacheEntry(features=feats, polygons=polygons, index=ViewportIndex.build(polygons))
        self._entries[str(key)] = entry
        return entry

    def get_or_load(
        self,
        key: str,
        loader: Callable[[], Iterable[dict[str, Any]]],
        *,
        preprocessed: bool = True,
    ) -> CacheEntry:
        cached = self.get(key)
        if cached is not None:
            return cached
        _check_key(key)
        return self.put(key, loader(), preprocessed=preprocessed)

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(str(key), None) is not None

    def clear(self) -> None:
        self._entries.clear()
