"""Geometry helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterator

from pyproj import CRS, Transformer

from dvf.common.constants import COORDINATE_PRECISION, WGS84_EPSG

_RING_TYPES = {"Polygon", "MultiPolygon"}


def _is_position(value: object) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value[:2])
    )


def _iter_positions(coordinates: object, *, skip_ring_closure: bool) -> Iterator[tuple[float, float]]:
    if _is_position(coordinates):
        yield float(coordinates[0]), float(coordinates[1])
        return
    if not isinstance(coordinates, (list, tuple)):
        return
    items = list(coordinates)
    # A linear ring repeats its first position last.
    if skip_ring_closure and len(items) > 1 and all(_is_position(item) for item in items) and items[0] == items[-1]:
        items = items[:-1]
    for item in items:
        yield from _iter_positions(item, skip_ring_closure=skip_ring_closure)


def iter_geometry_positions(geometry: dict[str, Any] | None) -> Iterator[tuple[float, float]]:
    if not geometry:
        return
    geometry_type = geometry.get("type")
    if geometry_type == "GeometryCollection":
        for member in geometry.get("geometries") or []:
            yield from iter_geometry_positions(member)
        return
    yield from _iter_positions(geometry.get("coordinates"), skip_ring_closure=geometry_type in _RING_TYPES)


def vertex_centroid(geometry: dict[str, Any] | None) -> tuple[float, float] | None:
    """Mean of a geometry's vertices as ``(x, y)``, ring closures excluded."""
    points = list(iter_geometry_positions(geometry))
    if not points:
        return None
    x = sum(point[0] for point in points) / len(points)
    y = sum(point[1] for point in points) / len(points)
    return x, y


@lru_cache(maxsize=None)
def _transformer_to_wgs84(source_epsg: int) -> Transformer:
    return Transformer.from_crs(CRS.from_epsg(source_epsg), CRS.from_epsg(WGS84_EPSG), always_xy=True)


def to_wgs84(x: float, y: float, source_epsg: int) -> tuple[float, float]:
    """Reproject ``(x, y)`` to WGS84 ``(lon, lat)``."""
    if source_epsg == WGS84_EPSG:
        return x, y
    lon, lat = _transformer_to_wgs84(source_epsg).transform(x, y)
    return lon, lat


def truncate_point(point: tuple[float, float], precision: int = COORDINATE_PRECISION) -> tuple[float, float]:
    return round(point[0], precision), round(point[1], precision)
