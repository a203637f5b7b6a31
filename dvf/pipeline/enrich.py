"""Locate rows at the centroid of their cadastral parcel."""

from __future__ import annotations

from typing import Iterable

from dvf.common.constants import WGS84_EPSG
from dvf.common.geometry import to_wgs84, truncate_point, vertex_centroid
from dvf.common.models import Position, Row
from dvf.sources.cadastre import ParcelGeometries


def parcel_position(geometry: dict, source_epsg: int = WGS84_EPSG) -> Position | None:
    centroid = vertex_centroid(geometry)
    if centroid is None:
        return None
    longitude, latitude = truncate_point(to_wgs84(*centroid, source_epsg))
    return Position(longitude=longitude, latitude=latitude)


def enrich_rows(
    rows: Iterable[Row],
    parcelles: ParcelGeometries | None,
    *,
    source_epsg: int = WGS84_EPSG,
) -> int:
    """Locate every row whose parcel is known; returns how many were located.

    Rows without a matching parcel keep empty coordinates.
    """
    if not parcelles:
        return 0

    located = 0
    for row in rows:
        if not row.id_parcelle:
            continue
        geometry = parcelles.get(row.id_parcelle)
        if geometry is None:
            continue
        position = parcel_position(geometry, source_epsg)
        if position is None:
            continue
        row.locate(position)
        located += 1
    return located
