"""Point-in-polygon checks for admin-drawn delivery zones.

Zone rings are handed to shapely in ``(lon, lat)`` order. A point lying exactly
on an edge or vertex counts as inside (``covers`` rather than ``contains``).
Self-intersecting rings are repaired with ``make_valid``, which keeps the lobes
of a bowtie and leaves the wedges between them outside. Rings that enclose no
area contain nothing.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional

import shapely
from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry

from ...models.domain import Coordinate, Zone


@lru_cache(maxsize=256)
def zone_geometry(polygon: tuple[Coordinate, ...]) -> Optional[BaseGeometry]:
    """Build the prepared shapely geometry for a zone ring, or ``None`` when it has no area."""

    ring = [
        (vertex.lon, vertex.lat)
        for vertex in polygon
        if vertex.lat is not None and vertex.lon is not None
    ]
    if len(ring) < 3:
        return None
    geometry = Polygon(ring)
    if not geometry.is_valid:
        geometry = shapely.make_valid(geometry)
    if geometry.is_empty or geometry.area == 0:
        return None
    shapely.prepare(geometry)
    return geometry


def contains(point: Coordinate | None, zone: Zone | None) -> bool:
    if point is None or zone is None or point.lat is None or point.lon is None:
        return False
    geometry = zone_geometry(tuple(zone.polygon))
    if geometry is None:
        return False
    return bool(geometry.covers(Point(float(point.lon), float(point.lat))))


def find_zone(point: Coordinate | None, zones: Iterable[Zone]) -> Optional[Zone]:
    """Return the first zone, in the given order, that contains ``point``."""

    for zone in zones:
        if contains(point, zone):
            return zone
    return None
