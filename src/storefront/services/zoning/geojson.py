"""Conversion of stored GeoJSON zone geometries into ``Zone`` models."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from shapely.errors import GeometryTypeError
from shapely.geometry import Polygon, shape

from ...models.domain import Coordinate, Zone

logger = logging.getLogger(__name__)


def zone_from_geojson(zone_id: str, name: str | None, geometry: Mapping[str, Any]) -> Zone:
    """Build a ``Zone`` from a GeoJSON ``Polygon`` geometry.

    Only the outer ring is used. GeoJSON positions are ``[lon, lat]``; the
    closing vertex that repeats the first point is dropped.

    Raises:
        ValueError: if the geometry is not a polygon or has fewer than 3 distinct points.
    """
    if not geometry or "type" not in geometry:
        raise ValueError(f"Zone '{zone_id}' has no geometry.")
    if geometry["type"] == "Point":
        raise ValueError(f"Zone '{zone_id}' is a map marker (Point), not a delivery zone.")

    try:
        geom = shape(geometry)
    except (GeometryTypeError, ValueError, TypeError, IndexError, KeyError) as exc:
        raise ValueError(f"Zone '{zone_id}' has an unreadable geometry: {exc}") from exc

    if not isinstance(geom, Polygon):
        raise ValueError(f"Zone '{zone_id}' must be a Polygon, got {geom.geom_type}.")

    ring = list(geom.exterior.coords)
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    if len(set(ring)) < 3:
        raise ValueError(f"Zone '{zone_id}' needs at least 3 distinct points.")
    if not geom.is_valid:
        logger.warning(f"Zone '{zone_id}' polygon is self-intersecting; containment uses the even-odd rule.")

    return Zone(
        zone_id=str(zone_id),
        name=name or str(zone_id),
        polygon=tuple(Coordinate(lat=float(lat), lon=float(lon)) for lon, lat, *_ in ring),
    )


def zone_to_geojson(zone: Zone) -> dict[str, Any]:
    """GeoJSON ``Polygon`` geometry for ``zone`` with a closed ring."""

    ring = [[vertex.lon, vertex.lat] for vertex in zone.polygon]
    if ring and ring[0] != ring[-1]:
        ring.append(list(ring[0]))
    return {"type": "Polygon", "coordinates": [ring]}
