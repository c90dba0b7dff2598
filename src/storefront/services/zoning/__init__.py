"""Delivery zone services."""

from .containment import contains, find_zone
from .geojson import zone_from_geojson, zone_to_geojson

__all__ = ["contains", "find_zone", "zone_from_geojson", "zone_to_geojson"]
