"""Geospatial helper functions."""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0

logger = logging.getLogger(__name__)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _usable(value: object) -> bool:
    # Falsy components (None, 0, 0.0, "") count as missing, as do NaN and infinities.
    if not value or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def distance_km(a: Coordinate | None, b: Coordinate | None) -> Optional[float]:
    """Great-circle distance between two coordinates, or ``None`` when either is incomplete."""

    if a is None or b is None:
        return None
    if not all(_usable(v) for v in (a.lat, a.lon, b.lat, b.lon)):
        logger.debug(f"Missing coordinate component, distance unavailable: {a} -> {b}")
        return None
    return haversine_km(float(a.lat), float(a.lon), float(b.lat), float(b.lon))
