"""API routes for delivery zone checks."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.zones import ZoneContainsRequest, ZoneContainsResponse
from ...services.zoning.containment import contains
from ...services.zoning.geojson import zone_from_geojson

router = APIRouter(prefix="/zones", tags=["zones"])


@router.post("/contains", response_model=ZoneContainsResponse, status_code=status.HTTP_200_OK)
def zone_contains(payload: ZoneContainsRequest) -> ZoneContainsResponse:
    """Check whether a test coordinate lies inside a saved delivery zone (edges count as inside)."""
    try:
        zone = zone_from_geojson(
            payload.zone.zone_id,
            payload.zone.name,
            payload.zone.geometry.model_dump(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ZoneContainsResponse(zone_id=zone.zone_id, inside=contains(payload.point.to_domain(), zone))
