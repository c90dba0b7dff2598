"""API routes for delivery fee quotes."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status

from ...models.domain import FREE, INFEASIBLE, Zone
from ...schemas.delivery import DeliveryQuoteRequest, DeliveryQuoteResponse
from ...services.clock import now_local, shop_timezone
from ...services.delivery.pricing import pricing_from_settings, quote_delivery
from ...services.zoning.containment import contains
from ...services.zoning.geojson import zone_from_geojson

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery", tags=["delivery"])


def _delivery_zone(payload: DeliveryQuoteRequest) -> Optional[Zone]:
    zone_id = payload.settings.delivery_zone_id if payload.settings else None
    if not zone_id:
        return None
    for candidate in payload.zones:
        if candidate.zone_id == zone_id:
            return zone_from_geojson(candidate.zone_id, candidate.name, candidate.geometry.model_dump())
    logger.debug(f"Delivery zone {zone_id!r} not among the supplied zones; quoting without it")
    return None


@router.post("/quote", response_model=DeliveryQuoteResponse, status_code=status.HTTP_200_OK)
def delivery_quote(payload: DeliveryQuoteRequest) -> DeliveryQuoteResponse:
    """Price delivery from ``origin`` to ``destination``; infeasible quotes must block checkout.

    When the admin settings name a delivery zone that is supplied in ``zones``,
    destinations outside it are infeasible whatever the basket subtotal.
    """
    tz = shop_timezone()
    admin = payload.settings
    try:
        zone = _delivery_zone(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    destination = payload.destination.to_domain() if payload.destination else None
    config, override_rate = pricing_from_settings(
        admin.base_delivery_fee if admin else None,
        admin.price_per_km if admin else None,
    )
    quote = quote_delivery(
        payload.origin.to_domain() if payload.origin else None,
        destination,
        payload.subtotal,
        config,
        payload.now or now_local(tz),
        override_rate,
        tz=tz,
    )

    if zone is not None and not contains(destination, zone):
        status_label, fee = "infeasible", None
    elif quote.fee == FREE:
        status_label, fee = "free", 0
    elif quote.fee == INFEASIBLE:
        status_label, fee = "infeasible", None
    else:
        status_label, fee = "priced", quote.fee

    return DeliveryQuoteResponse(
        distance_km=quote.distance_km,
        status=status_label,
        fee=fee,
        rate=quote.rate,
        is_peak=quote.is_peak,
        zone_id=zone.zone_id if zone is not None else None,
    )
