"""Pydantic request/response models for delivery quotes."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field

from .shop import CamelModel
from .zones import CoordinateModel, ZoneModel


class DeliverySettingsPayload(CamelModel):
    """Admin delivery settings as returned by the settings endpoint."""

    base_delivery_fee: Optional[Any] = Field(default=None, alias="baseDeliveryFee")
    price_per_km: Optional[Any] = Field(default=None, alias="pricePerKm")
    delivery_zone_id: Optional[str] = Field(
        default=None,
        alias="deliveryZoneId",
        description="Zone the destination must fall inside; looked up in the request's zones.",
    )


class DeliveryQuoteRequest(CamelModel):
    origin: Optional[CoordinateModel] = Field(default=None, description="Shop or pickup point.")
    destination: Optional[CoordinateModel] = Field(default=None, description="Customer delivery location.")
    subtotal: float = Field(default=0.0, ge=0.0)
    settings: Optional[DeliverySettingsPayload] = None
    zones: list[ZoneModel] = Field(default_factory=list, description="Saved delivery zones.")
    now: Optional[datetime] = None


class DeliveryQuoteResponse(CamelModel):
    distance_km: Optional[float] = Field(default=None, alias="distanceKm")
    status: Literal["priced", "free", "infeasible"]
    fee: Optional[int] = Field(default=None, description="Fee in whole currency units; 0 when free, null when infeasible.")
    rate: Optional[float] = None
    is_peak: bool = Field(default=False, alias="isPeak")
    zone_id: Optional[str] = Field(default=None, alias="zoneId")
