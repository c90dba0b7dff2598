"""Pydantic request/response models for delivery zone checks."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import Field

from ..models.domain import Coordinate
from .shop import CamelModel


class CoordinateModel(CamelModel):
    lat: Optional[float] = None
    lon: Optional[float] = None

    def to_domain(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)


class GeometryModel(CamelModel):
    type: Literal["Polygon", "Point"]
    coordinates: Any


class ZoneModel(CamelModel):
    zone_id: str = Field(alias="id")
    name: Optional[str] = None
    geometry: GeometryModel


class ZoneContainsRequest(CamelModel):
    zone: ZoneModel
    point: CoordinateModel


class ZoneContainsResponse(CamelModel):
    zone_id: str = Field(alias="zoneId")
    inside: bool
