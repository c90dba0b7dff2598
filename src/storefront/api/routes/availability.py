"""API routes for shop availability."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, status

from ...schemas.shop import (
    AvailabilityRequest,
    AvailabilityResponse,
    NextOpeningModel,
    OwnerStatusRequest,
    OwnerStatusResponse,
)
from ...services.availability.closures import resolve_availability
from ...services.availability.schedule import auto_accept_until, describe_owner_status, next_opening
from ...services.clock import now_local, shop_timezone

router = APIRouter(prefix="/availability", tags=["availability"])


def _moment(value: datetime | None) -> datetime:
    return value or now_local()


@router.post("/status", response_model=AvailabilityResponse, status_code=status.HTTP_200_OK)
def availability_status(payload: AvailabilityRequest) -> AvailabilityResponse:
    """Whether the shop accepts orders at ``now`` (or right now)."""
    tz = shop_timezone()
    result = resolve_availability(
        payload.weekly_schedule(),
        payload.closure(),
        payload.holidays(tz),
        _moment(payload.now),
        tz=tz,
    )
    return AvailabilityResponse.model_validate(result.as_dict())


@router.post("/owner-status", response_model=OwnerStatusResponse, status_code=status.HTTP_200_OK)
def owner_status(payload: OwnerStatusRequest) -> OwnerStatusResponse:
    """Dashboard view: availability plus closure cause, next opening and auto-accept cut-off."""
    tz = shop_timezone()
    moment = _moment(payload.now)
    weekly = payload.weekly_schedule()
    owner = describe_owner_status(weekly, payload.closure(), payload.holidays(tz), moment, tz=tz)
    opening = next_opening(weekly, moment, tz=tz)

    return OwnerStatusResponse(
        is_open=owner.status.is_open,
        is_closing_soon=owner.status.is_closing_soon,
        closure_reason=owner.status.closure_reason,
        is_temporary_closure=owner.is_temporary_closure,
        is_special_holiday=owner.is_special_holiday,
        next_opening=NextOpeningModel(on_date=opening.on_date, time=opening.time) if opening else None,
        auto_accept_until=auto_accept_until(weekly, moment, payload.auto_accept_orders, tz=tz),
    )
