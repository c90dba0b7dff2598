"""Distance-based delivery fee calculation."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import FREE, INFEASIBLE, Coordinate, DeliveryQuote, FeeOutcome, PricingConfig
from ..clock import shop_timezone, to_local
from ..geospatial import distance_km

logger = logging.getLogger(__name__)


def default_pricing() -> PricingConfig:
    return PricingConfig(
        base_fee=settings.base_delivery_fee,
        rate_per_km_peak=settings.peak_hour_rate,
        rate_per_km_normal=settings.normal_hour_rate,
        free_delivery_threshold=settings.free_delivery_threshold,
        max_delivery_distance_km=settings.max_delivery_distance_km,
    )


def _finite(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def pricing_from_settings(
    base_delivery_fee: Any = None,
    price_per_km: Any = None,
    *,
    defaults: PricingConfig | None = None,
) -> tuple[PricingConfig, Optional[float]]:
    """Apply admin settings to the default pricing.

    Returns the pricing config and the admin override rate (``None`` when the
    admin has not set one). A base fee that is not a finite number becomes 0; a
    rate that is not a finite number falls back to ``settings.fallback_price_per_km``.
    """

    config = defaults or default_pricing()
    if base_delivery_fee is not None:
        base = _finite(base_delivery_fee)
        config = PricingConfig(
            base_fee=base if base is not None else 0.0,
            rate_per_km_peak=config.rate_per_km_peak,
            rate_per_km_normal=config.rate_per_km_normal,
            free_delivery_threshold=config.free_delivery_threshold,
            max_delivery_distance_km=config.max_delivery_distance_km,
        )

    override_rate: Optional[float] = None
    if price_per_km is not None:
        rate = _finite(price_per_km)
        override_rate = rate if rate is not None else settings.fallback_price_per_km
    return config, override_rate


def is_peak_hour(now: datetime, *, tz: ZoneInfo | None = None) -> bool:
    hour = to_local(now, tz or shop_timezone()).hour
    return settings.peak_hour_start <= hour < settings.peak_hour_end


def rate_for(
    config: PricingConfig,
    now: datetime,
    override_rate: float | None = None,
    *,
    tz: ZoneInfo | None = None,
) -> float:
    if override_rate is not None:
        return override_rate
    return config.rate_per_km_peak if is_peak_hour(now, tz=tz) else config.rate_per_km_normal


def compute_fee(
    distance: Optional[float],
    subtotal: float,
    config: PricingConfig,
    now: datetime,
    override_rate: float | None = None,
    *,
    tz: ZoneInfo | None = None,
) -> FeeOutcome:
    """Fee for delivering an order of ``subtotal`` over ``distance`` km.

    Orders above the free-delivery threshold are free regardless of distance.
    Unknown distances and distances beyond the delivery range are infeasible.
    Everything else costs ``floor(base + distance * rate)``.
    """

    if subtotal > config.free_delivery_threshold:
        return FREE
    if distance is None or distance > config.max_delivery_distance_km:
        logger.debug(f"Delivery infeasible for distance={distance} (max {config.max_delivery_distance_km} km)")
        return INFEASIBLE
    rate = rate_for(config, now, override_rate, tz=tz)
    return math.floor(config.base_fee + distance * rate)


def quote_delivery(
    origin: Coordinate | None,
    destination: Coordinate | None,
    subtotal: float,
    config: PricingConfig | None = None,
    now: datetime | None = None,
    override_rate: float | None = None,
    *,
    tz: ZoneInfo | None = None,
) -> DeliveryQuote:
    """Measure the shop-to-customer distance and price it."""

    zone = tz or shop_timezone()
    config = config or default_pricing()
    moment = now or datetime.now(zone)
    distance = distance_km(origin, destination)
    fee = compute_fee(distance, subtotal, config, moment, override_rate, tz=zone)
    return DeliveryQuote(
        distance_km=distance,
        fee=fee,
        rate=rate_for(config, moment, override_rate, tz=zone),
        is_peak=is_peak_hour(moment, tz=zone),
    )
