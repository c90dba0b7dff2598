"""Delivery pricing services."""

from .pricing import compute_fee, default_pricing, is_peak_hour, pricing_from_settings, quote_delivery

__all__ = ["compute_fee", "default_pricing", "is_peak_hour", "pricing_from_settings", "quote_delivery"]
