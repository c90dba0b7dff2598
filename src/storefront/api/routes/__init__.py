"""Route group exports."""

from . import availability, delivery, health, zones

__all__ = ["availability", "delivery", "health", "zones"]
