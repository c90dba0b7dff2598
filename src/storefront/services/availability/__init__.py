"""Shop availability services."""

from .closures import closure_has_expired, closure_in_effect, holiday_active, resolve_availability
from .reopen import AutoReopenScheduler, ReopenMonitor
from .schedule import auto_accept_until, describe_owner_status, next_opening
from .time_window import resolve_day

__all__ = [
    "resolve_availability",
    "closure_in_effect",
    "closure_has_expired",
    "holiday_active",
    "resolve_day",
    "next_opening",
    "auto_accept_until",
    "describe_owner_status",
    "AutoReopenScheduler",
    "ReopenMonitor",
]
