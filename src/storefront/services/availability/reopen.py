"""Background polling that notices when a temporary closure has lapsed."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import TemporaryClosure
from ..clock import now_local, shop_timezone
from .closures import closure_has_expired

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Optional[TemporaryClosure]]


class AutoReopenScheduler:
    """Periodically re-checks one shop's closure snapshot and refreshes once it expires.

    The refresh callback runs on a single worker thread, so at most one refresh is
    in flight per scheduler. If it returns a ``TemporaryClosure`` that becomes the
    new snapshot. ``cancel()`` returns only once no callback is running, and no
    callback starts afterwards.
    """

    def __init__(
        self,
        closure: TemporaryClosure | None,
        refresh: RefreshCallback,
        *,
        interval_seconds: float | None = None,
        clock: Callable[[], datetime] | None = None,
        tz: ZoneInfo | None = None,
        grace_seconds: float | None = None,
        shop_id: str | None = None,
    ) -> None:
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else settings.reopen_poll_interval_seconds
        )
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.shop_id = shop_id or "shop"
        self._tz = tz or shop_timezone()
        self._clock = clock or (lambda: now_local(self._tz))
        self._grace_seconds = grace_seconds
        self._refresh = refresh

        self._closure = closure
        self._reported = False
        self._in_flight = False
        self._cancelled = False
        self._started = False

        self._state_lock = threading.Lock()
        self._callback_lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"reopen-{self.shop_id}")

    @property
    def closure(self) -> TemporaryClosure | None:
        with self._state_lock:
            return self._closure

    @property
    def cancelled(self) -> bool:
        with self._state_lock:
            return self._cancelled

    @property
    def running(self) -> bool:
        with self._state_lock:
            return self._started and not self._cancelled

    def start(self) -> None:
        """Evaluate immediately, then keep polling on a daemon thread."""

        with self._state_lock:
            if self._cancelled:
                raise RuntimeError("Cannot start a cancelled scheduler.")
            if self._started:
                return
            self._started = True
        logger.info(f"Watching temporary closure for {self.shop_id} every {self.interval_seconds:.0f}s")
        self._thread = threading.Thread(target=self._run, name=f"reopen-poll-{self.shop_id}", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        with self._state_lock:
            if self._cancelled:
                return
            self._cancelled = True
        self._stop.set()
        # Wait out a refresh that is already running.
        with self._callback_lock:
            pass
        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.info(f"Stopped watching temporary closure for {self.shop_id}")

    def update_closure(self, closure: TemporaryClosure | None) -> None:
        """Replace the held snapshot, e.g. after the shop record was re-fetched elsewhere."""

        with self._state_lock:
            self._closure = closure
            self._reported = False

    def tick(self) -> bool:
        """Run one check. Returns True when a refresh was dispatched."""

        with self._state_lock:
            if self._cancelled:
                return False
            expired = closure_has_expired(
                self._closure, self._clock(), tz=self._tz, grace_seconds=self._grace_seconds
            )
            if not expired:
                self._reported = False
                return False
            if self._reported or self._in_flight:
                return False
            self._reported = True
            self._in_flight = True

        logger.info(f"Temporary closure for {self.shop_id} has expired, refreshing")
        try:
            self._executor.submit(self._dispatch)
        except RuntimeError:
            # Executor shut down by a concurrent cancel().
            with self._state_lock:
                self._in_flight = False
            return False
        return True

    def _dispatch(self) -> None:
        with self._callback_lock:
            with self._state_lock:
                if self._cancelled:
                    self._in_flight = False
                    return
            try:
                refreshed = self._refresh()
            except Exception:
                logger.exception(f"Refresh after closure expiry failed for {self.shop_id}")
                refreshed = None
            with self._state_lock:
                self._in_flight = False
                if isinstance(refreshed, TemporaryClosure):
                    self._closure = refreshed

    def _run(self) -> None:
        self.tick()
        while not self._stop.wait(self.interval_seconds):
            self.tick()


class ReopenMonitor:
    """Keeps at most one ``AutoReopenScheduler`` per shop."""

    def __init__(
        self,
        *,
        interval_seconds: float | None = None,
        clock: Callable[[], datetime] | None = None,
        tz: ZoneInfo | None = None,
    ) -> None:
        self._interval_seconds = interval_seconds
        self._clock = clock
        self._tz = tz
        self._lock = threading.Lock()
        self._schedulers: dict[str, AutoReopenScheduler] = {}

    def watch(
        self,
        shop_id: str,
        closure: TemporaryClosure | None,
        refresh: RefreshCallback,
    ) -> AutoReopenScheduler | None:
        """(Re)start watching ``shop_id``; nothing is started for shops that are not closed."""

        scheduler = None
        if closure is not None and closure.is_closed:
            scheduler = AutoReopenScheduler(
                closure,
                refresh,
                interval_seconds=self._interval_seconds,
                clock=self._clock,
                tz=self._tz,
                shop_id=shop_id,
            )
        with self._lock:
            displaced = self._schedulers.pop(shop_id, None)
            if scheduler is not None:
                self._schedulers[shop_id] = scheduler
                scheduler.start()
        if displaced is not None:
            displaced.cancel()
        return scheduler

    def unwatch(self, shop_id: str) -> None:
        with self._lock:
            scheduler = self._schedulers.pop(shop_id, None)
        if scheduler is not None:
            scheduler.cancel()

    def watched(self) -> list[str]:
        with self._lock:
            return sorted(self._schedulers)

    def shutdown(self) -> None:
        with self._lock:
            schedulers = list(self._schedulers.values())
            self._schedulers.clear()
        for scheduler in schedulers:
            scheduler.cancel()
