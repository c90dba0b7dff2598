import threading
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from src.storefront.models.domain import TemporaryClosure
from src.storefront.services.availability.reopen import AutoReopenScheduler, ReopenMonitor

UTC = ZoneInfo("UTC")
START = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
WAIT = 2.0


class _Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class _Refresh:
    def __init__(self, result: TemporaryClosure | None = None):
        self.calls = 0
        self.result = result
        self.called = threading.Event()

    def __call__(self):
        self.calls += 1
        self.called.set()
        return self.result


def _closure(minutes: int) -> TemporaryClosure:
    return TemporaryClosure(is_closed=True, closed_until=START + timedelta(minutes=minutes))


def _scheduler(closure, refresh, clock, **kwargs) -> AutoReopenScheduler:
    return AutoReopenScheduler(closure, refresh, clock=clock, tz=UTC, interval_seconds=kwargs.pop("interval", 60), **kwargs)


def _tick_until_dispatched(scheduler: AutoReopenScheduler, reset: TemporaryClosure | None = None) -> bool:
    """Tick until the previous refresh has left flight and a new one is dispatched."""
    for _ in range(200):
        if reset is not None:
            scheduler.update_closure(reset)
        if scheduler.tick():
            return True
        threading.Event().wait(0.01)
    return False


def test_refresh_fires_once_per_expiry():
    clock = _Clock(START)
    refresh = _Refresh()
    scheduler = _scheduler(_closure(5), refresh, clock)

    assert scheduler.tick() is False
    clock.advance(minutes=6)
    assert scheduler.tick() is True
    assert refresh.called.wait(WAIT)
    assert scheduler.tick() is False
    assert scheduler.tick() is False

    scheduler.cancel()
    assert refresh.calls == 1


def test_refreshed_snapshot_is_tracked():
    clock = _Clock(START)
    refresh = _Refresh(result=_closure(30))
    scheduler = _scheduler(_closure(5), refresh, clock)

    clock.advance(minutes=10)
    assert scheduler.tick() is True
    assert refresh.called.wait(WAIT)
    scheduler.cancel()

    assert scheduler.closure == _closure(30)


def test_new_transition_after_snapshot_update_refreshes_again():
    clock = _Clock(START)
    refresh = _Refresh()
    scheduler = _scheduler(_closure(5), refresh, clock)

    clock.advance(minutes=10)
    assert scheduler.tick() is True
    assert refresh.called.wait(WAIT)
    refresh.called.clear()

    scheduler.update_closure(_closure(20))
    assert scheduler.tick() is False
    clock.advance(minutes=15)
    assert _tick_until_dispatched(scheduler)
    assert refresh.called.wait(WAIT)

    scheduler.cancel()
    assert refresh.calls == 2


def test_indefinite_and_lifted_closures_never_refresh():
    clock = _Clock(START)
    refresh = _Refresh()
    indefinite = _scheduler(TemporaryClosure(is_closed=True), refresh, clock)
    lifted = _scheduler(TemporaryClosure(is_closed=False), refresh, clock)

    clock.advance(days=3)
    assert indefinite.tick() is False
    assert lifted.tick() is False

    indefinite.cancel()
    lifted.cancel()
    assert refresh.calls == 0


def test_start_evaluates_immediately():
    clock = _Clock(START)
    refresh = _Refresh()
    scheduler = _scheduler(_closure(-5), refresh, clock, interval=3600)

    scheduler.start()
    try:
        assert refresh.called.wait(WAIT)
        assert scheduler.running is True
    finally:
        scheduler.cancel()
    assert scheduler.running is False


def test_periodic_ticks_detect_later_expiry():
    clock = _Clock(START)
    refresh = _Refresh()
    scheduler = _scheduler(_closure(5), refresh, clock, interval=0.01)

    scheduler.start()
    try:
        clock.advance(minutes=6)
        assert refresh.called.wait(WAIT)
    finally:
        scheduler.cancel()
    assert refresh.calls == 1


def test_no_refresh_after_cancel():
    clock = _Clock(START)
    refresh = _Refresh()
    scheduler = _scheduler(_closure(5), refresh, clock, interval=0.01)

    scheduler.start()
    scheduler.cancel()
    clock.advance(minutes=30)

    assert scheduler.tick() is False
    assert refresh.called.wait(0.2) is False
    assert refresh.calls == 0
    assert scheduler.cancelled is True


def test_start_after_cancel_is_rejected():
    scheduler = _scheduler(_closure(5), _Refresh(), _Clock(START))
    scheduler.cancel()

    with pytest.raises(RuntimeError):
        scheduler.start()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        _scheduler(_closure(5), _Refresh(), _Clock(START), interval=0)


def test_single_refresh_in_flight():
    clock = _Clock(START)
    started = threading.Event()
    release = threading.Event()
    calls = []

    def slow_refresh():
        calls.append(1)
        started.set()
        release.wait(WAIT)
        return None

    scheduler = _scheduler(_closure(-1), slow_refresh, clock)
    assert scheduler.tick() is True
    assert started.wait(WAIT)

    scheduler.update_closure(_closure(-2))
    assert scheduler.tick() is False

    release.set()
    scheduler.cancel()
    assert len(calls) == 1


def test_cancel_waits_for_running_refresh():
    clock = _Clock(START)
    started = threading.Event()
    release = threading.Event()
    finished = threading.Event()

    def slow_refresh():
        started.set()
        release.wait(WAIT)
        finished.set()

    scheduler = _scheduler(_closure(-1), slow_refresh, clock)
    assert scheduler.tick() is True
    assert started.wait(WAIT)

    canceller = threading.Thread(target=scheduler.cancel)
    canceller.start()
    canceller.join(0.1)
    assert canceller.is_alive()

    release.set()
    canceller.join(WAIT)
    assert not canceller.is_alive()
    assert finished.is_set()


def test_failing_refresh_does_not_stop_scheduler(caplog):
    clock = _Clock(START)
    attempts = []
    done = threading.Event()

    def broken_refresh():
        attempts.append(1)
        done.set()
        raise ConnectionError("shop API unavailable")

    scheduler = _scheduler(_closure(-1), broken_refresh, clock)
    assert scheduler.tick() is True
    assert done.wait(WAIT)
    done.clear()

    assert _tick_until_dispatched(scheduler, reset=_closure(-3))
    assert done.wait(WAIT)

    scheduler.cancel()
    assert len(attempts) == 2
    assert "Refresh after closure expiry failed" in caplog.text


def test_monitor_only_watches_closed_shops():
    monitor = ReopenMonitor(clock=_Clock(START), tz=UTC, interval_seconds=3600)
    try:
        assert monitor.watch("open-shop", TemporaryClosure(is_closed=False), _Refresh()) is None
        scheduler = monitor.watch("closed-shop", _closure(30), _Refresh())
        assert scheduler is not None and scheduler.running
        assert monitor.watched() == ["closed-shop"]
    finally:
        monitor.shutdown()
    assert scheduler.cancelled
    assert monitor.watched() == []


def test_monitor_replaces_existing_scheduler():
    monitor = ReopenMonitor(clock=_Clock(START), tz=UTC, interval_seconds=3600)
    try:
        first = monitor.watch("shop-1", _closure(30), _Refresh())
        second = monitor.watch("shop-1", _closure(60), _Refresh())
        assert first.cancelled
        assert second.running
        monitor.unwatch("shop-1")
        assert second.cancelled
    finally:
        monitor.shutdown()


def test_watching_an_open_shop_stops_its_scheduler():
    monitor = ReopenMonitor(clock=_Clock(START), tz=UTC, interval_seconds=3600)
    try:
        first = monitor.watch("shop-1", _closure(30), _Refresh())
        assert monitor.watch("shop-1", TemporaryClosure(is_closed=False), _Refresh()) is None
        assert first.cancelled
        assert monitor.watched() == []
    finally:
        monitor.shutdown()


def test_concurrent_watches_leave_one_live_scheduler():
    monitor = ReopenMonitor(clock=_Clock(START), tz=UTC, interval_seconds=3600)
    barrier = threading.Barrier(8)
    started: list[AutoReopenScheduler] = []
    started_lock = threading.Lock()

    def watch(minutes: int) -> None:
        barrier.wait()
        scheduler = monitor.watch("shop-1", _closure(minutes), _Refresh())
        with started_lock:
            started.append(scheduler)

    try:
        for _ in range(20):
            started.clear()
            threads = [threading.Thread(target=watch, args=(30 + i,)) for i in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(WAIT)

            live = [scheduler for scheduler in started if not scheduler.cancelled]
            assert len(started) == 8
            assert len(live) == 1
            assert monitor.watched() == ["shop-1"]
    finally:
        monitor.shutdown()
    assert all(scheduler.cancelled for scheduler in started)
