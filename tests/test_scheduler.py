"""Tests for clocks and per-category triggers."""

import asyncio
import time
from unittest.mock import MagicMock

import pytest

from marketfeed.config_loader import SchedulerConfig
from marketfeed.constants import Category
from marketfeed.scheduler.clock import AsyncioClock, ManualClock
from marketfeed.scheduler.triggers import Scheduler


class TestManualClock:
    def test_fires_on_fixed_period(self):
        clock = ManualClock()
        times = []
        clock.schedule("a", 5, lambda: times.append(clock.now))

        fired = clock.advance(16)

        assert fired == 3
        assert times == [5, 10, 15]
        assert clock.now == 16

    def test_interleaves_timers_by_due_time(self):
        clock = ManualClock()
        order = []
        clock.schedule("slow", 10, lambda: order.append("slow"))
        clock.schedule("fast", 5, lambda: order.append("fast"))

        clock.advance(20)

        # t=5 fast; t=10 slow, fast; t=15 fast; t=20 slow, fast
        assert order == ["fast", "slow", "fast", "fast", "slow", "fast"]

    def test_same_instant_fires_in_scheduling_order(self):
        clock = ManualClock()
        order = []
        clock.schedule("first", 5, lambda: order.append("first"))
        clock.schedule("second", 5, lambda: order.append("second"))

        clock.advance(5)

        assert order == ["first", "second"]

    def test_cancel_is_idempotent_and_final(self):
        clock = ManualClock()
        callback = MagicMock()
        timer = clock.schedule("a", 1, callback)

        clock.advance(2)
        timer.cancel()
        timer.cancel()
        clock.advance(10)

        assert callback.call_count == 2
        assert timer.active is False
        assert clock.pending == []

    def test_cancel_from_inside_callback(self):
        clock = ManualClock()
        calls = []

        def callback():
            calls.append(clock.now)
            timer.cancel()

        timer = clock.schedule("self-cancel", 1, callback)
        clock.advance(5)

        assert calls == [1]

    def test_failing_callback_keeps_firing(self):
        clock = ManualClock()
        callback = MagicMock(side_effect=RuntimeError("boom"))
        timer = clock.schedule("bad", 1, callback)

        clock.advance(3)

        assert callback.call_count == 3
        assert timer.active is True

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            ManualClock().schedule("a", 0, lambda: None)


@pytest.mark.asyncio
async def test_asyncio_clock_fires_and_cancels():
    clock = AsyncioClock()
    callback = MagicMock()

    timer = clock.schedule("fast", 0.01, callback)
    await asyncio.sleep(0.055)
    timer.cancel()
    count = callback.call_count
    await asyncio.sleep(0.03)

    assert count >= 2
    assert callback.call_count == count
    timer.cancel()


@pytest.mark.asyncio
async def test_asyncio_clock_skips_periods_missed_during_stall():
    loop = asyncio.get_running_loop()
    fired_at = []

    def callback():
        fired_at.append(loop.time())
        if len(fired_at) == 1:
            time.sleep(0.3)  # block the loop for six periods

    timer = AsyncioClock().schedule("stalled", 0.05, callback)
    await asyncio.sleep(0.5)
    timer.cancel()

    gaps = [b - a for a, b in zip(fired_at, fired_at[1:])]
    assert gaps
    assert min(gaps) >= 0.025
    assert len(fired_at) <= 5


@pytest.fixture
def config():
    return SchedulerConfig(
        stocks_interval_sec=5,
        indices_interval_sec=10,
        option_chain_interval_sec=15,
        chart_interval_sec=10,
    )


@pytest.fixture
def handlers():
    return {c: MagicMock(name=c.value) for c in Category}


@pytest.fixture
def scheduler(config, handlers):
    sched = Scheduler(ManualClock(), config)
    for category, handler in handlers.items():
        sched.register(category, handler)
    return sched


class TestScheduler:
    def test_each_category_uses_its_own_period(self, scheduler, handlers):
        scheduler.start_all()
        scheduler.clock.advance(30)

        assert handlers[Category.STOCKS].call_count == 6
        assert handlers[Category.INDICES].call_count == 3
        assert handlers[Category.CHART].call_count == 3
        assert handlers[Category.OPTION_CHAIN].call_count == 2

    def test_stopping_one_leaves_others_running(self, scheduler, handlers):
        scheduler.start_all()
        scheduler.clock.advance(10)

        assert scheduler.stop(Category.STOCKS) is True
        scheduler.clock.advance(20)

        assert handlers[Category.STOCKS].call_count == 2
        assert handlers[Category.INDICES].call_count == 3
        assert scheduler.is_running(Category.INDICES)
        assert not scheduler.is_running(Category.STOCKS)

    def test_stop_twice_is_safe(self, scheduler):
        scheduler.start(Category.STOCKS)

        assert scheduler.stop(Category.STOCKS) is True
        assert scheduler.stop(Category.STOCKS) is False
        assert scheduler.stop(Category.INDICES) is False

    def test_start_twice_does_not_double_fire(self, scheduler, handlers):
        assert scheduler.start(Category.STOCKS) is True
        assert scheduler.start(Category.STOCKS) is False

        scheduler.clock.advance(5)
        assert handlers[Category.STOCKS].call_count == 1

    def test_stop_all_clears_every_timer(self, scheduler, handlers):
        scheduler.start_all()
        scheduler.stop_all()
        scheduler.clock.advance(60)

        assert scheduler.running == []
        assert scheduler.clock.pending == []
        for handler in handlers.values():
            handler.assert_not_called()

    def test_restart_after_stop(self, scheduler, handlers):
        scheduler.start(Category.INDICES)
        scheduler.stop(Category.INDICES)
        scheduler.start(Category.INDICES)

        scheduler.clock.advance(10)
        assert handlers[Category.INDICES].call_count == 1

    def test_start_without_handler(self, config):
        with pytest.raises(ValueError):
            Scheduler(ManualClock(), config).start(Category.CHART)
