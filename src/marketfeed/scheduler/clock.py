"""Timer sources for the periodic triggers.

`AsyncioClock` fires on the running event loop; `ManualClock` only moves when
told to, so tick sequences can be driven step by step.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A repeating timer. `cancel` may be called any number of times."""

    def __init__(self, name: str, interval_sec: float, callback: Callable[[], None]):
        if interval_sec <= 0:
            raise ValueError(f"Timer interval must be positive, got: {interval_sec}")
        self.name = name
        self.interval_sec = interval_sec
        self.callback = callback
        self.fire_count = 0
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._on_cancel()

    def _on_cancel(self) -> None:
        pass

    def fire(self) -> None:
        """Run the callback once. A failing callback never stops the timer."""
        if self._cancelled:
            return
        self.fire_count += 1
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Timer {self.name} callback failed: {e}", exc_info=True)


class Clock(ABC):
    """Creates repeating timers."""

    @abstractmethod
    def schedule(
        self, name: str, interval_sec: float, callback: Callable[[], None]
    ) -> TimerHandle:
        """Start a timer firing every `interval_sec`, first firing one period from now."""


class _AsyncioTimer(TimerHandle):
    def __init__(self, name: str, interval_sec: float, callback: Callable[[], None]):
        super().__init__(name, interval_sec, callback)
        self._task: asyncio.Task | None = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        slot = 0
        # Firings land on start + n * interval; slots missed during a stall are skipped
        while not self._cancelled:
            elapsed_slots = int((loop.time() - started) // self.interval_sec)
            slot = max(slot + 1, elapsed_slots + 1)
            due = started + slot * self.interval_sec
            await asyncio.sleep(max(0.0, due - loop.time()))
            self.fire()

    def _on_cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()


class AsyncioClock(Clock):
    """Wall-clock timers running as tasks on the current event loop."""

    def schedule(
        self, name: str, interval_sec: float, callback: Callable[[], None]
    ) -> TimerHandle:
        timer = _AsyncioTimer(name, interval_sec, callback)
        timer._task = asyncio.get_running_loop().create_task(
            timer._run(), name=f"timer:{name}"
        )
        return timer


class _ManualTimer(TimerHandle):
    def __init__(
        self,
        name: str,
        interval_sec: float,
        callback: Callable[[], None],
        due: float,
        order: int,
    ):
        super().__init__(name, interval_sec, callback)
        self.due = due
        self.order = order


class ManualClock(Clock):
    """
    Logical clock advanced explicitly.

    Usage:
        clock = ManualClock()
        clock.schedule("stocks", 5, tick)
        clock.advance(15)  # fires tick three times
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._timers: list[_ManualTimer] = []
        self._counter = 0

    def schedule(
        self, name: str, interval_sec: float, callback: Callable[[], None]
    ) -> TimerHandle:
        timer = _ManualTimer(name, interval_sec, callback, self.now + interval_sec, self._counter)
        self._counter += 1
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> list[TimerHandle]:
        return [t for t in self._timers if t.active]

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing every timer that comes due in order.

        Timers due at the same instant fire in scheduling order.

        Returns:
            Number of firings.
        """
        target = self.now + seconds
        fired = 0
        while True:
            self._timers = [t for t in self._timers if t.active]
            due = [t for t in self._timers if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.order))
            self.now = timer.due
            timer.due += timer.interval_sec
            timer.fire()
            fired += 1
        self.now = target
        return fired
