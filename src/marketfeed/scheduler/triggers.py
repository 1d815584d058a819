"""Per-category periodic triggers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from marketfeed.config_loader import SchedulerConfig
from marketfeed.constants import Category
from marketfeed.scheduler.clock import Clock, TimerHandle

logger = logging.getLogger(__name__)


class Scheduler:
    """
    One independent trigger per data category.

    Each trigger starts and stops on its own; stopping one never touches
    the others, and stopping twice is a no-op.
    """

    def __init__(self, clock: Clock, config: SchedulerConfig | None = None):
        self.clock = clock
        self.config = config or SchedulerConfig()
        self._callbacks: dict[Category, Callable[[], None]] = {}
        self._timers: dict[Category, TimerHandle] = {}

    def register(self, category: Category, callback: Callable[[], None]) -> None:
        """Bind the tick handler for a category. Takes effect on next start."""
        self._callbacks[category] = callback

    def start(self, category: Category) -> bool:
        """
        Start one trigger.

        Returns:
            False if it was already running.
        """
        if self.is_running(category):
            return False
        if category not in self._callbacks:
            raise ValueError(f"No tick handler registered for {category.value}")

        interval = self.config.interval_for(category)
        self._timers[category] = self.clock.schedule(
            category.value, interval, self._callbacks[category]
        )
        logger.info(f"Trigger {category.value} started ({interval}s)")
        return True

    def stop(self, category: Category) -> bool:
        """
        Stop one trigger.

        Returns:
            False if it was not running.
        """
        timer = self._timers.pop(category, None)
        if timer is None:
            return False
        timer.cancel()
        logger.info(f"Trigger {category.value} stopped after {timer.fire_count} ticks")
        return True

    def start_all(self) -> None:
        for category in self._callbacks:
            self.start(category)

    def stop_all(self) -> None:
        for category in list(self._timers):
            self.stop(category)

    def is_running(self, category: Category) -> bool:
        timer = self._timers.get(category)
        return timer is not None and timer.active

    @property
    def running(self) -> list[Category]:
        return [c for c in self._timers if self.is_running(c)]
