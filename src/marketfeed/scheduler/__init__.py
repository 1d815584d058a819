"""Scheduler Module - Clocks, per-category triggers and alert evaluation."""

from marketfeed.scheduler.alert_engine import AlertEngine, TriggeredRule
from marketfeed.scheduler.clock import AsyncioClock, Clock, ManualClock, TimerHandle
from marketfeed.scheduler.triggers import Scheduler

__all__ = [
    "AlertEngine",
    "AsyncioClock",
    "Clock",
    "ManualClock",
    "Scheduler",
    "TimerHandle",
    "TriggeredRule",
]
