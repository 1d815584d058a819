"""Fan-out registry: subscription key -> ordered callbacks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from marketfeed.constants import Topic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubscriptionKey:
    """A global topic (symbol None) or a per-symbol scope of a topic."""

    topic: Topic
    symbol: str | None = None

    def __post_init__(self) -> None:
        if self.topic.is_per_symbol and not self.symbol:
            raise ValueError(f"Topic {self.topic.value} needs a symbol")
        if not self.topic.is_per_symbol and self.symbol is not None:
            raise ValueError(f"Topic {self.topic.value} is global and takes no symbol")

    @classmethod
    def of(cls, topic: Topic, symbol: str | None = None) -> SubscriptionKey:
        return cls(topic, symbol.upper() if symbol else None)

    def __str__(self) -> str:
        return f"{self.topic.value}:{self.symbol}" if self.symbol else self.topic.value


class Subscription:
    """Handle returned by subscribe. Calling it (or `unsubscribe`) detaches it."""

    def __init__(self, registry: FanOutRegistry, key: SubscriptionKey, callback: Callable[[Any], None]):
        self._registry = registry
        self.key = key
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._registry._remove(self)

    __call__ = unsubscribe


class FanOutRegistry:
    """
    Delivers each published snapshot to every live subscriber of its key.

    Delivery is synchronous and in registration order. A subscriber that
    raises is logged and skipped; the rest still receive the snapshot.
    A subscriber removed mid-publish (even by itself) receives nothing more.
    """

    def __init__(self) -> None:
        self._subs: dict[SubscriptionKey, list[Subscription]] = {}
        self.error_count = 0

    def subscribe(self, key: SubscriptionKey, callback: Callable[[Any], None]) -> Subscription:
        sub = Subscription(self, key, callback)
        self._subs.setdefault(key, []).append(sub)
        logger.debug(f"Subscribed to {key} ({len(self._subs[key])} total)")
        return sub

    def _remove(self, sub: Subscription) -> None:
        subs = self._subs.get(sub.key)
        if not subs:
            return
        # Rebind rather than mutate so an in-flight publish keeps its own list
        remaining = [s for s in subs if s is not sub]
        if remaining:
            self._subs[sub.key] = remaining
        else:
            del self._subs[sub.key]
        logger.debug(f"Unsubscribed from {sub.key} ({len(remaining)} left)")

    def publish(self, key: SubscriptionKey, snapshot: Any) -> int:
        """
        Invoke every callback registered for `key`.

        Returns:
            Number of callbacks that completed without raising.
        """
        delivered = 0
        for sub in tuple(self._subs.get(key, ())):
            if not sub.active:
                continue
            try:
                sub.callback(snapshot)
                delivered += 1
            except Exception as e:
                self.error_count += 1
                logger.error(f"Subscriber on {key} failed: {e}", exc_info=True)
        return delivered

    def subscriber_count(self, key: SubscriptionKey) -> int:
        return len(self._subs.get(key, ()))

    def symbols_for(self, topic: Topic) -> list[str]:
        """Symbols with at least one live subscriber on a per-symbol topic."""
        return [k.symbol for k in self._subs if k.topic == topic and k.symbol is not None]

    def clear(self) -> None:
        for subs in list(self._subs.values()):
            for sub in subs:
                sub.active = False
        self._subs.clear()
