"""Feed Module - Fan-out registry and the market engine."""

from marketfeed.feed.engine import MarketEngine
from marketfeed.feed.registry import FanOutRegistry, Subscription, SubscriptionKey

__all__ = [
    "FanOutRegistry",
    "MarketEngine",
    "Subscription",
    "SubscriptionKey",
]
