"""Market Engine - owns simulated market state and fans updates out on each tick."""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from marketfeed.config_loader import AppConfig
from marketfeed.constants import Category, Topic
from marketfeed.data.analytics import PutCallRatio, put_call_ratio
from marketfeed.data.market_data import Candle, MarketIndex, OptionChain, Stock
from marketfeed.data.news import NewsFeed, NewsItem
from marketfeed.data.price_model import PriceModel
from marketfeed.data.seed import generate_chart, seed_indices, seed_option_chains, seed_stocks
from marketfeed.feed.registry import FanOutRegistry, Subscription, SubscriptionKey
from marketfeed.notifications.center import Notification, NotificationCenter, NotificationEvent
from marketfeed.scheduler.alert_engine import AlertEngine
from marketfeed.scheduler.clock import AsyncioClock, Clock
from marketfeed.scheduler.triggers import Scheduler
from marketfeed.watchlist.store import AlertRule, AlertRuleRequest, WatchlistStore

logger = logging.getLogger(__name__)

_CATEGORY_TOPICS = {Category.STOCKS: Topic.STOCKS, Category.INDICES: Topic.INDICES}


class MarketEngine:
    """
    Simulated real-time market core.

    Holds the authoritative snapshots for every category, perturbs them on
    each scheduler tick and publishes the new snapshots to subscribers.
    Stock updates are also run through the alert rules; rules that fire are
    logged as notifications and pushed to notification subscribers.

    Usage:
        engine = MarketEngine(config, clock=ManualClock())
        unsubscribe = engine.subscribe_to_category(Category.STOCKS, on_stocks)
        stop = engine.start()
        ...
        stop()
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        news: NewsFeed | None = None,
    ):
        self.config = config or AppConfig()
        self.rng = rng or random.Random(self.config.environment.random_seed)
        self.clock = clock or AsyncioClock()

        self.registry = FanOutRegistry()
        self.model = PriceModel(self.config.perturbation, self.config.chart, self.rng)
        self.scheduler = Scheduler(self.clock, self.config.scheduler)
        self.watchlists = WatchlistStore(seed_defaults=self.config.watchlists.seed_defaults)
        self.notifications = NotificationCenter()
        self.alerts = AlertEngine()
        self.news = news or NewsFeed()

        self._stocks: dict[str, Stock] = {s.symbol: s for s in sorted(seed_stocks(), key=lambda s: s.symbol)}
        self._indices: dict[str, MarketIndex] = {i.symbol: i for i in seed_indices()}
        self._charts: dict[str, deque[Candle]] = {}
        self._chains: dict[str, OptionChain] = seed_option_chains()

        self.scheduler.register(Category.STOCKS, self.tick_stocks)
        self.scheduler.register(Category.INDICES, self.tick_indices)
        self.scheduler.register(Category.CHART, self.tick_charts)
        self.scheduler.register(Category.OPTION_CHAIN, self.tick_option_chains)

        self._alert_subscription = self.registry.subscribe(
            SubscriptionKey.of(Topic.STOCKS), self._evaluate_alerts
        )

    # ============================================
    # Lifecycle
    # ============================================

    def start(self) -> Callable[[], None]:
        """
        Start every category trigger.

        Returns:
            Function stopping the engine.
        """
        self.scheduler.start_all()
        logger.info(f"Market engine started: {[c.value for c in self.scheduler.running]}")
        return self.stop

    def stop(self) -> None:
        """Cancel every trigger. Safe to call repeatedly."""
        if not self.scheduler.running:
            return
        self.scheduler.stop_all()
        logger.info("Market engine stopped")

    @property
    def is_running(self) -> bool:
        return bool(self.scheduler.running)

    # ============================================
    # Ticks
    # ============================================

    def tick_stocks(self) -> tuple[Stock, ...]:
        self._stocks = {sym: self.model.perturb_stock(s) for sym, s in self._stocks.items()}
        snapshot = tuple(self._stocks.values())
        logger.debug(f"Stocks tick: {len(snapshot)} quotes")
        self.registry.publish(SubscriptionKey.of(Topic.STOCKS), snapshot)
        return snapshot

    def tick_indices(self) -> tuple[MarketIndex, ...]:
        self._indices = {sym: self.model.perturb_index(i) for sym, i in self._indices.items()}
        snapshot = tuple(self._indices.values())
        logger.debug(f"Indices tick: {len(snapshot)} levels")
        self.registry.publish(SubscriptionKey.of(Topic.INDICES), snapshot)
        return snapshot

    def tick_charts(self) -> None:
        """Append one candle to every subscribed chart."""
        for symbol in self.registry.symbols_for(Topic.CHART):
            candles = self._charts.get(symbol)
            if not candles:
                logger.debug(f"Chart tick: no series for {symbol}")
                continue
            # deque maxlen drops the oldest candle once the window is full
            candles.append(self.model.next_candle(candles[-1]))
            self.registry.publish(SubscriptionKey.of(Topic.CHART, symbol), tuple(candles))

    def tick_option_chains(self) -> None:
        """Perturb every leg of every subscribed chain and republish whole chains."""
        for symbol in self.registry.symbols_for(Topic.OPTION_CHAIN):
            chain = self._chains.get(symbol)
            if chain is None:
                logger.debug(f"Option chain tick: no chain for {symbol}")
                continue
            chain = replace(
                chain,
                calls=tuple(self.model.perturb_option_leg(leg) for leg in chain.calls),
                puts=tuple(self.model.perturb_option_leg(leg) for leg in chain.puts),
            )
            self._chains[symbol] = chain
            self.registry.publish(SubscriptionKey.of(Topic.OPTION_CHAIN, symbol), chain)

    def _evaluate_alerts(self, stocks: tuple[Stock, ...]) -> None:
        hits = self.alerts.evaluate(stocks, self.watchlists.rules())
        if not hits:
            return
        recorded = tuple(self.notifications.record(NotificationEvent.from_alert(h)) for h in hits)
        self.registry.publish(SubscriptionKey.of(Topic.NOTIFICATIONS), recorded)

    # ============================================
    # Subscriptions
    # ============================================

    def _subscribe(
        self, key: SubscriptionKey, callback: Callable[[Any], None], current: Any
    ) -> Subscription:
        sub = self.registry.subscribe(key, callback)
        if current is not None:
            try:
                callback(current)
            except Exception as e:
                logger.error(f"Initial snapshot for {key} failed: {e}", exc_info=True)
        return sub

    def subscribe_to_category(
        self, category: Category, callback: Callable[[Any], None], replay: bool = True
    ) -> Subscription:
        """Subscribe to all stocks or all indices."""
        topic = _CATEGORY_TOPICS.get(Category(category))
        if topic is None:
            raise ValueError(f"Category {category} is per-symbol; use its symbol subscription")
        current = None
        if replay:
            current = self.get_stocks() if topic == Topic.STOCKS else self.get_indices()
        return self._subscribe(SubscriptionKey.of(topic), callback, current)

    def subscribe_to_chart(
        self, symbol: str, callback: Callable[[tuple[Candle, ...]], None], replay: bool = True
    ) -> Subscription:
        key = SubscriptionKey.of(Topic.CHART, symbol)
        self._ensure_chart(key.symbol)
        current = self.get_chart(key.symbol) if replay else None
        return self._subscribe(key, callback, current or None)

    def subscribe_to_option_chain(
        self, symbol: str, callback: Callable[[OptionChain], None], replay: bool = True
    ) -> Subscription:
        key = SubscriptionKey.of(Topic.OPTION_CHAIN, symbol)
        current = self.get_option_chain(key.symbol) if replay else None
        return self._subscribe(key, callback, current)

    def subscribe_to_notifications(
        self, callback: Callable[[tuple[Notification, ...]], None]
    ) -> Subscription:
        """Receive each batch of newly recorded notifications."""
        return self.registry.subscribe(SubscriptionKey.of(Topic.NOTIFICATIONS), callback)

    def _ensure_chart(self, symbol: str) -> None:
        if symbol in self._charts:
            return
        stock = self._stocks.get(symbol)
        if stock is None:
            logger.warning(f"No chart data for unknown symbol {symbol}")
            return
        chart_cfg = self.config.chart
        candles = generate_chart(
            symbol, stock.close, chart_cfg.seed_candles, chart_cfg.candle_minutes, self.rng
        )
        self._charts[symbol] = deque(candles, maxlen=chart_cfg.window_size)

    # ============================================
    # Reads
    # ============================================

    def get_stocks(self) -> tuple[Stock, ...]:
        return tuple(self._stocks.values())

    def get_stock(self, symbol: str) -> Stock | None:
        return self._stocks.get(symbol.upper())

    def get_indices(self) -> tuple[MarketIndex, ...]:
        return tuple(self._indices.values())

    def get_index(self, symbol: str) -> MarketIndex | None:
        return self._indices.get(symbol.upper())

    def get_chart(self, symbol: str) -> tuple[Candle, ...]:
        return tuple(self._charts.get(symbol.upper(), ()))

    def get_option_chain(self, symbol: str) -> OptionChain | None:
        return self._chains.get(symbol.upper())

    def get_put_call_ratio(self, symbol: str) -> PutCallRatio | None:
        chain = self.get_option_chain(symbol)
        return put_call_ratio(chain) if chain else None

    # ============================================
    # Alerts and notifications
    # ============================================

    def create_alert_rule(
        self, watchlist_id: str, symbol: str, rule: AlertRuleRequest | dict[str, Any]
    ) -> AlertRule | None:
        """
        Attach an alert rule to a watched symbol.

        Raises:
            ValueError: If the threshold is not numeric.
        """
        return self.watchlists.add_alert(watchlist_id, symbol, rule)

    def delete_alert_rule(self, watchlist_id: str, symbol: str, rule_id: str) -> bool:
        return self.watchlists.remove_alert(watchlist_id, symbol, rule_id)

    def publish_news(self, news: NewsItem) -> Notification:
        """Log a news item as a notification and push it to subscribers."""
        notification = self.notifications.record(NotificationEvent.from_news(news))
        self.registry.publish(SubscriptionKey.of(Topic.NOTIFICATIONS), (notification,))
        return notification

    def get_notifications(self) -> list[Notification]:
        return self.notifications.list_notifications()

    def mark_read(self, notification_id: str) -> bool:
        return self.notifications.mark_read(notification_id)

    def mark_all_read(self) -> int:
        return self.notifications.mark_all_read()

    def delete_notification(self, notification_id: str) -> bool:
        return self.notifications.delete(notification_id)

    @property
    def unread_count(self) -> int:
        return self.notifications.unread_count
